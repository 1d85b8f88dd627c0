"""Unit tests for response formatting helpers."""

from __future__ import annotations

from flask import Flask

from lankatax.backend.services.response_builder import build_calculation_response


def test_build_calculation_response_returns_json(app: Flask) -> None:
    """Formatting helper should generate an uncached JSON response tuple."""

    with app.app_context():
        response, status = build_calculation_response({"tax": {"final_tax_payable": 1.5}})

    assert status == 200
    assert response.get_json() == {"tax": {"final_tax_payable": 1.5}}
    assert response.headers["Cache-Control"] == "no-store"
