"""REST endpoints for tax and audit risk calculations."""

from __future__ import annotations

import logging
from typing import Any

from flask import Blueprint, request

from lankatax.backend.services import (
    build_calculation_response,
    calculate_tax,
    parse_calculation_payload,
)

blueprint = Blueprint("calculations", __name__, url_prefix="/api/v1")

_LOGGER = logging.getLogger(__name__)


@blueprint.post("/calculations")
def create_calculation() -> tuple[Any, int]:
    """Create a calculation from the snapshot submitted as JSON."""

    payload = parse_calculation_payload(request)
    result = calculate_tax(payload)

    return build_calculation_response(result)


@blueprint.post("/calculations/<tax_year>")
def create_calculation_for_year(tax_year: str) -> tuple[Any, int]:
    """Create a calculation for the tax year named in the path."""

    payload = parse_calculation_payload(request)
    if payload.get("tax_year") not in (None, "", tax_year):
        _LOGGER.info(
            "Path tax year %s overrides body value %s", tax_year, payload["tax_year"]
        )
    payload["tax_year"] = tax_year
    result = calculate_tax(payload)

    return build_calculation_response(result)
