"""Expose configuration metadata consumed by client applications.

These endpoints bridge the YAML-backed year configuration and the clients so
that forms can show relief amounts, band tables, and warning messages without
duplicating the tax rules.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from flask import Blueprint, jsonify

from lankatax.backend.app.http import problem_response
from lankatax.backend.app.models import ASSET_CATEGORY_LABELS
from lankatax.backend.app.services.calculators import format_percentage
from lankatax.backend.config.schema import TaxBracket, YearConfiguration
from lankatax.backend.config.year_config import (
    available_years,
    load_manifest,
    load_year_configuration,
)
from lankatax.backend.tax_year import format_tax_year
from lankatax.backend.version import get_project_version

blueprint = Blueprint("config", __name__, url_prefix="/api/v1/config")


def get_configuration_metadata() -> dict[str, Any]:
    """Expose runtime metadata derived from the configuration manifest."""

    manifest = load_manifest()
    supported_years = list(manifest.supported_years)
    default_year = supported_years[-1] if supported_years else None
    return {
        "version": get_project_version(),
        "supported_years": supported_years,
        "default_year": default_year,
    }


def _serialise_brackets(brackets: Sequence[TaxBracket]) -> list[dict[str, Any]]:
    serialised: list[dict[str, Any]] = []
    lower = 0.0
    for bracket in brackets:
        upper = None if bracket.width is None else lower + bracket.width
        serialised.append(
            {
                "lower": lower,
                "upper": upper,
                "width": bracket.width,
                "rate": bracket.rate,
                "rate_label": format_percentage(bracket.rate),
                "pending_confirmation": bracket.pending_confirmation,
            }
        )
        if upper is not None:
            lower = upper
    return serialised


def _serialise_year(config: YearConfiguration) -> dict[str, Any]:
    return {
        "year": config.year,
        "display_year": format_tax_year(config.tax_year),
        "meta": dict(config.meta),
        "reliefs": {
            "personal": config.reliefs.personal,
            "solar_cap": config.reliefs.solar_cap,
        },
        "investment": {"rent_relief_rate": config.investment.rent_relief_rate},
        "brackets": _serialise_brackets(config.brackets),
        "audit_risk": config.audit_risk.model_dump(mode="json"),
        "warnings": [entry.model_dump(mode="json") for entry in config.warnings],
    }


@blueprint.get("/meta")
def get_application_metadata() -> tuple[Any, int]:
    """Expose lightweight application metadata such as the version identifier."""

    payload = get_configuration_metadata()
    payload["asset_categories"] = [
        {"code": code, "label": label} for code, label in ASSET_CATEGORY_LABELS.items()
    ]
    return jsonify(payload), 200


@blueprint.get("/years")
def list_years() -> tuple[Any, int]:
    """Return all configured years with their relief and band tables."""

    years = [_serialise_year(load_year_configuration(year)) for year in available_years()]
    metadata = get_configuration_metadata()
    payload = {
        "years": years,
        "default_year": metadata["default_year"],
        "supported_years": metadata["supported_years"],
    }
    return jsonify(payload), 200


@blueprint.get("/<int:year>/brackets")
def get_year_brackets(year: int) -> tuple[Any, int]:
    """Return the progressive band table configured for ``year``."""

    try:
        configuration = load_year_configuration(year)
    except FileNotFoundError as exc:
        return problem_response("not_found", status=404, message=str(exc)).to_response()

    payload = {
        "year": configuration.year,
        "display_year": format_tax_year(configuration.tax_year),
        "personal_relief": configuration.reliefs.personal,
        "brackets": _serialise_brackets(configuration.brackets),
    }
    return jsonify(payload), 200
