"""Owner reference checks applied before any computation."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol, TypeVar

from lankatax.backend.app.errors import DataIntegrityError
from lankatax.backend.app.models import Entity


class _Owned(Protocol):
    id: str
    owner_id: str


OwnedT = TypeVar("OwnedT", bound=_Owned)


class _Dated(Protocol):
    tax_year: str


DatedT = TypeVar("DatedT", bound=_Dated)


def ensure_known_owners(
    entities: Iterable[Entity] | None, *collections: Iterable[_Owned]
) -> None:
    """Raise :class:`DataIntegrityError` when a record belongs to an unknown entity.

    Nothing is checked when ``entities`` is ``None``; the caller has not
    supplied a reference list.
    """

    if entities is None:
        return

    known = {entity.id for entity in entities}
    for records in collections:
        for record in records:
            if record.owner_id not in known:
                raise DataIntegrityError(
                    f"Record {record.id} references unknown owner '{record.owner_id}'"
                )


def select_for_owner(records: Iterable[OwnedT], owner_id: str | None) -> list[OwnedT]:
    if owner_id is None:
        return list(records)
    return [record for record in records if record.owner_id == owner_id]


def select_for_year(records: Iterable[DatedT], tax_year: str) -> list[DatedT]:
    return [record for record in records if record.tax_year == tax_year]


__all__ = ["ensure_known_owners", "select_for_owner", "select_for_year"]
