"""
Explicit field-change events.

The store does not rely on ORM dirty tracking to capture who changed what.
Whoever mutates a tracked field builds a ``FieldChange`` and hands it to a
change recorder in the same transaction.
"""

from dataclasses import dataclass
from typing import Any
from uuid import UUID

# Fields edited by catalog administration.
CATALOG_TRACKED_FIELDS = ("title", "rental_price", "sale_price")

# Fields moved by buy / rent / return.
INVENTORY_TRACKED_FIELDS = ("stock", "availability")


@dataclass(frozen=True)
class FieldChange:
    """One field of one movie changed from ``old_value`` to ``new_value``."""

    movie_id: UUID
    actor_id: int
    field: str
    old_value: Any
    new_value: Any


def diff_fields(
    movie_id: UUID,
    actor_id: int,
    before: dict[str, Any],
    after: dict[str, Any],
    fields: tuple[str, ...],
) -> list[FieldChange]:
    """Return a ``FieldChange`` for every tracked field whose value differs."""
    return [
        FieldChange(
            movie_id=movie_id,
            actor_id=actor_id,
            field=name,
            old_value=before.get(name),
            new_value=after.get(name),
        )
        for name in fields
        if name in after and before.get(name) != after.get(name)
    ]
