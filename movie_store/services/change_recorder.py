"""
ChangeRecorder -- persistence of explicit field-change events.

Whoever mutates a tracked movie field builds ``FieldChange`` values and hands
them to a ``ChangeSink``.  ``ChangeRecorder`` is the default sink: it appends
one ``MovieChangeLog`` row per change inside the caller's transaction, so a
rolled-back operation leaves no history behind.
"""

from typing import Any, Iterable, Protocol

from movie_store.domain.changes import FieldChange
from movie_store.logging_config import get_logger
from movie_store.models.change_log import MovieChangeLog
from movie_store.services.base import BaseService

logger = get_logger("services.change_recorder")


class ChangeSink(Protocol):
    def record(self, changes: Iterable[FieldChange]) -> None:
        ...


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class ChangeRecorder(BaseService[MovieChangeLog]):
    """Appends ``MovieChangeLog`` rows; flush only."""

    def record(self, changes: Iterable[FieldChange]) -> None:
        rows = [
            MovieChangeLog(
                movie_id=change.movie_id,
                actor_id=change.actor_id,
                field=change.field,
                old_value=_as_text(change.old_value),
                new_value=_as_text(change.new_value),
                created_at=self.clock.now(),
            )
            for change in changes
        ]
        if not rows:
            return
        self.session.add_all(rows)
        self.session.flush()
        logger.debug(
            "field_changes_recorded",
            extra={"fields": [row.field for row in rows]},
        )
