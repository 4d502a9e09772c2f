"""Change events pushed to subscribers when a watched row changes."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from truthvote.memory.models import Base


class ChangeType(enum.StrEnum):
    """Kind of row change."""

    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    """One row change on one table.

    ``new`` is the row after the change (INSERT, UPDATE); ``old`` is the
    row before it (UPDATE, DELETE).  Rows are plain dicts keyed by column
    name with ISO-8601 timestamps, so they serialise to JSON unchanged.
    """

    table: str
    type: ChangeType
    new: dict[str, Any] = field(default_factory=dict)
    old: dict[str, Any] = field(default_factory=dict)

    @property
    def row(self) -> dict[str, Any]:
        """The row the event is about (``new`` if present, else ``old``)."""
        return self.new or self.old

    def to_message(self) -> dict[str, Any]:
        """WebSocket frame for this event."""
        return {
            "type": "change",
            "table": self.table,
            "event": self.type.value,
            "new": self.new,
            "old": self.old,
        }

    @classmethod
    def from_message(cls, data: dict[str, Any]) -> ChangeEvent:
        """Inverse of :meth:`to_message`."""
        return cls(
            table=data["table"],
            type=ChangeType(data["event"]),
            new=data.get("new") or {},
            old=data.get("old") or {},
        )


def row_of(obj: Base) -> dict[str, Any]:
    """Snapshot an ORM object's column values as a JSON-friendly dict."""
    row: dict[str, Any] = {}
    for column in obj.__table__.columns:
        value = getattr(obj, column.key)
        if isinstance(value, datetime):
            # SQLite hands back naive values; every stored timestamp is UTC.
            if value.tzinfo is None:
                value = value.replace(tzinfo=UTC)
            value = value.isoformat()
        row[column.key] = value
    return row
