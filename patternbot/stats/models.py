"""
Data models for pattern match statistics.

PatternStatistics is serialized with the snapshot field names
(count, examples, lastMatched, channels, users) so existing snapshot files
stay readable.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(dt: datetime) -> str:
    """ISO-8601 UTC with millisecond precision, e.g. 2025-01-02T03:04:05.678Z."""
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    """Parse a snapshot timestamp back into an aware datetime."""
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@dataclass
class PersistenceError(Exception):
    """Raised when a snapshot, report or export cannot be written."""
    path: str
    message: str

    def __str__(self):
        return f"Failed to write {self.path}: {self.message}"


@dataclass
class MatchEvent:
    """One accepted match, folded into the aggregate and then discarded."""
    content: str
    pattern: str
    confidence: float
    channel_id: str
    channel_name: str
    user_id: str
    user_name: str
    space_id: Optional[str] = None
    space_name: Optional[str] = None
    timestamp: datetime = field(default_factory=utc_now)


@dataclass
class NamedCount:
    """Per-channel or per-user counter; the name is kept from first sight."""
    name: str
    count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "count": self.count}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NamedCount":
        return cls(name=str(data.get("name", "")), count=int(data.get("count", 0)))


@dataclass
class PatternStatistics:
    """Aggregated statistics for one pattern."""
    count: int = 0
    last_matched: Optional[str] = None
    examples: List[str] = field(default_factory=list)
    channels: Dict[str, NamedCount] = field(default_factory=dict)
    users: Dict[str, NamedCount] = field(default_factory=dict)

    def top_channels(self, limit: int = 3) -> List[tuple]:
        """(channel_id, NamedCount) pairs by count, ties in insertion order."""
        return sorted(self.channels.items(), key=lambda item: -item[1].count)[:limit]

    def top_users(self, limit: int = 3) -> List[tuple]:
        """(user_id, NamedCount) pairs by count, ties in insertion order."""
        return sorted(self.users.items(), key=lambda item: -item[1].count)[:limit]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the snapshot representation."""
        return {
            "count": self.count,
            "examples": list(self.examples),
            "lastMatched": self.last_matched,
            "channels": {key: value.to_dict() for key, value in self.channels.items()},
            "users": {key: value.to_dict() for key, value in self.users.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PatternStatistics":
        """
        Build from the snapshot representation.

        Raises:
            ValueError: If the entry is not an object, has non-numeric counts
                or examples that are not a list
        """
        if not isinstance(data, dict):
            raise ValueError(f"expected an object, got {type(data).__name__}")

        examples = data.get("examples") or []
        if not isinstance(examples, list):
            raise ValueError(f"examples must be a list, got {type(examples).__name__}")

        return cls(
            count=int(data.get("count", 0)),
            last_matched=data.get("lastMatched"),
            examples=[str(example) for example in examples],
            channels={
                str(key): NamedCount.from_dict(value)
                for key, value in (data.get("channels") or {}).items()
            },
            users={
                str(key): NamedCount.from_dict(value)
                for key, value in (data.get("users") or {}).items()
            },
        )


@dataclass
class TopPatternEntry:
    """Summary row returned by top-N queries."""
    pattern: str
    count: int
    last_matched: Optional[str]
