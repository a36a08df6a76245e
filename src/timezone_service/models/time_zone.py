"""
Time zone request/report models

Both are built fresh for every request. Nothing here is shared between
requests, so concurrent handlers never see each other's entries.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable

UTC_KEY = "UTC"


@dataclass(frozen=True)
class TimeZoneRequest:
    """
    Set of requested zone names.

    Names are kept exactly as given (no trimming). Duplicates collapse
    because the container is a set; iteration order is unspecified.
    """
    names: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def from_names(cls, names: Iterable[str]) -> "TimeZoneRequest":
        return cls(names=frozenset(names))

    @property
    def is_empty(self) -> bool:
        return not self.names

    def __len__(self) -> int:
        return len(self.names)

    def __iter__(self):
        return iter(self.names)


@dataclass
class TimeZoneReport:
    """
    Mapping zone name -> formatted timestamp for one request.

    Holds exactly one entry per distinct requested name, or a single
    "UTC" entry when no names were requested.
    """
    entries: Dict[str, str] = field(default_factory=dict)

    def add(self, name: str, timestamp: str) -> None:
        self.entries[name] = timestamp

    def to_payload(self) -> Dict[str, Dict[str, str]]:
        """JSON body for the /time endpoint."""
        return {"timezones": dict(self.entries)}

    def __len__(self) -> int:
        return len(self.entries)
