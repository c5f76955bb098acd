"""Filter used by filtered policy loading."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, fields

from casbin_sqladapter.errors import InvalidFilterError


@dataclass
class Filter:
    """Per-column candidate values.

    An empty list leaves the column unconstrained, one value means equality,
    several values mean set membership. A filter with every list empty
    matches all rows.
    """

    ptype: list[str] = field(default_factory=list)
    v0: list[str] = field(default_factory=list)
    v1: list[str] = field(default_factory=list)
    v2: list[str] = field(default_factory=list)
    v3: list[str] = field(default_factory=list)
    v4: list[str] = field(default_factory=list)
    v5: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        # A lone string is one candidate, not a sequence of characters.
        for f in fields(self):
            candidates = getattr(self, f.name)
            if isinstance(candidates, str):
                candidates = [candidates]
            setattr(self, f.name, [str(c) for c in candidates])

    def columns(self) -> tuple[list[str], ...]:
        """Candidate lists in column order (p_type, v0..v5)."""
        return (self.ptype, self.v0, self.v1, self.v2, self.v3, self.v4, self.v5)

    @property
    def is_empty(self) -> bool:
        return not any(self.columns())

    @classmethod
    def from_mapping(cls, data: Mapping[str, Sequence[str]]) -> Filter:
        """Build a filter from ``{"ptype": [...], "v0": [...]}``; unknown keys are rejected."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise InvalidFilterError(f"unknown filter fields: {', '.join(unknown)}")
        return cls(**data)
