"""Output formatting for CLI commands."""

from __future__ import annotations

import json
from collections.abc import Sequence

from casbin_sqladapter.codec import policy_line


def format_rules(rules: Sequence[tuple[str, list[str]]], *, output_format: str = "text") -> str:
    if output_format == "json":
        data = {
            "rules": [{"ptype": ptype, "rule": rule} for ptype, rule in rules],
            "count": len(rules),
        }
        return json.dumps(data, indent=2)

    lines = [policy_line(ptype, rule) for ptype, rule in rules]
    lines.append(f"\n({len(rules)} rules)")
    return "\n".join(lines)
