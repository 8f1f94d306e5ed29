from __future__ import annotations


def contains_pattern(term: str) -> str:
    """ILIKE pattern matching ``term`` as a literal substring (escape char ``\\``)."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
