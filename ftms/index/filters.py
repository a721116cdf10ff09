"""Parameterized WHERE clause construction for file listings."""

from __future__ import annotations

from typing import List, Optional, Tuple

from ftms.models.file import ListFilter

LIKE_ESCAPE = "\\"


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so `value` matches literally."""

    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def build_where(list_filter: Optional[ListFilter]) -> Tuple[str, List[str]]:
    """Return `(where_sql, params)`; `where_sql` is empty when no predicate applies."""

    if list_filter is None:
        return "", []

    clauses: List[str] = []
    params: List[str] = []

    if list_filter.session_id is not None:
        clauses.append("session_id = ?")
        params.append(list_filter.session_id)
    if list_filter.mime_prefix:
        clauses.append(f"mime_type LIKE ? ESCAPE '{LIKE_ESCAPE}'")
        params.append(escape_like(list_filter.mime_prefix) + "%")

    if not clauses:
        return "", []
    return "WHERE " + " AND ".join(clauses), params
