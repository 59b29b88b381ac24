"""Build the field list a record request must ask for."""

from __future__ import annotations

from typing import Iterable, Optional


def fields_for_request(
    custom_fields: Iterable[str],
    *extra_fields: str,
    group_by_field: Optional[str] = None,
) -> str:
    """Return a comma separated field list for a paged record request.

    The result contains *custom_fields*, then *extra_fields*, then the
    grouping field the table needs to build its sections.  Duplicates are
    dropped, keeping the first occurrence.
    """

    names: list[str] = []
    seen: set[str] = set()
    for name in (*custom_fields, *extra_fields, group_by_field):
        if not name or name in seen:
            continue
        seen.add(name)
        names.append(name)
    return ",".join(names)


__all__ = ["fields_for_request"]
