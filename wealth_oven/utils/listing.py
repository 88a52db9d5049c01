"""
Search / sort / paginate helpers for admin list endpoints

Works on serialized rows (dicts) so every admin table shares one code path.
"""
import math
from typing import Any, Dict, List, Optional, Sequence

from wealth_oven.services.errors import ValidationError


def search_rows(rows: List[Dict[str, Any]], q: Optional[str], columns: Sequence[str]) -> List[Dict[str, Any]]:
    """Case-insensitive substring match over `columns`"""
    if not q or not q.strip():
        return rows

    needle = q.strip().lower()
    return [
        row for row in rows
        if any(row.get(column) is not None and needle in str(row.get(column)).lower() for column in columns)
    ]


def sort_rows(rows: List[Dict[str, Any]], sort: Optional[str], columns: Sequence[str]) -> List[Dict[str, Any]]:
    """
    Sort by one column; a leading "-" sorts descending

    Rows with no value for the column always come last.
    """
    if not sort:
        return rows

    descending = sort.startswith("-")
    column = sort.lstrip("-")
    if column not in columns:
        raise ValidationError(f"Cannot sort by '{column}'")

    present = [row for row in rows if row.get(column) is not None]
    missing = [row for row in rows if row.get(column) is None]
    present.sort(key=lambda row: row[column], reverse=descending)
    return present + missing


def paginate(rows: List[Dict[str, Any]], page: int = 1, page_size: int = 25) -> Dict[str, Any]:
    page = max(page, 1)
    page_size = max(page_size, 1)
    total = len(rows)
    start = (page - 1) * page_size

    return {
        "items": rows[start:start + page_size],
        "total": total,
        "page": page,
        "page_size": page_size,
        "pages": math.ceil(total / page_size) if total else 0,
    }
