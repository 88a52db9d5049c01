"""
CSV export for the admin tables

Header row is the column names; every value is wrapped in double quotes
with embedded quotes doubled; rows are joined with "\n".
"""
from typing import Any, Dict, Iterable, List, Optional


def format_cell(value: Any) -> str:
    if value is None:
        text = ""
    elif isinstance(value, bool):
        text = "true" if value else "false"
    elif isinstance(value, (list, tuple)):
        text = ",".join(str(item) for item in value)
    else:
        text = str(value)
    return '"' + text.replace('"', '""') + '"'


def export_to_csv(rows: Iterable[Dict[str, Any]], columns: Optional[List[str]] = None) -> str:
    """
    Render rows as CSV text

    Columns default to the keys of the first row. With no rows and no
    explicit columns the result is an empty string.
    """
    rows = list(rows)
    if columns is None:
        if not rows:
            return ""
        columns = list(rows[0].keys())

    lines = [",".join(columns)]
    for row in rows:
        lines.append(",".join(format_cell(row.get(column)) for column in columns))
    return "\n".join(lines)
