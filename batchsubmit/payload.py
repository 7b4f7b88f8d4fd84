"""
payload.py - Row to Form Payload Mapping
=========================================
Turns one input row into the body sent for it:
- the configured scalar columns, copied verbatim as text
- the attachment path, read from the attachment column (if configured)

Columns missing from a row are left out of the payload; empty cells are
sent as "".
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional


@dataclass(frozen=True)
class Payload:
    """Form body for one row: scalar fields plus an optional attachment path."""
    fields: Dict[str, str] = field(default_factory=dict)
    attachment: Optional[str] = None


def cell_text(value: Any) -> str:
    """
    Render a spreadsheet cell as form text.

    None and NaN become "", integral floats lose their ".0"
    (Excel often hands back 42.0 for 42), everything else goes through str().
    """
    if value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value)


def build_payload(
    row: Mapping[str, Any],
    fields: List[str],
    attachment_column: Optional[str] = None,
) -> Payload:
    """
    Map one input row to the form payload.

    Args:
        row: Input data row keyed by column name
        fields: Columns copied verbatim into the form, in order
        attachment_column: Column holding a local file path, if any

    Returns:
        Payload with one entry per configured field present in the row.
        Columns missing from the row are left out rather than sent empty.
    """
    values = {name: cell_text(row[name]) for name in fields if name in row}

    attachment = None
    if attachment_column:
        path = cell_text(row.get(attachment_column)).strip()
        if path:
            attachment = path

    return Payload(fields=values, attachment=attachment)
