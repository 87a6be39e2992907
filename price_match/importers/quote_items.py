from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Sequence, Tuple

from pydantic import ValidationError

from ..models import LineItem

# camelCase spellings sent by the mobile app
_FIELD_ALIASES = {"qty": "quantity", "lineTotal": "line_total"}


def _to_item(row: Dict[str, Any]) -> LineItem:
    data = {_FIELD_ALIASES.get(k, k): v for k, v in row.items() if _FIELD_ALIASES.get(k, k) in LineItem.model_fields}
    if data.get("unit") is None:
        data["unit"] = ""
    if data.get("name") is None:
        data["name"] = ""
    return LineItem.model_validate(data)


def _total_key(row: Dict[str, Any]) -> str:
    if "line_total" in row:
        return "line_total"
    if "lineTotal" in row or "qty" in row:
        return "lineTotal"
    return "line_total"


def read_line_items(path: Path) -> Tuple[Any, List[Dict[str, Any]], List[LineItem]]:
    """Read a JSON list or {"items": [...]} object of line items.

    Returns the parsed payload, the row dicts inside it and one LineItem per
    row. The rows are the payload's own objects so changes can be written
    back without losing fields the engine does not know about.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Line items file not found: {path}")
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"{path}: invalid JSON ({e})") from e
    data = payload.get("items", []) if isinstance(payload, dict) else payload
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a list of line items")
    rows = [row for row in data if isinstance(row, dict)]
    try:
        items = [_to_item(row) for row in rows]
    except ValidationError as e:
        raise ValueError(f"{path}: invalid line item ({e.errors()[0].get('msg')})") from e
    return payload, rows, items


def load_line_items(path: Path) -> List[LineItem]:
    return read_line_items(path)[2]


def write_line_items(
    path: Path,
    payload: Any,
    rows: Sequence[Dict[str, Any]],
    before: Sequence[LineItem],
    after: Sequence[LineItem],
) -> None:
    """Merge changed price, unit and line total into the original rows and save.

    Rows whose item came back as the same object are left byte-for-byte alone.
    """
    for row, old, new in zip(rows, before, after):
        if new is old:
            continue
        row["price"] = new.price
        row["unit"] = new.unit
        row[_total_key(row)] = new.line_total
    Path(path).write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
