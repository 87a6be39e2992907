from __future__ import annotations

import csv
import json
import re
from pathlib import Path
from typing import Any, Dict, List

import yaml


def _norm(s: str) -> str:
    return "".join(ch for ch in s.lower() if ch.isalnum())


def _to_price(x: str) -> Any:
    x = (x or "").strip().replace(",", "").lstrip("$")
    if not x:
        return None
    try:
        return float(x)
    except ValueError:
        return None


def _rows_from_payload(data: Any, path: Path) -> List[Dict[str, Any]]:
    if isinstance(data, dict):
        for key in ("items", "price_list", "priceList"):
            if key in data:
                data = data[key]
                break
    if data is None:
        return []
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a list of price-list entries")
    return [row for row in data if isinstance(row, dict)]


def _parse_csv(path: Path) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    with open(path, newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        headers = {h: _norm(h) for h in reader.fieldnames or []}
        inv = {v: k for k, v in headers.items()}

        def get(row: Dict[str, str], key_variants: List[str]) -> str:
            for k in key_variants:
                if k in inv:
                    return row.get(inv[k]) or ""
            return ""

        for row in reader:
            aliases = get(row, ["aliases", "alias", "synonyms"])
            rows.append(
                {
                    "name": get(row, ["name", "item", "description", "itemname"]).strip(),
                    "price": _to_price(get(row, ["price", "unitprice", "rate"])),
                    "unit": get(row, ["unit", "uom"]).strip() or None,
                    "aliases": [a.strip() for a in re.split(r"[|;]", aliases) if a.strip()],
                }
            )
    return rows


def load_price_list(path: Path) -> List[Dict[str, Any]]:
    """Read raw price-list rows from YAML, JSON or CSV.

    Rows are returned as plain dicts; deciding which ones are usable is
    left to the index builder.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Price list not found: {path}")
    suffix = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        with open(path, "r", encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"{path}: invalid YAML ({e})") from e
        return _rows_from_payload(data, path)
    if suffix == ".json":
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"{path}: invalid JSON ({e})") from e
        return _rows_from_payload(data, path)
    if suffix == ".csv":
        return _parse_csv(path)
    raise ValueError(f"Unsupported price list format: {path.suffix or path.name}")
