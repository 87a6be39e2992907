import json

import pytest

from price_match.importers.price_list import load_price_list
from price_match.importers.quote_items import load_line_items, read_line_items, write_line_items
from price_match.matching.index import build_index


def test_load_yaml_list(tmp_path):
    path = tmp_path / "prices.yaml"
    path.write_text(
        "- name: Grout\n  price: 5\n  unit: bag\n  aliases: [tile grout]\n- name: Labor\n  price: 60\n",
        encoding="utf-8",
    )
    rows = load_price_list(path)
    assert rows[0] == {"name": "Grout", "price": 5, "unit": "bag", "aliases": ["tile grout"]}
    assert rows[1]["name"] == "Labor"


def test_load_yaml_mapping_with_items(tmp_path):
    path = tmp_path / "prices.yml"
    path.write_text("items:\n  - name: Grout\n    price: 5\n", encoding="utf-8")
    assert [r["name"] for r in load_price_list(path)] == ["Grout"]


def test_load_json_price_list(tmp_path):
    path = tmp_path / "prices.json"
    path.write_text(json.dumps({"priceList": [{"name": "Tile", "price": 30, "unit": "m2"}, "junk"]}), encoding="utf-8")
    rows = load_price_list(path)
    assert rows == [{"name": "Tile", "price": 30, "unit": "m2"}]


def test_load_csv_price_list(tmp_path):
    path = tmp_path / "prices.csv"
    path.write_text(
        "Name,Price,Unit,Aliases\n"
        "Grout,\"$1,205.50\",bag,tile grout|grout mix\n"
        "Labor,60,hrs,\n"
        "Broken,n/a,,\n",
        encoding="utf-8",
    )
    rows = load_price_list(path)
    assert rows[0] == {"name": "Grout", "price": 1205.5, "unit": "bag", "aliases": ["tile grout", "grout mix"]}
    assert rows[1]["aliases"] == []
    assert rows[2]["price"] is None
    # the unusable row is dropped later by the index builder
    assert [e.source.name for e in build_index(rows)] == ["Grout", "Labor"]


def test_load_price_list_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_price_list(tmp_path / "missing.yaml")
    bad = tmp_path / "prices.txt"
    bad.write_text("Grout 5", encoding="utf-8")
    with pytest.raises(ValueError):
        load_price_list(bad)
    broken = tmp_path / "prices.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(ValueError):
        load_price_list(broken)
    scalar = tmp_path / "scalar.yaml"
    scalar.write_text("just text\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_price_list(scalar)


def test_load_line_items_accepts_app_spelling(tmp_path):
    path = tmp_path / "items.json"
    path.write_text(
        json.dumps({"items": [{"name": "Drywall sheets", "qty": 10, "unit": None, "price": None, "lineTotal": None}]}),
        encoding="utf-8",
    )
    [item] = load_line_items(path)
    assert item.quantity == 10
    assert item.unit == ""
    assert item.price is None
    assert item.line_total is None


def test_write_line_items_keeps_unknown_fields(tmp_path):
    path = tmp_path / "items.json"
    path.write_text(
        json.dumps(
            {
                "quoteId": "q-17",
                "items": [
                    {"id": "a1", "name": "Grout", "qty": 2, "unit": "", "price": None, "lineTotal": None, "note": "hall"},
                    {"id": "a2", "name": "Tile", "quantity": 3, "unit": "m2", "price": 30, "line_total": 90},
                ],
            }
        ),
        encoding="utf-8",
    )
    payload, rows, items = read_line_items(path)
    priced = [items[0].model_copy(update={"price": 5.0, "unit": "bag", "line_total": 10.0}), items[1]]
    out = tmp_path / "out.json"
    write_line_items(out, payload, rows, items, priced)

    written = json.loads(out.read_text(encoding="utf-8"))
    assert written["quoteId"] == "q-17"
    first, second = written["items"]
    assert first == {"id": "a1", "name": "Grout", "qty": 2, "unit": "bag", "price": 5.0, "lineTotal": 10.0, "note": "hall"}
    assert "quantity" not in first and "line_total" not in first
    assert second == {"id": "a2", "name": "Tile", "quantity": 3, "unit": "m2", "price": 30, "line_total": 90}
    assert load_line_items(out)[1] == items[1]


def test_load_line_items_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_line_items(tmp_path / "missing.json")
    path = tmp_path / "items.json"
    path.write_text(json.dumps({"items": "nope"}), encoding="utf-8")
    with pytest.raises(ValueError):
        load_line_items(path)
    path.write_text(json.dumps([{"name": "Grout", "price": "cheap"}]), encoding="utf-8")
    with pytest.raises(ValueError):
        load_line_items(path)
