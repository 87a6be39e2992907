import pytest

from price_match.models import CatalogEntry, LineItem


@pytest.fixture
def catalog():
    return [
        CatalogEntry(name="Paint - Interior Latex", price=45, unit="liter", aliases=["wall paint"]),
        CatalogEntry(name="drywall sheet", price=8, unit="sqm"),
        CatalogEntry(name="Labor", price=60, unit="hour", aliases=["work hours", "installation labor"]),
        CatalogEntry(name="Ceramic floor tile", price=32.5, unit="sqm"),
    ]


@pytest.fixture
def drywall_item():
    return LineItem(name="Drywall sheets", quantity=10, unit="", price=None, line_total=None)
