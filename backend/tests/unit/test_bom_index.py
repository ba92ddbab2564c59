import pytest

from partsflow.core.exceptions import ProductNotFound
from partsflow.models import BOMItem
from partsflow.services.bom_index import BOMIndex


def test_resolve_parts_returns_raw_rows_per_station(db, catalog):
    catalog.station("ST-20", process_group="PAINT")
    catalog.station("ST-10", process_group="ASSY")
    catalog.product("PRD-1", bom=[("ST-10", "P1", 2), ("ST-20", "P1", 1), ("ST-10", "P2", 4)])

    rows = BOMIndex(db).resolve_parts("PRD-1")

    assert [(r.station_code, r.part_code, r.quantity_per_unit) for r in rows] == [
        ("ST-10", "P1", 2),
        ("ST-10", "P2", 4),
        ("ST-20", "P1", 1),
    ]
    assert rows[0].process_group == "ASSY"


def test_resolve_parts_skips_inactive_rows_and_stations(db, catalog):
    catalog.station("ST-OLD", is_active=False)
    catalog.product("PRD-1", bom=[("ST-10", "P1", 2), ("ST-OLD", "P2", 1)])
    db.add(BOMItem(product_code="PRD-1", station_code="ST-10", part_code="P3", quantity=1, is_active=False))
    db.commit()

    rows = BOMIndex(db).resolve_parts("PRD-1")

    assert [r.part_code for r in rows] == ["P1"]


def test_resolve_parts_for_product_without_bom_is_empty(db, catalog):
    catalog.product("PRD-EMPTY")

    assert BOMIndex(db).resolve_parts("PRD-EMPTY") == []


def test_resolve_parts_unknown_product_raises(db):
    with pytest.raises(ProductNotFound):
        BOMIndex(db).resolve_parts("NOPE")


def test_resolve_parts_inactive_product_raises(db, catalog):
    catalog.product("PRD-OLD", bom=[("ST-10", "P1", 1)], is_active=False)

    with pytest.raises(ProductNotFound):
        BOMIndex(db).resolve_parts("PRD-OLD")
