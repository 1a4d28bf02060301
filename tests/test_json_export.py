import json

import pytest

from packplan.core.solver_multi_item import allocate_multi_item_extended
from packplan.core.solver_single_item import allocate_quantity
from packplan.models.item import Item
from packplan.models.settings import GeneralSettings
from packplan.report.json_export import allocation_summary, run_summary, write_json_summary
from packplan.run_plan import main


@pytest.fixture
def weighed_brick():
    return Item(width=60, depth=40, height=20, unit_weight=0.01, name="Brick")


def test_allocation_summary_survives_json(weighed_brick, export_carton):
    result = allocate_quantity(weighed_brick, 1500, [export_carton])
    summary = json.loads(json.dumps(allocation_summary(weighed_brick, 1500, result, [export_carton])))

    assert summary["item"]["name"] == "Brick"
    assert summary["allocated"] == 1500
    assert summary["leftover"] == 0
    assert [entry["quantity"] for entry in summary["shipments"]] == [1000, 500]
    assert summary["shipments"][0]["plan"]["capacity"] == 1000
    assert summary["shipments"][1]["weights"]["product_weight"] == pytest.approx(5.0)


def test_run_summary_is_written_and_read_back(weighed_brick, export_carton, tmp_path):
    settings = GeneralSettings(default_side_margin=2, packaging_weight_per_m3=8)
    allocation = allocation_summary(
        weighed_brick, 10, allocate_quantity(weighed_brick, 10, [export_carton]), [export_carton]
    )
    pair = [weighed_brick, Item(width=20, depth=20, height=20, name="Cube")]
    mixed = allocate_multi_item_extended(pair, [2, 3], [export_carton])

    path = write_json_summary(
        tmp_path / "out" / "plan.json", run_summary(settings, [export_carton], [allocation], mixed)
    )
    with open(path, encoding="utf-8") as file:
        loaded = json.load(file)

    assert loaded["settings"]["default_side_margin"] == 2.0
    assert loaded["containers"][0]["id"] == 4
    assert loaded["allocations"][0]["shipments"][0]["quantity"] == 10
    assert loaded["mixed"]["leftover"] == [0, 0]
    assert loaded["mixed"]["shipments"][0]["quantities_by_item"] == [2, 3]
    assert loaded["mixed"]["shipments"][0]["plan"]["layers"][0]["kind"] == "placed"


def test_run_summary_without_mixed_load(export_carton):
    summary = run_summary(GeneralSettings(), [export_carton], [])
    assert summary["mixed"] is None
    assert summary["allocations"] == []


def test_cli_writes_json_summary(tmp_path):
    main(["--output-dir", str(tmp_path), "--no-images", "--table-max", "5"])

    with open(tmp_path / "packing_plan.json", encoding="utf-8") as file:
        loaded = json.load(file)
    assert [entry["item"]["name"] for entry in loaded["allocations"]] == ["Boxed mug", "Notebook"]
    for entry in loaded["allocations"]:
        assert entry["allocated"] + entry["leftover"] == entry["quantity"]
    assert loaded["mixed"] is not None
    assert (tmp_path / "packing_plan.pdf").exists()
