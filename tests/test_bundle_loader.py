"""Tests for the bundle loader."""

import pytest

from src.stage1_bundler import (
    BundleError,
    BundleLoader,
    EmptyDatasetError,
    EnrichedBundle,
    FormulaError,
)
from src.stage2_narrator.project_config import ComputedField, CustomField


@pytest.fixture
def loader(tmp_path):
    return BundleLoader(schema_cache_dir=str(tmp_path / "schemas"))


def test_load_basic_stats(loader, sales_csv):
    bundle = loader.load(str(sales_csv))

    assert bundle.record_count == 5
    assert bundle.source == str(sales_csv)
    assert bundle.metadata["source_file"] == str(sales_csv)
    assert bundle.stats["row_count"] == 5
    assert bundle.stats["column_names"] == ["date", "product", "revenue"]
    assert bundle.stats["revenue"]["type"] == "numeric"
    assert bundle.stats["revenue"]["sum"] == 8650
    assert bundle.stats["revenue"]["mean"] == 1730
    assert bundle.stats["product"] == {
        "type": "categorical",
        "count": 5,
        "unique": 3,
        "sample": ["Widget A", "Gadget B", "Widget A"],
    }
    assert len(bundle.samples["main"]) == 5


def test_samples_hold_leading_records(loader, tmp_path):
    path = tmp_path / "many.csv"
    path.write_text("n\n" + "\n".join(str(i) for i in range(20)) + "\n")

    bundle = loader.load(str(path))

    assert [record["n"] for record in bundle.samples["main"]] == [0, 1, 2, 3, 4]


@pytest.mark.parametrize("content", ["", "date,product,revenue\n"])
def test_empty_dataset_raises(loader, tmp_path, content):
    path = tmp_path / "empty.csv"
    path.write_text(content)

    with pytest.raises(EmptyDatasetError):
        loader.load(str(path))


def test_json_of_scalars_is_a_bundle_error(loader, tmp_path):
    path = tmp_path / "nums.json"
    path.write_text("[1, 2, 3]")

    with pytest.raises(BundleError, match="not an object"):
        loader.load(str(path))


def test_load_with_normalization(loader, sales_csv):
    bundle = loader.load_with_normalization(str(sales_csv))

    assert bundle.metadata["normalized"] is True
    assert "normalization_timestamp" in bundle.metadata
    assert bundle.records[0]["date"] == "2024-01-01T00:00:00.000Z"


def test_load_with_validation_registers_schema(loader, sales_csv, tmp_path):
    bundle = loader.load_with_validation(str(sales_csv), schema_id="sales_fixed")

    assert bundle.metadata["schema_id"] == "sales_fixed"
    assert bundle.metadata["validation"]["valid_records"] == 5
    assert loader.schema_registry.has("sales_fixed")
    assert (tmp_path / "schemas" / "sales_fixed.json").is_file()


def test_load_with_processing(loader, sales_csv):
    bundle = loader.load_with_processing(str(sales_csv))
    metadata = bundle.metadata

    assert metadata["processed"] is True
    assert metadata["normalized"] is True
    assert metadata["schema_id"].startswith("sales_")
    assert metadata["schema_description"]["revenue"] == "number | string (auto-coerced)"
    assert metadata["validation"] == {
        "total_records": 5,
        "valid_records": 5,
        "invalid_records": 0,
        "errors": [],
    }

    # Basic and enhanced stats side by side, over the final records
    assert bundle.stats["revenue"]["sum"] == 8650
    assert bundle.stats["record_count"] == 5
    assert bundle.stats["ranges"]["revenue"]["max"] == 2300.0
    assert bundle.stats["columns"]["date"]["type"] == "date"


def test_schema_id_follows_field_shape(loader, sales_csv, tmp_path):
    first = loader.load_with_processing(str(sales_csv)).metadata["schema_id"]
    again = loader.load_with_processing(str(sales_csv)).metadata["schema_id"]

    changed = tmp_path / "sales_v2" / "sales.csv"
    changed.parent.mkdir()
    changed.write_text("date,product,revenue,region\n2024-01-01,Widget A,1500,EMEA\n")
    other = loader.load_with_processing(str(changed)).metadata["schema_id"]

    assert first == again
    assert other.startswith("sales_")
    assert other != first


def test_enrich_adds_custom_and_computed_fields(loader, sales_csv):
    bundle = loader.load(str(sales_csv))

    enriched = loader.enrich(
        bundle,
        [{"name": "region", "value": "EMEA"}],
        [
            {"name": "total_revenue", "function": "SUM(revenue)"},
            {"name": "top_product", "function": "TOP(product, revenue, 1)"},
        ],
    )

    assert isinstance(enriched, EnrichedBundle)
    assert enriched.custom_fields == {"region": "EMEA"}
    assert enriched.computed_fields == {"total_revenue": 8650, "top_product": "Gadget B"}
    assert enriched.records is bundle.records


def test_enrich_accepts_config_models(loader, sales_csv):
    bundle = loader.load(str(sales_csv))

    enriched = loader.enrich(
        bundle,
        [CustomField(name="owner", value="ops")],
        [ComputedField(name="rows", function="COUNT(revenue)")],
    )

    assert enriched.custom_fields == {"owner": "ops"}
    assert enriched.computed_fields == {"rows": 5}


def test_enrich_names_the_failing_formula(loader, sales_csv):
    bundle = loader.load(str(sales_csv))

    with pytest.raises(FormulaError, match="Formula 'broken' failed"):
        loader.enrich(bundle, computed_fields=[{"name": "broken", "function": "NOPE(revenue)"}])
