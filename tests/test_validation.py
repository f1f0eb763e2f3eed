"""Tests for schema inference, the schema registry and dataset checks."""

import pytest

from src.stage1_bundler import DataValidationError, EmptyDatasetError
from src.stage1_bundler.validation import (
    DataValidator,
    FieldSchema,
    SchemaInferrer,
    SchemaRegistry,
)


@pytest.fixture
def customer_records():
    tiers = ["gold", "silver", "gold", "gold", "silver", "gold"]
    notes = ["alpha", None, "beta", "", "gamma", None]
    return [
        {
            "id": i + 1,
            "email": f"user{i}@example.com",
            "active": "yes" if i % 2 else "no",
            "site": f"https://example.com/{i}",
            "joined": f"2024-01-0{i + 1}",
            "tier": tiers[i],
            "note": notes[i],
        }
        for i in range(6)
    ]


class TestSchemaInferrer:

    def test_field_types(self, customer_records):
        schema = SchemaInferrer().infer_schema(customer_records)

        assert list(schema) == ["id", "email", "active", "site", "joined", "tier", "note"]
        assert schema["id"].type == "numeric"
        assert schema["email"].type == "email"
        assert schema["active"].type == "boolean"
        assert schema["site"].type == "url"
        assert schema["joined"].type == "date"
        assert schema["tier"].type == "enum"
        assert schema["tier"].enum_values == ["gold", "silver"]
        assert schema["note"].type == "string"
        assert schema["note"].optional is True
        assert schema["id"].optional is False

    def test_union_of_keys_in_first_seen_order(self):
        schema = SchemaInferrer().infer_schema([{"a": 1}, {"b": "x", "a": 2}])

        assert list(schema) == ["a", "b"]
        assert schema["b"].optional is True

    def test_sample_size_limits_inspection(self):
        records = [{"v": 1}, {"v": 2}, {"v": "not a number"}]

        assert SchemaInferrer().infer_schema(records, sample_size=2)["v"].type == "numeric"

    def test_empty_dataset_is_an_error(self):
        with pytest.raises(EmptyDatasetError):
            SchemaInferrer().infer_schema([])

    def test_describe_schema(self, customer_records):
        inferrer = SchemaInferrer()
        description = inferrer.describe_schema(inferrer.infer_schema(customer_records))

        assert description["id"] == "number | string (auto-coerced)"
        assert description["tier"] == "enum(gold, silver)"
        assert description["note"] == "string (optional)"

    def test_coerce_keeps_failures_and_reports_them(self):
        schema = {"revenue": FieldSchema("numeric"), "name": FieldSchema("string")}
        records = [{"revenue": "100", "name": "a"}, {"revenue": "abc", "name": "b"}]

        coerced, report = SchemaInferrer().coerce_records(records, schema)

        assert coerced[0]["revenue"] == 100
        assert coerced[1] == {"revenue": "abc", "name": "b"}
        assert report["total_records"] == 2
        assert report["valid_records"] == 1
        assert report["invalid_records"] == 1
        assert report["errors"][0].startswith("Record 1")

    def test_coerce_accepts_awkward_column_names(self):
        schema = {"Unit Price": FieldSchema("numeric"), "_id": FieldSchema("string")}

        coerced, report = SchemaInferrer().coerce_records([{"Unit Price": "9.5", "_id": "x"}], schema)

        assert coerced == [{"Unit Price": 9.5, "_id": "x"}]
        assert report["invalid_records"] == 0


class TestSchemaRegistry:

    def test_register_and_reload_from_cache(self, tmp_path):
        schema = {"revenue": FieldSchema("numeric"), "tier": FieldSchema("enum", enum_values=["a", "b"])}
        registry = SchemaRegistry(str(tmp_path))
        metadata = registry.register("sales_v1", schema, record_count=5, source="sales.csv")

        assert metadata["shape"]["revenue"] == "number | string (auto-coerced)"
        assert (tmp_path / "sales_v1.json").is_file()

        reloaded = SchemaRegistry(str(tmp_path))
        assert reloaded.has("sales_v1")
        assert reloaded.get("sales_v1")["tier"].enum_values == ["a", "b"]
        assert reloaded.get_metadata("sales_v1")["record_count"] == 5

    def test_reregister_keeps_created_at(self, tmp_path):
        registry = SchemaRegistry(str(tmp_path))
        first = registry.register("s", {"a": FieldSchema("string")})
        second = registry.register("s", {"a": FieldSchema("numeric")})

        assert second["created_at"] == first["created_at"]
        assert registry.get("s")["a"].type == "numeric"

    def test_delete_removes_cache_file(self, tmp_path):
        registry = SchemaRegistry(str(tmp_path))
        registry.register("gone", {"a": FieldSchema("string")})

        assert registry.delete("gone") is True
        assert not (tmp_path / "gone.json").exists()
        assert registry.delete("gone") is False

    def test_instances_are_independent(self, tmp_path):
        first = SchemaRegistry(str(tmp_path / "one"))
        second = SchemaRegistry(str(tmp_path / "two"))
        first.register("only_here", {"a": FieldSchema("string")})

        assert first.list() == ["only_here"]
        assert second.list() == []

    def test_unreadable_cache_files_are_skipped(self, tmp_path):
        (tmp_path / "bad.json").write_text("{oops")

        assert SchemaRegistry(str(tmp_path)).list() == []


class TestDataValidator:

    def test_empty_records(self):
        with pytest.raises(EmptyDatasetError):
            DataValidator.validate_records([])

    def test_missing_required_columns(self, sales_records):
        with pytest.raises(DataValidationError, match="Missing required columns: region"):
            DataValidator.validate_records(sales_records, ["revenue", "region"])

        DataValidator.validate_records(sales_records, ["revenue"])

    def test_infer_column_types_from_first_record(self):
        types = DataValidator.infer_column_types([
            {"a": 1, "b": "2024-01-01", "c": True, "d": None, "e": "text"}
        ])

        assert types == {"a": "number", "b": "date", "c": "boolean", "d": "unknown", "e": "string"}
