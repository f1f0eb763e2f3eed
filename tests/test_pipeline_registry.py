"""Tests for pipeline registration and descriptor scanning."""

import json

import pytest
import yaml
from pydantic import ValidationError

from api.services.pipeline_registry import (
    PipelineNotFoundError,
    PipelineRegistry,
    build_input_model,
    InputFieldDescriptor,
)
from api.services.processors import SalesAnalysisProcessor, register_builtin_pipelines
from api.services.project_service import ProjectService


def write_descriptor(root, name, descriptor, filename="pipeline.yml"):
    directory = root / name
    directory.mkdir(parents=True)
    if filename.endswith(".json"):
        (directory / filename).write_text(json.dumps(descriptor))
    else:
        (directory / filename).write_text(yaml.safe_dump(descriptor))
    (directory / "template.md.j2").write_text("{{ report_title }}")
    return directory


@pytest.fixture
def registry():
    registry = PipelineRegistry()
    registry.register_processor("sales-analysis", SalesAnalysisProcessor)
    return registry


def test_scan_registers_descriptors(registry, tmp_path):
    directory = write_descriptor(tmp_path, "weekly", {
        "id": "weekly-sales",
        "name": "Weekly Sales",
        "processor": "sales-analysis",
        "template": "template.md.j2",
        "outputFormats": ["md", "html"],
        "inputs": {
            "data_source": {"type": "url", "description": "CSV location"},
            "include_insights": {"type": "boolean", "required": False, "default": False},
        },
    })

    assert registry.scan(str(tmp_path)) == ["weekly-sales"]

    definition = registry.get("weekly-sales")
    assert definition.template_path == str(directory / "template.md.j2")
    assert definition.output_formats == ["md", "html"]
    assert definition.version == "1.0.0"
    assert isinstance(definition.processor, SalesAnalysisProcessor)
    assert definition.source == str(directory / "pipeline.yml")

    schema = definition.input_schema()
    assert schema["required"] == ["data_source"]
    assert schema["properties"]["data_source"]["description"] == "CSV location"


def test_scan_skips_invalid_descriptors(registry, tmp_path):
    write_descriptor(tmp_path, "a-good", {
        "id": "good", "name": "Good", "processor": "sales-analysis", "template": "template.md.j2",
    }, filename="pipeline.json")
    write_descriptor(tmp_path, "b-unknown", {
        "id": "unknown", "name": "Unknown", "processor": "does-not-exist", "template": "template.md.j2",
    })
    write_descriptor(tmp_path, "c-incomplete", {"id": "incomplete"})
    (tmp_path / "d-broken").mkdir()
    (tmp_path / "d-broken" / "pipeline.yml").write_text("id: [unclosed")
    (tmp_path / "e-empty").mkdir()

    assert registry.scan(str(tmp_path)) == ["good"]
    assert [p.id for p in registry.list()] == ["good"]


def test_scan_missing_directory(registry, tmp_path):
    assert registry.scan(str(tmp_path / "absent")) == []


def test_get_unknown_pipeline(registry):
    with pytest.raises(PipelineNotFoundError, match="missing"):
        registry.get("missing")


def test_duplicate_registration(registry, tmp_path):
    register_builtin_pipelines(registry, ProjectService(str(tmp_path)))
    definition = registry.get("sales-analysis")

    with pytest.raises(ValueError, match="already registered"):
        registry.register(definition)
    registry.register(definition, replace=True)

    assert [p.id for p in registry.list()] == ["sales-analysis", "project-report"]


def test_builtin_pipeline_schemas(tmp_path):
    registry = PipelineRegistry()
    register_builtin_pipelines(registry, ProjectService(str(tmp_path)))

    sales = registry.get("sales-analysis").to_dict()
    assert sales["output_formats"] == ["html", "pdf", "md"]
    assert set(sales["input_schema"]["properties"]) == {
        "data_source", "report_title", "revenue_column", "product_column",
        "date_column", "include_insights", "format",
    }
    assert sales["input_schema"]["required"] == ["data_source"]

    project = registry.get("project-report").to_dict()
    assert project["input_schema"]["required"] == ["project_id"]


class TestInputModel:

    def test_types_defaults_and_extra_keys(self):
        model = build_input_model("weekly-sales", {
            "count": InputFieldDescriptor(type="integer"),
            "ratio": InputFieldDescriptor(type="number", required=False, default=0.5),
            "tags": InputFieldDescriptor(type="array", required=False),
        })

        data = model.model_validate({"count": "3", "note": "kept"}).model_dump()

        assert model.__name__ == "WeeklySalesInputs"
        assert data == {"count": 3, "ratio": 0.5, "tags": None, "note": "kept"}

    def test_missing_required(self):
        model = build_input_model("p", {"count": InputFieldDescriptor(type="integer")})

        with pytest.raises(ValidationError):
            model.model_validate({})
