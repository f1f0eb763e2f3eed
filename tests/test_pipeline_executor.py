"""Tests for pipeline execution in isolated workspaces."""

import json
from pathlib import Path
from typing import Any, Dict
from unittest.mock import Mock

import pytest
from pydantic import BaseModel

from api.logging import RunLogger
from api.services.pipeline_executor import PipelineExecutor
from api.services.pipeline_registry import (
    PipelineDefinition,
    PipelineNotFoundError,
    PipelineProcessor,
    PipelineRegistry,
    ProcessorContext,
)
from api.services.processors import register_builtin_pipelines
from api.services.project_service import ProjectService
from src.stage3_exporter import ExportManager

from conftest import MockLLMClient, write_report_project


class EchoInputs(BaseModel):
    message: str
    format: str = "md"


class EchoProcessor(PipelineProcessor):
    def __init__(self):
        self.contexts = []

    def process(self, inputs: Dict[str, Any], context: ProcessorContext) -> Dict[str, Any]:
        self.contexts.append(context)
        if inputs["message"] == "explode":
            raise RuntimeError("processor exploded")
        return {"message": inputs["message"].upper()}


@pytest.fixture
def echo_processor():
    return EchoProcessor()


@pytest.fixture
def registry(tmp_path, echo_processor):
    template = tmp_path / "echo.md.j2"
    template.write_text("Echo: {{ message }} ({{ inputs.message }}) via {{ pipeline.name }}\n")
    registry = PipelineRegistry()
    registry.register(PipelineDefinition(
        id="echo",
        name="Echo",
        description="Upper-cases a message",
        version="1.0.0",
        input_model=EchoInputs,
        output_formats=["md", "json"],
        template_path=str(template),
        processor=echo_processor,
    ))
    return registry


@pytest.fixture
def executor(registry, execution_store):
    executor = PipelineExecutor(
        registry,
        execution_store,
        llm_client_factory=MockLLMClient,
        export_manager=ExportManager(pdf_renderer=Mock()),
        max_workers=2,
    )
    yield executor
    executor.shutdown()


def test_successful_execution_keeps_artifact_and_log(executor, echo_processor):
    record = executor.execute("echo", {"message": "hello"})

    assert record["status"] == "completed"
    assert record["output_format"] == "md"
    output = Path(record["output_path"])
    assert output == Path(record["workspace_dir"]) / "output" / "echo.md"
    assert output.read_text() == "Echo: HELLO (hello) via Echo\n"

    run_log = json.loads((Path(record["workspace_dir"]) / "logs" / "run.json").read_text())
    assert run_log["success"] is True
    steps = [entry["step"] for entry in run_log["logs"]]
    assert "validate_inputs" in steps and "export" in steps

    context = echo_processor.contexts[0]
    assert context.execution_id == record["id"]
    assert isinstance(context.llm_client, MockLLMClient)


def test_requested_format(executor):
    record = executor.execute("echo", {"message": "hi", "format": "json"})

    assert record["output_format"] == "json"
    assert json.loads(Path(record["output_path"]).read_text())["content"].startswith("Echo: HI")


def test_processor_failure_removes_workspace(executor):
    record = executor.execute("echo", {"message": "explode"})

    assert record["status"] == "failed"
    assert record["error_message"] == "processor exploded"
    assert "RuntimeError" in record["error_traceback"]
    assert not Path(record["workspace_dir"]).exists()


def test_invalid_inputs_fail_the_execution(executor, echo_processor):
    record = executor.execute("echo", {})

    assert record["status"] == "failed"
    assert "message" in record["error_message"]
    assert echo_processor.contexts == []


def test_export_failure_fails_the_execution(executor):
    record = executor.execute("echo", {"message": "hi", "format": "docx"})

    assert record["status"] == "failed"
    assert not Path(record["workspace_dir"]).exists()


def test_run_log_write_failure_marks_the_execution_failed(executor, monkeypatch):
    def finalize(self, success=True, error_message=None):
        raise OSError("disk full")

    monkeypatch.setattr(RunLogger, "finalize", finalize)

    record = executor.submit_future("echo", {"message": "hi"}).result(timeout=30)

    assert record["status"] == "failed"
    assert record["error_message"] == "disk full"
    assert record["output_path"] is None
    assert not Path(record["workspace_dir"]).exists()


def test_unknown_pipeline(executor, execution_store):
    with pytest.raises(PipelineNotFoundError):
        executor.execute("missing", {})

    assert execution_store.list() == []


def test_each_execution_gets_its_own_workspace(executor):
    first = executor.submit_future("echo", {"message": "one"})
    second = executor.submit_future("echo", {"message": "two"})

    records = [first.result(timeout=30), second.result(timeout=30)]

    assert {r["status"] for r in records} == {"completed"}
    assert records[0]["id"] != records[1]["id"]
    assert records[0]["workspace_dir"] != records[1]["workspace_dir"]


def test_submit_returns_running_execution(executor, execution_store):
    execution_id = executor.submit("echo", {"message": "later"})

    assert execution_store.get(execution_id)["pipeline_id"] == "echo"
    executor.shutdown(wait=True)
    assert execution_store.get(execution_id)["status"] == "completed"


@pytest.mark.integration
class TestBuiltinPipelines:

    @pytest.fixture
    def llm(self):
        return MockLLMClient("- Push Gadget B\n- Bundle Widget A\n- Watch Gadget C")

    @pytest.fixture
    def builtin_executor(self, tmp_path, execution_store, monkeypatch, llm):
        monkeypatch.chdir(tmp_path)
        registry = PipelineRegistry()
        register_builtin_pipelines(registry, ProjectService(str(tmp_path / "projects")))
        executor = PipelineExecutor(
            registry,
            execution_store,
            llm_client_factory=lambda: llm,
            export_manager=ExportManager(pdf_renderer=Mock()),
        )
        yield executor
        executor.shutdown()

    def test_sales_analysis(self, builtin_executor, llm, sales_csv):
        record = builtin_executor.execute("sales-analysis", {
            "data_source": str(sales_csv),
            "report_title": "January Sales",
            "format": "md",
        })

        assert record["status"] == "completed", record["error_message"]
        report = Path(record["output_path"]).read_text()
        assert report.startswith("# January Sales")
        assert "| Total revenue | $8,650 |" in report
        assert "| Top product | Gadget B |" in report
        assert "| Gadget B | $4,100 |" in report
        assert "- Push Gadget B" in report
        assert "Total Revenue: $8650.0" in llm.prompts[0]

    def test_sales_analysis_without_insights(self, builtin_executor, llm, sales_csv):
        record = builtin_executor.execute("sales-analysis", {
            "data_source": str(sales_csv),
            "include_insights": False,
            "format": "md",
        })

        assert record["status"] == "completed"
        assert "## Insights" not in Path(record["output_path"]).read_text()
        assert llm.prompts == []

    def test_project_report(self, builtin_executor, llm, tmp_path):
        write_report_project(tmp_path / "projects" / "q1")

        record = builtin_executor.execute("project-report", {"project_id": "q1", "format": "md"})

        assert record["status"] == "completed", record["error_message"]
        report = Path(record["output_path"]).read_text()
        assert report.startswith("# Quarterly Sales\n\n- Push Gadget B")
        assert llm.prompts == ["Summarize 5 records for Quarterly Sales."]

    def test_project_report_unknown_project(self, builtin_executor):
        record = builtin_executor.execute("project-report", {"project_id": "absent"})

        assert record["status"] == "failed"
        assert "Project not found" in record["error_message"]
