"""Shared fixtures for the report pipeline tests."""

import json
from pathlib import Path
from typing import Any, Callable, List, Optional, Union

import pytest

from api.database.connection import get_engine, init_db, make_session_factory
from api.services.execution_store import ExecutionStore


SALES_CSV = """date,product,revenue
2024-01-01,Widget A,1500
2024-01-02,Gadget B,2300
2024-01-03,Widget A,1200
2024-01-04,Gadget C,1850
2024-01-05,Gadget B,1800
"""


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (multi-component workflows)",
    )
    config.addinivalue_line(
        "markers",
        "api: mark test as exercising the HTTP API through TestClient",
    )


class MockLLMClient:
    """
    Stand-in for LLMClient that records every prompt.

    `responses` is either a fixed string, a list consumed in order, or a
    callable receiving the prompt.
    """

    def __init__(self, responses: Union[str, List[str], Callable[[str], str]] = "Mock response"):
        self.responses = responses
        self.prompts: List[str] = []
        self.run_loggers: List[Any] = []

    def generate_text(self, prompt: str, model: Optional[str] = None, run_logger: Optional[Any] = None) -> str:
        self.prompts.append(prompt)
        self.run_loggers.append(run_logger)
        if callable(self.responses):
            return self.responses(prompt)
        if isinstance(self.responses, list):
            return self.responses.pop(0)
        return self.responses


@pytest.fixture
def sales_csv(tmp_path: Path) -> Path:
    path = tmp_path / "sales.csv"
    path.write_text(SALES_CSV)
    return path


@pytest.fixture
def sales_records() -> List[dict]:
    return [
        {"date": "2024-01-01", "product": "Widget A", "revenue": 1500},
        {"date": "2024-01-02", "product": "Gadget B", "revenue": 2300},
        {"date": "2024-01-03", "product": "Widget A", "revenue": 1200},
        {"date": "2024-01-04", "product": "Gadget C", "revenue": 1850},
        {"date": "2024-01-05", "product": "Gadget B", "revenue": 1800},
    ]


@pytest.fixture
def mock_llm() -> MockLLMClient:
    return MockLLMClient()


@pytest.fixture
def session_factory():
    """Session factory bound to a private in-memory database"""
    engine = get_engine("sqlite://")
    init_db(engine)
    yield make_session_factory(engine)
    engine.dispose()


@pytest.fixture
def execution_store(session_factory) -> ExecutionStore:
    return ExecutionStore(session_factory)


def write_report_project(
    root: Path,
    variables: Optional[List[dict]] = None,
    prompts: Optional[dict] = None,
    template: str = "# {{ report_name }}\n\n{{ summary }}\n",
    formats: Optional[List[str]] = None,
    data: str = SALES_CSV,
) -> Path:
    """
    Lay out a complete project: data, prompts, spec, template and config.

    Returns:
        Path to the project's report-pipeline.config.json
    """
    root.mkdir(parents=True, exist_ok=True)
    (root / "data").mkdir(exist_ok=True)
    (root / "data" / "sales.csv").write_text(data)

    prompts = prompts if prompts is not None else {
        "summary.prompt.md": "Summarize {{ context.record_count }} records for {{ context.report_name }}.",
    }
    (root / "prompts").mkdir(exist_ok=True)
    for name, body in prompts.items():
        (root / "prompts" / name).write_text(body)

    variables = variables if variables is not None else [
        {"name": "summary", "type": "markdown", "promptFile": "prompts/summary.prompt.md", "inputs": []},
    ]
    spec = {"id": "test-report", "templateFile": "template.md.j2", "variables": variables}
    (root / "spec.yml").write_text(json.dumps(spec))
    (root / "template.md.j2").write_text(template)

    config = {
        "reportName": "Quarterly Sales",
        "author": "Analytics",
        "version": "1.0",
        "dataSources": ["data/sales.csv"],
        "fields": {
            "custom": [{"name": "region", "value": "EMEA"}],
            "computed": [{"name": "total_revenue", "function": "SUM(revenue)"}],
        },
        "specFile": "spec.yml",
        "output": {"formats": formats or ["md"], "destination": "output"},
    }
    config_path = root / "report-pipeline.config.json"
    config_path.write_text(json.dumps(config, indent=2))
    return config_path


@pytest.fixture
def report_project(tmp_path: Path) -> Path:
    return write_report_project(tmp_path / "project")
