"""Tests for multi-format report export (PDF printing mocked)."""

import json
from unittest.mock import Mock

import pytest

from src.stage3_exporter import ExportError, ExportManager, HTMLRenderer, PDFRenderError

REPORT = "# Q1 Report\n\nRevenue grew.\n"


@pytest.fixture
def pdf_renderer():
    return Mock()


@pytest.fixture
def manager(pdf_renderer):
    return ExportManager(pdf_renderer=pdf_renderer)


def test_export_all_skips_unknown_formats(manager, pdf_renderer, tmp_path):
    outputs = manager.export_all(
        REPORT,
        ["md", "html", "pdf", "mdx", "json", "docx"],
        str(tmp_path / "out"),
        metadata={"title": "Q1", "author": "Finance"},
    )

    assert list(outputs) == ["md", "html", "pdf", "mdx", "json"]
    assert outputs["md"] == str(tmp_path / "out" / "report.md")
    assert (tmp_path / "out" / "report.md").read_text() == REPORT
    html = (tmp_path / "out" / "report.html").read_text()
    assert "<title>Q1</title>" in html
    assert "<h1>Q1 Report</h1>" in html
    assert "<p>Revenue grew.</p>" in html

    html_arg, path_arg = pdf_renderer.convert.call_args.args
    assert "<!DOCTYPE html>" in html_arg
    assert path_arg == outputs["pdf"]


def test_failed_format_does_not_stop_the_others(manager, pdf_renderer, tmp_path):
    pdf_renderer.convert.side_effect = PDFRenderError("chromium missing")

    outputs = manager.export_all(REPORT, ["pdf", "md"], str(tmp_path), filename="q1")

    assert outputs == {"md": str(tmp_path / "q1.md")}


def test_no_valid_formats(manager, tmp_path):
    with pytest.raises(ExportError, match="No valid export formats"):
        manager.export_all(REPORT, ["docx", "txt"], str(tmp_path))


def test_json_export(manager, tmp_path):
    manager.export_all(REPORT, ["json"], str(tmp_path), metadata={"title": "Q1"})

    data = json.loads((tmp_path / "report.json").read_text())
    assert set(data) == {"content", "metadata", "generatedAt", "version"}
    assert data["content"] == REPORT
    assert data["metadata"] == {"title": "Q1"}
    assert data["version"] == "1.0.0"


class TestMdx:

    def test_front_matter_defaults_and_metadata(self):
        mdx = ExportManager.to_mdx(REPORT, {"title": "Q1", "author": None, "version": "2"})

        front_matter, body = mdx.split("\n---\n\n", 1)
        assert front_matter.startswith("---\ntitle: \"Q1\"\n")
        assert 'author: "Dataset Report Pipeline"' in front_matter
        assert 'version: "2"' in front_matter
        assert body == REPORT

    def test_existing_front_matter_is_kept(self):
        content = "---\ntitle: Mine\n---\n\nBody"

        assert ExportManager.to_mdx(content, {"title": "Other"}) == content


class TestHtml:

    def test_markdown_is_converted_at_export_time(self):
        html = HTMLRenderer().convert(
            "## Totals\n\n| Product | Revenue |\n|---|---|\n| Gadget B | $4,100 |\n\n- ~~old~~ new\n"
        )

        assert "<h2>Totals</h2>" in html
        assert "<th>Product</th>" in html
        assert "<td>Gadget B</td>" in html
        assert "<s>old</s> new" in html
        assert "<script" not in html

    def test_default_title(self):
        html = HTMLRenderer().convert("text")

        assert "<title>Report</title>" in html
        assert "<p>text</p>" in html

    def test_title_is_escaped(self):
        html = HTMLRenderer().convert("text", title="R&D <Q1>")

        assert "<title>R&amp;D &lt;Q1&gt;</title>" in html
