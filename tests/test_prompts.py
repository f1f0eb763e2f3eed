"""Tests for the prompt library, composer and validators."""

from typing import List

import pytest
from pydantic import BaseModel

from src.stage2_narrator import InvalidPromptReferenceError, PromptNotFoundError, VariableValidator
from src.stage2_narrator.prompts import PromptComposer, PromptLibrary, PromptValidator


@pytest.fixture
def library_dir(tmp_path):
    (tmp_path / "common").mkdir()
    (tmp_path / "common" / "brief.prompt.md").write_text("Brief: {{ topic }}")
    (tmp_path / "domain" / "retail").mkdir(parents=True)
    (tmp_path / "domain" / "retail" / "basket.prompt.md").write_text("Basket analysis")
    return tmp_path


class TestPromptLibrary:

    def test_bundled_prompts(self):
        library = PromptLibrary()

        assert "# Role" in library.common("summarize")
        assert library.load_reference("library:common:summarize") == library.load("common", "summarize")
        assert "market" in library.domain("financial", "market-analysis").lower()

    def test_list_groups_by_category(self, library_dir):
        listing = PromptLibrary(str(library_dir)).list()

        assert {"category": "common", "prompts": ["brief"]} in listing
        assert {"category": "domain/retail", "prompts": ["basket"]} in listing

    def test_missing_prompt(self, library_dir):
        with pytest.raises(PromptNotFoundError):
            PromptLibrary(str(library_dir)).load("common", "absent")

    @pytest.mark.parametrize("reference", ["library:common", "library:common:", "lib:common:brief", "library:a:b:c"])
    def test_malformed_references(self, library_dir, reference):
        with pytest.raises(InvalidPromptReferenceError):
            PromptLibrary(str(library_dir)).load_reference(reference)

    def test_cache_is_per_instance(self, library_dir):
        library = PromptLibrary(str(library_dir))
        assert library.load("common", "brief") == "Brief: {{ topic }}"

        (library_dir / "common" / "brief.prompt.md").write_text("Changed")

        assert library.load("common", "brief") == "Brief: {{ topic }}"
        assert PromptLibrary(str(library_dir)).load("common", "brief") == "Changed"
        library.clear_cache()
        assert library.load("common", "brief") == "Changed"

    def test_create_prompt_sections(self):
        prompt = PromptLibrary.create(
            role="Analyst",
            task="Summarize",
            context="Q1 data",
            constraints=["be brief"],
            examples=[{"input": "x", "output": "y"}],
            output_format="Markdown",
        )

        assert prompt.startswith("# Role\nAnalyst\n\n# Context\nQ1 data\n\n# Task\nSummarize\n\n")
        assert "# Constraints\n- be brief\n" in prompt
        assert "## Example 1\n**Input:**\nx\n\n**Output:**\ny" in prompt
        assert prompt.endswith("# Output Format\nMarkdown\n\n")


class TestPromptComposer:

    def test_requires_steps(self):
        with pytest.raises(ValueError):
            PromptComposer().compose()

    def test_single_step_is_returned_as_is(self):
        assert PromptComposer().add_step("only", "Just this").compose() == "Just this"

    def test_multi_step_layout(self, library_dir):
        composer = PromptComposer(PromptLibrary(str(library_dir)))
        composed = composer.add_step("first", "Do A").add_library_step("common", "brief").compose()

        assert composed.startswith("# Multi-Step Analysis\n\n")
        assert "## Step 1: first\n\nDo A\n\n---\n\n" in composed
        assert "## Step 2: common/brief\n\nBrief: {{ topic }}" in composed
        assert [step["name"] for step in composer.get_steps()] == ["first", "common/brief"]

        composer.clear()
        assert composer.get_steps() == []


class TestPromptValidator:

    def test_required_and_model_checks(self):
        class Inputs(BaseModel):
            count: int
            tags: List[str]

        result = PromptValidator.validate(
            {"count": "many", "tags": ["a"]},
            required=["count", "topic"],
            model=Inputs,
        )

        assert result["valid"] is False
        assert "Missing required field: topic" in result["errors"]
        assert any(error.startswith("count:") for error in result["errors"])

    def test_text_and_array_limits(self):
        data = {"title": "", "items": [1, 2, 3]}

        result = PromptValidator.validate(
            data,
            text_fields={"max_length": 10, "min_length": 1},
            arrays={"items": {"max": 2}},
        )

        assert result["errors"] == [
            "title: text too short (min 1 chars)",
            "items: array too long (max 2 items)",
        ]

    def test_arrays_must_be_lists(self):
        result = PromptValidator.validate_arrays({"items": "nope"}, {"items": {"min": 1}})

        assert result == {"valid": False, "errors": ["items: expected array, got str"]}


class TestVariableValidator:

    def test_no_coercion(self):
        assert VariableValidator.validate_variable("n", "5", "number")["valid"] is False
        assert VariableValidator.validate_variable("flag", "true", "boolean")["valid"] is False
        assert VariableValidator.validate_variable("n", 5.0, "number")["valid"] is True

    def test_required_and_bounds(self):
        assert VariableValidator.validate_variable("n", None, "number", required=True) == {
            "valid": False,
            "error": "n is required",
        }
        assert VariableValidator.validate_variable("n", None, "number")["valid"] is True
        assert "too small" in VariableValidator.validate_variable("n", 1.0, "number", min=10)["error"]
        assert "too long" in VariableValidator.validate_variable("s", "abcdef", "string", max_length=3)["error"]

    def test_validate_all(self):
        result = VariableValidator.validate_all(
            {"title": "Q1", "items": "not a list"},
            {"title": {"type": "string", "required": True}, "items": {"type": "array"}, "owner": {"type": "string", "required": True}},
        )

        assert result["valid"] is False
        assert len(result["errors"]) == 2
        assert "owner is required" in result["errors"]
