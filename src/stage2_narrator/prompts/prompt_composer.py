"""
Compose multi-step prompts from inline templates and library prompts
"""

from typing import Any, Dict, List, Optional

from .prompt_library import PromptLibrary


class PromptComposer:
    """Chain several prompt templates into one multi-step prompt"""

    def __init__(self, library: Optional[PromptLibrary] = None):
        self.library = library or PromptLibrary()
        self._steps: List[Dict[str, Any]] = []

    def add_step(self, name: str, template: str, variables: Optional[Dict[str, Any]] = None) -> "PromptComposer":
        self._steps.append({"name": name, "template": template, "variables": variables or {}})
        return self

    def add_library_step(
        self,
        category: str,
        prompt_name: str,
        variables: Optional[Dict[str, Any]] = None
    ) -> "PromptComposer":
        template = self.library.load(category, prompt_name)
        return self.add_step(f"{category}/{prompt_name}", template, variables)

    def compose(self) -> str:
        """
        Build the composed prompt.

        A single step is returned as-is; several steps are laid out as
        numbered sections separated by horizontal rules.

        Raises:
            ValueError: If no steps were added
        """
        if not self._steps:
            raise ValueError("No steps added to prompt composer")

        if len(self._steps) == 1:
            return self._steps[0]["template"]

        composed = "# Multi-Step Analysis\n\n"
        composed += "Complete the following analysis steps in order:\n\n"

        for index, step in enumerate(self._steps):
            composed += f"## Step {index + 1}: {step['name']}\n\n"
            composed += f"{step['template']}\n\n"
            if index < len(self._steps) - 1:
                composed += "---\n\n"

        return composed

    def get_steps(self) -> List[Dict[str, Any]]:
        """Individual steps, for running them as separate LLM calls"""
        return list(self._steps)

    def clear(self) -> None:
        self._steps = []
