"""
Prompt library - reusable prompt templates stored as <category>/<name>.prompt.md
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from .. import config
from ..exceptions import InvalidPromptReferenceError, PromptNotFoundError

logger = logging.getLogger(__name__)


class PromptLibrary:
    """
    Load prompt templates from a directory tree and keep them cached.

    Each instance owns its cache; files are read once and kept for the
    life of the instance.
    """

    def __init__(self, templates_dir: Optional[str] = None):
        self.templates_dir = Path(templates_dir) if templates_dir else config.DEFAULT_PROMPTS_DIR
        self._cache: Dict[str, str] = {}

    def load(self, category: str, name: str) -> str:
        """
        Load <templates_dir>/<category>/<name>.prompt.md

        Raises:
            PromptNotFoundError: If the file does not exist
        """
        cache_key = f"{category}/{name}"
        if cache_key in self._cache:
            return self._cache[cache_key]

        prompt_path = self.templates_dir / category / f"{name}{config.PROMPT_EXTENSION}"
        if not prompt_path.is_file():
            raise PromptNotFoundError(f"Prompt not found: {category}/{name}")

        content = prompt_path.read_text(encoding="utf-8")
        self._cache[cache_key] = content
        logger.debug(f"Loaded library prompt {cache_key} ({len(content)} chars)")
        return content

    def load_reference(self, reference: str) -> str:
        """
        Resolve a "library:<category>:<name>" reference.

        Raises:
            InvalidPromptReferenceError: If the reference does not have exactly three parts
        """
        parts = reference.split(":")
        if len(parts) != 3 or parts[0] + ":" != config.LIBRARY_PREFIX or not all(parts[1:]):
            raise InvalidPromptReferenceError(
                f"Invalid library reference: {reference}. Expected library:<category>:<name>"
            )
        return self.load(parts[1], parts[2])

    def common(self, name: str) -> str:
        """Shortcut for prompts in the common category"""
        return self.load("common", name)

    def domain(self, domain: str, name: str) -> str:
        """Shortcut for prompts under domain/<domain>"""
        return self.load(f"domain/{domain}", name)

    def list(self) -> List[Dict[str, Any]]:
        """[{category, prompts}] for every directory that holds prompt files"""
        suffix = config.PROMPT_EXTENSION
        categories: Dict[str, List[str]] = {}

        if not self.templates_dir.exists():
            return []

        for prompt_file in sorted(self.templates_dir.rglob(f"*{suffix}")):
            category = prompt_file.parent.relative_to(self.templates_dir).as_posix()
            categories.setdefault(category, []).append(prompt_file.name[:-len(suffix)])

        return [{"category": category, "prompts": prompts} for category, prompts in categories.items()]

    def clear_cache(self) -> None:
        self._cache.clear()

    @staticmethod
    def create(
        role: str,
        task: str,
        context: Optional[str] = None,
        constraints: Optional[List[str]] = None,
        examples: Optional[List[Dict[str, str]]] = None,
        output_format: Optional[str] = None
    ) -> str:
        """
        Build a prompt with Role / Context / Task / Constraints / Examples / Output Format sections.

        Args:
            examples: [{input, output}] pairs
        """
        prompt = f"# Role\n{role}\n\n"

        if context:
            prompt += f"# Context\n{context}\n\n"

        prompt += f"# Task\n{task}\n\n"

        if constraints:
            prompt += "# Constraints\n"
            for constraint in constraints:
                prompt += f"- {constraint}\n"
            prompt += "\n"

        if examples:
            prompt += "# Examples\n\n"
            for index, example in enumerate(examples, start=1):
                prompt += f"## Example {index}\n"
                prompt += f"**Input:**\n{example.get('input', '')}\n\n"
                prompt += f"**Output:**\n{example.get('output', '')}\n\n"

        if output_format:
            prompt += f"# Output Format\n{output_format}\n\n"

        return prompt
