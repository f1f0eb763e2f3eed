"""
Parse structured content (JSON, lists, tables, sections) out of LLM responses
"""

import json
import logging
import re
from typing import Any, Dict, List

from pydantic import TypeAdapter

from ..exceptions import NoJSONFoundError

logger = logging.getLogger(__name__)

CODE_BLOCK_PATTERN = re.compile(r'```(?:json)?\s*([\s\S]*?)\s*```')
LIST_ITEM_PATTERN = re.compile(r'^\s*(?:[-*•]|\d+\.)\s+(.+)$')
HEADING_PATTERN = re.compile(r'^#+\s+(.+)')
NUMBERED_ITEM_PATTERN = re.compile(r'^(\d+)[.)]\s+(.+)')
KEY_VALUE_PATTERNS = [
    re.compile(r'\*\*([^*:]+):\*\*\s*(.+)'),      # **Key:** Value
    re.compile(r'\*\*([^*:]+):\s*\*\*(.+)'),      # **Key: **Value
    re.compile(r'([A-Za-z0-9_ \t]+):\s*(.+)'),    # Key: Value
]


class StructuredParser:
    """Static helpers that pull structure out of free-form model output"""

    @staticmethod
    def extract_json(text: str) -> Any:
        """
        Extract the first JSON object or array from text.

        Phase 1 looks inside the first fenced code block (optionally tagged
        json). Phase 2 scans the text for every '{' or '[' and returns the
        first value that decodes to a non-null object or array.

        Raises:
            NoJSONFoundError: If both phases fail
        """
        match = CODE_BLOCK_PATTERN.search(text)
        if match and match.group(1):
            candidate = match.group(1).strip()
            if candidate.startswith("{") or candidate.startswith("["):
                try:
                    return json.loads(candidate)
                except json.JSONDecodeError:
                    logger.warning("⚠️ Code block content found but failed to parse as JSON")

        decoder = json.JSONDecoder()
        for position, char in enumerate(text):
            if char not in "{[":
                continue
            try:
                parsed, _ = decoder.raw_decode(text, position)
            except json.JSONDecodeError:
                continue
            if isinstance(parsed, (dict, list)):
                return parsed

        raise NoJSONFoundError("No valid JSON found in text")

    @staticmethod
    def parse_json(text: str, model: Any) -> Any:
        """Extract JSON and validate it against a pydantic model or type"""
        data = StructuredParser.extract_json(text)
        return TypeAdapter(model).validate_python(data)

    @staticmethod
    def extract_list(text: str) -> List[str]:
        """Items of a bullet (-, *, •) or numbered (1.) markdown list"""
        items = []
        for line in text.split("\n"):
            match = LIST_ITEM_PATTERN.match(line)
            if match:
                item = match.group(1).strip()
                if item:
                    items.append(item)
        return items

    @staticmethod
    def extract_table(text: str) -> List[Dict[str, str]]:
        """
        Rows of the first markdown pipe table.

        The first pipe line gives the headers and the second (separator) is
        skipped. Fully empty rows are dropped.
        """
        lines = [line for line in text.split("\n") if "|" in line]
        if len(lines) < 2:
            return []

        headers = [h.strip() for h in lines[0].split("|") if h.strip()]

        rows = []
        for line in lines[2:]:
            cells = [cell.strip() for cell in line.split("|")]
            values = [cell for index, cell in enumerate(cells) if 0 < index <= len(headers)]
            row = {header: values[index] if index < len(values) else "" for index, header in enumerate(headers)}
            if any(value for value in row.values()):
                rows.append(row)
        return rows

    @staticmethod
    def extract_sections(text: str) -> Dict[str, str]:
        """Split markdown on headings; text before the first heading is 'intro'"""
        sections = {}
        current_section = "intro"
        current_content: List[str] = []

        for line in text.split("\n"):
            heading = HEADING_PATTERN.match(line)
            if heading:
                if current_content:
                    sections[current_section] = "\n".join(current_content).strip()
                current_section = re.sub(r'\s+', '_', heading.group(1).strip().lower())
                current_content = []
            else:
                current_content.append(line)

        if current_content:
            sections[current_section] = "\n".join(current_content).strip()

        return sections

    @staticmethod
    def extract_numbered_items(text: str) -> List[Dict[str, Any]]:
        """[{number, title, description}] from "1. Title" lines and their continuation lines"""
        items = []
        current = None

        for line in text.split("\n"):
            match = NUMBERED_ITEM_PATTERN.match(line)
            if match:
                if current:
                    items.append(current)
                current = {"number": int(match.group(1)), "title": match.group(2).strip(), "description": ""}
            elif current and line.strip():
                separator = " " if current["description"] else ""
                current["description"] += separator + line.strip()

        if current:
            items.append(current)

        return items

    @staticmethod
    def extract_key_value(text: str) -> Dict[str, str]:
        """
        "**Key:** Value" / "Key: Value" pairs.

        Spaces in keys become underscores; the first value seen for a key wins.
        """
        result: Dict[str, str] = {}
        for pattern in KEY_VALUE_PATTERNS:
            for match in pattern.finditer(text):
                key = re.sub(r'\s+', '_', match.group(1).strip())
                value = match.group(2).strip()
                if key and value and key not in result:
                    result[key] = value
        return result
