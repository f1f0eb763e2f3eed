"""
Load report specs (YAML or JSON): template file plus ordered report variables
"""

import json
import logging
from pathlib import Path
from typing import List, Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from . import config
from .exceptions import SpecLoadError
from .rendering_context import reserved_names

logger = logging.getLogger(__name__)

VariableType = Literal["markdown", "string", "string_list", "json", "number"]


class ReportVariable(BaseModel):
    """One named, typed, prompt-driven piece of report content"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str = Field(..., min_length=1, description="Variable name used in the template")
    type: VariableType = Field(..., description="How the model response is parsed")
    prompt_file: str = Field(..., description="Prompt path or library:<category>:<name>")
    inputs: List[str] = Field(default_factory=list, description="Dotted input paths")

    @property
    def is_library_prompt(self) -> bool:
        return self.prompt_file.startswith(config.LIBRARY_PREFIX)


class ReportSpec(BaseModel):
    """Final template plus the variables resolved for it, in order"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: Optional[str] = None
    template_file: str
    variables: List[ReportVariable] = Field(default_factory=list)


def read_structured_file(path: Path) -> object:
    """Parse a .yml/.yaml/.json file; ValueError for any other extension"""
    content = path.read_text(encoding="utf-8")
    suffix = path.suffix.lower()
    if suffix in (".yml", ".yaml"):
        return yaml.safe_load(content)
    if suffix == ".json":
        return json.loads(content)
    raise ValueError(f"Unsupported format: {path.name}. Use .yml, .yaml, or .json")


class SpecLoader:
    """Read and validate report spec files"""

    @staticmethod
    def load(spec_path: str) -> ReportSpec:
        """
        Load a report spec.

        Relative template and prompt paths are resolved against the spec's
        directory. Library references are left untouched.

        Raises:
            SpecLoadError: Missing file, unsupported format, invalid content,
                or duplicate/reserved variable names
        """
        path = Path(spec_path)
        logger.debug(f"Loading spec from: {path}")

        if not path.is_file():
            raise SpecLoadError(
                f"Spec file not found: {spec_path}\n"
                f"Expected a spec.yml or spec.yaml file defining report structure."
            )

        try:
            parsed = read_structured_file(path)
        except ValueError as e:
            raise SpecLoadError(f"Unsupported spec format: {spec_path}\n{e}")
        except yaml.YAMLError as e:
            raise SpecLoadError(f"Invalid spec file format: {spec_path}\n{e}")

        try:
            spec = ReportSpec.model_validate(parsed)
        except ValidationError as e:
            raise SpecLoadError(f"Invalid spec file format: {spec_path}\nValidation error: {e}")

        SpecLoader._check_variable_names(spec, spec_path)

        base_dir = path.parent
        spec.template_file = SpecLoader._resolve(base_dir, spec.template_file)
        for variable in spec.variables:
            if not variable.is_library_prompt:
                variable.prompt_file = SpecLoader._resolve(base_dir, variable.prompt_file)

        logger.info(f"Spec loaded: {spec.id or 'unnamed'} ({len(spec.variables)} variables)")
        return spec

    @staticmethod
    def _resolve(base_dir: Path, file_path: str) -> str:
        candidate = Path(file_path)
        if candidate.is_absolute():
            return str(candidate)
        return str(base_dir / candidate)

    @staticmethod
    def _check_variable_names(spec: ReportSpec, spec_path: str) -> None:
        seen = set()
        reserved = reserved_names()
        for variable in spec.variables:
            if variable.name in reserved:
                raise SpecLoadError(
                    f"Invalid spec file format: {spec_path}\n"
                    f"Variable name '{variable.name}' is reserved"
                )
            if variable.name in seen:
                raise SpecLoadError(
                    f"Invalid spec file format: {spec_path}\n"
                    f"Duplicate variable name '{variable.name}'"
                )
            seen.add(variable.name)
