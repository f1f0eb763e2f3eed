"""
Project configuration: report metadata, data sources, derived fields, output and LLM settings
"""

import logging
import os
from pathlib import Path
from typing import Any, List, Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from . import config
from .exceptions import ProjectConfigError
from .rendering_context import reserved_names
from .spec_loader import read_structured_file

logger = logging.getLogger(__name__)

OutputFormat = Literal["md", "html", "pdf", "mdx", "json"]
Provider = Literal["gemini", "openai", "deepseek", "openrouter"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CustomField(_CamelModel):
    """Literal value exposed to templates under its name"""
    name: str
    value: Any = None


class ComputedField(_CamelModel):
    """Formula evaluated over the dataset, e.g. SUM(revenue)"""
    name: str
    function: str


class FieldsConfig(_CamelModel):
    custom: List[CustomField] = Field(default_factory=list)
    computed: List[ComputedField] = Field(default_factory=list)


class OutputConfig(_CamelModel):
    formats: List[OutputFormat] = Field(default_factory=lambda: ["md"])
    destination: str = config.DEFAULT_OUTPUT_DIR


class LLMConfig(_CamelModel):
    provider: Optional[Provider] = None
    model: Optional[str] = None
    temperature: Optional[float] = Field(None, ge=0, le=2)


class ProjectConfig(_CamelModel):
    """Everything needed to turn one dataset into a report"""
    report_name: str
    author: Optional[str] = None
    version: Optional[str] = None
    data_sources: List[str] = Field(default_factory=list)
    fields: FieldsConfig = Field(default_factory=FieldsConfig)
    spec_file: str
    output: OutputConfig = Field(default_factory=OutputConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)

    @property
    def provider(self) -> str:
        return self.llm.provider or config.DEFAULT_PROVIDER

    @property
    def model(self) -> str:
        return self.llm.model or config.DEFAULT_MODEL

    @property
    def temperature(self) -> float:
        return config.DEFAULT_TEMPERATURE if self.llm.temperature is None else self.llm.temperature


class ProjectConfigLoader:
    """Read and validate project configuration files"""

    @staticmethod
    def load(config_path: Optional[str] = None) -> ProjectConfig:
        """
        Load a project config (JSON or YAML).

        Args:
            config_path: Config file; defaults to report-pipeline.config.json in the cwd

        Relative data source, spec and destination paths are resolved against
        the config file's directory.

        Raises:
            ProjectConfigError: Missing file, unparseable content or failed validation
        """
        path = Path(config_path) if config_path else Path(os.getcwd()) / config.PROJECT_CONFIG_FILENAME

        if not path.is_file():
            raise ProjectConfigError(
                f"Project config not found at {path}.\n"
                f"Create a {config.PROJECT_CONFIG_FILENAME} in the project directory."
            )

        logger.debug(f"Loading project config from: {path}")

        try:
            parsed = read_structured_file(path)
        except ValueError as e:
            raise ProjectConfigError(f"Invalid project config: {path}\n{e}")
        except yaml.YAMLError as e:
            raise ProjectConfigError(f"Invalid project config: {path}\n{e}")

        try:
            project = ProjectConfig.model_validate(parsed)
        except ValidationError as e:
            raise ProjectConfigError(f"Invalid project config: {path}\nValidation error: {e}")

        ProjectConfigLoader._check_field_names(project, path)

        base_dir = path.parent
        project.data_sources = [ProjectConfigLoader._resolve(base_dir, p) for p in project.data_sources]
        project.spec_file = ProjectConfigLoader._resolve(base_dir, project.spec_file)
        project.output.destination = ProjectConfigLoader._resolve(base_dir, project.output.destination)

        logger.info(f"Project config loaded: {project.report_name}")
        return project

    @staticmethod
    def _resolve(base_dir: Path, file_path: str) -> str:
        candidate = Path(file_path).expanduser()
        if candidate.is_absolute():
            return str(candidate)
        return str(base_dir / candidate)

    @staticmethod
    def _check_field_names(project: ProjectConfig, path: Path) -> None:
        reserved = reserved_names()
        seen = set()
        names = [f.name for f in project.fields.custom] + [f.name for f in project.fields.computed]
        for name in names:
            if name in reserved or name in seen:
                raise ProjectConfigError(
                    f"Invalid project config: {path}\n"
                    f"Field name '{name}' is reserved or declared twice"
                )
            seen.add(name)
