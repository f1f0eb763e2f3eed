"""
Pipeline registry - named pipelines with validated inputs, a processor strategy and an output template
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Type
import logging

import yaml
from pydantic import BaseModel, ConfigDict, Field, create_model

from src.stage2_narrator.spec_loader import read_structured_file

logger = logging.getLogger(__name__)

DESCRIPTOR_FILENAMES = ("pipeline.yml", "pipeline.yaml", "pipeline.json")

# Descriptor input types -> Python annotations for the generated input model
INPUT_TYPES = {
    "string": str,
    "url": str,
    "number": float,
    "integer": int,
    "boolean": bool,
    "array": List[Any],
    "object": Dict[str, Any],
}


class PipelineNotFoundError(Exception):
    """Raised when no pipeline is registered under an id"""
    pass


@dataclass
class ProcessorContext:
    """Framework resources handed to a processor for one execution"""
    execution_id: str
    workspace_dir: str
    llm_client: Optional[Any] = None
    run_logger: Optional[Any] = None


class PipelineProcessor(ABC):
    """Strategy that turns validated inputs into template data"""

    @abstractmethod
    def process(self, inputs: Dict[str, Any], context: ProcessorContext) -> Dict[str, Any]:
        """Return the data the pipeline template is rendered with"""


@dataclass
class PipelineDefinition:
    id: str
    name: str
    description: str
    version: str
    input_model: Type[BaseModel]
    output_formats: List[str]
    template_path: str
    processor: PipelineProcessor
    source: Optional[str] = None  # descriptor file for scanned pipelines

    def input_schema(self) -> Dict[str, Any]:
        return self.input_model.model_json_schema()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "version": self.version,
            "output_formats": list(self.output_formats),
            "input_schema": self.input_schema(),
        }


class InputFieldDescriptor(BaseModel):
    type: str = "string"
    required: bool = True
    default: Any = None
    description: str = ""


class PipelineDescriptor(BaseModel):
    """pipeline.yml contents"""
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    description: str = ""
    version: str = "1.0.0"
    processor: str
    template: str
    output_formats: List[str] = Field(default_factory=lambda: ["md"], alias="outputFormats")
    inputs: Dict[str, InputFieldDescriptor] = Field(default_factory=dict)


def build_input_model(pipeline_id: str, inputs: Dict[str, InputFieldDescriptor]) -> Type[BaseModel]:
    """Pydantic model for a descriptor's declared inputs (unknown keys are kept)"""
    fields = {}
    for name, spec in inputs.items():
        annotation = INPUT_TYPES.get(spec.type, str)
        if spec.required and spec.default is None:
            fields[name] = (annotation, Field(..., description=spec.description))
        else:
            fields[name] = (Optional[annotation], Field(spec.default, description=spec.description))
    model_name = "".join(part.capitalize() for part in pipeline_id.replace("_", "-").split("-")) + "Inputs"
    return create_model(model_name, __config__=ConfigDict(extra="allow"), **fields)


class PipelineRegistry:
    """
    Registered pipelines by id.

    Processors are registered in code under a key; descriptor files found by
    scan() name one of those keys, so no code is imported from the workspace.
    """

    def __init__(self):
        self._pipelines: Dict[str, PipelineDefinition] = {}
        self._processors: Dict[str, Callable[[], PipelineProcessor]] = {}

    def register(self, definition: PipelineDefinition, replace: bool = False) -> None:
        if definition.id in self._pipelines and not replace:
            raise ValueError(f"Pipeline already registered: {definition.id}")
        self._pipelines[definition.id] = definition
        logger.info(f"Registered pipeline: {definition.name} ({definition.id})")

    def register_processor(self, key: str, factory: Callable[[], PipelineProcessor]) -> None:
        """Make a processor available to scanned descriptors"""
        self._processors[key] = factory

    def get(self, pipeline_id: str) -> PipelineDefinition:
        """
        Raises:
            PipelineNotFoundError: If the id is not registered
        """
        definition = self._pipelines.get(pipeline_id)
        if definition is None:
            raise PipelineNotFoundError(f"Pipeline with ID \"{pipeline_id}\" not found")
        return definition

    def list(self) -> List[PipelineDefinition]:
        return list(self._pipelines.values())

    def scan(self, workspace_dir: str) -> List[str]:
        """
        Register pipelines described by <workspace_dir>/*/pipeline.{yml,yaml,json}.

        Invalid descriptors and unknown processor keys are logged and skipped.

        Returns:
            Ids registered by this scan
        """
        root = Path(workspace_dir)
        if not root.is_dir():
            logger.warning(f"⚠️ Pipelines directory not found: {root}. No pipelines will be loaded.")
            return []

        registered = []
        for pipeline_dir in sorted(p for p in root.iterdir() if p.is_dir()):
            descriptor_path = next(
                (pipeline_dir / name for name in DESCRIPTOR_FILENAMES if (pipeline_dir / name).is_file()),
                None
            )
            if descriptor_path is None:
                continue

            try:
                definition = self._load_descriptor(descriptor_path)
            except (ValueError, yaml.YAMLError, OSError) as e:
                logger.error(f"❌ Error loading pipeline from {pipeline_dir}: {e}")
                continue

            self.register(definition, replace=True)
            registered.append(definition.id)

        logger.info(f"Scanned {root}: {len(registered)} pipelines registered")
        return registered

    def _load_descriptor(self, descriptor_path: Path) -> PipelineDefinition:
        # pydantic.ValidationError is a ValueError
        descriptor = PipelineDescriptor.model_validate(read_structured_file(descriptor_path))

        factory = self._processors.get(descriptor.processor)
        if factory is None:
            raise ValueError(
                f"Unknown processor '{descriptor.processor}'. "
                f"Registered: {', '.join(sorted(self._processors)) or 'none'}"
            )

        template_path = Path(descriptor.template)
        if not template_path.is_absolute():
            template_path = descriptor_path.parent / template_path

        return PipelineDefinition(
            id=descriptor.id,
            name=descriptor.name,
            description=descriptor.description,
            version=descriptor.version,
            input_model=build_input_model(descriptor.id, descriptor.inputs),
            output_formats=descriptor.output_formats,
            template_path=str(template_path),
            processor=factory(),
            source=str(descriptor_path),
        )
