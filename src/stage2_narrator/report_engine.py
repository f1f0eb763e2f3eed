"""
Report Engine: resolve report variables with the language model and render the final report

Variables resolve strictly in declaration order. Each one gets its inputs from
the rendering context, a rendered prompt (file or prompt library), one model
call and a typed parse of the response. A failing variable becomes
"[Error: <message>]" and generation continues with the next one.
"""

import json
import logging
import re
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from src.stage1_bundler.models import Bundle
from src.stage1_bundler.normalization import parse_float
from src.stage3_exporter import ExportManager

from . import config
from .context_manager import ContextManager
from .exceptions import SpecLoadError, TemplateNotFoundError
from .project_config import ProjectConfig
from .prompts import PromptLibrary, StructuredParser
from .rendering_context import RenderingContext
from .spec_loader import ReportVariable, SpecLoader
from .template_renderer import TemplateRenderer

logger = logging.getLogger(__name__)

COMMON_INPUT_FIELDS = ("bundle", "stats", "metadata")
BULLET_PREFIX = re.compile(r"^[-*•]\s*")
BULLET_ONLY = re.compile(r"^[-*•]\s*$")


class GenerationState(str, Enum):
    """Lifecycle of one generate() call"""
    IDLE = "idle"
    LOADING_SPEC = "loading_spec"
    RESOLVING_VARIABLES = "resolving_variables"
    RENDERING_TEMPLATE = "rendering_template"
    EXPORTING = "exporting"
    DONE = "done"


@dataclass
class ReportGenerationOptions:
    use_prompt_library: bool = True      # resolve "library:<category>:<name>" prompt files
    validate_variables: bool = True      # warn about missing or empty inputs
    manage_context: bool = True          # chunk/truncate prompts that overflow the window
    parse_structured: bool = True        # typed parsing through StructuredParser
    context_window_size: int = config.DEFAULT_CONTEXT_WINDOW


class ReportEngine:
    """Generate reports from an enriched bundle, a project config and its report spec"""

    def __init__(
        self,
        llm_client: Any,
        options: Optional[ReportGenerationOptions] = None,
        prompt_library: Optional[PromptLibrary] = None,
        renderer: Optional[TemplateRenderer] = None,
        export_manager: Optional[ExportManager] = None,
        run_logger: Optional[Any] = None
    ):
        """
        Args:
            llm_client: Anything with generate_text(prompt) -> str
            options: Default generation options
            prompt_library: Library used for "library:" prompt references
            renderer: Jinja2 renderer for prompts and the final template
            export_manager: Writes the rendered report in each output format
            run_logger: Optional RunLogger for per-variable and LLM events
        """
        self.llm_client = llm_client
        self.options = options or ReportGenerationOptions()
        self.prompt_library = prompt_library or PromptLibrary()
        self.renderer = renderer or TemplateRenderer()
        self.export_manager = export_manager or ExportManager()
        self.run_logger = run_logger
        self.state = GenerationState.IDLE

    def _set_state(self, state: GenerationState) -> None:
        logger.debug(f"Report engine state: {self.state.value} -> {state.value}")
        self.state = state

    def generate(
        self,
        project: ProjectConfig,
        bundle: Bundle,
        options: Optional[ReportGenerationOptions] = None
    ) -> Dict[str, Any]:
        """
        Generate a report and export it in every configured format.

        Args:
            project: Loaded project configuration
            bundle: Bundle (usually enriched with custom and computed fields)
            options: Overrides the engine's default options for this call

        Returns:
            {"content": markdown, "outputs": {format: path}, "variables": {...}, "state": "done"}

        Raises:
            SpecLoadError: The spec file is missing or invalid
            TemplateNotFoundError: The spec's template file does not exist
            ExportError: No valid output format was configured
        """
        rendered = self.render(project, bundle, options)

        logger.info(f"Step 4: Exporting to {', '.join(project.output.formats)}...")
        self._set_state(GenerationState.EXPORTING)
        Path(project.output.destination).mkdir(parents=True, exist_ok=True)
        outputs = self.export_manager.export_all(
            rendered["content"],
            list(project.output.formats),
            project.output.destination,
            metadata={
                "title": project.report_name,
                "author": project.author or config.DEFAULT_AUTHOR,
                "version": project.version,
            }
        )

        self._set_state(GenerationState.DONE)
        logger.info(f"✅ Report generation complete: {len(outputs)} outputs")
        return {
            "content": rendered["content"],
            "outputs": outputs,
            "variables": rendered["variables"],
            "state": self.state.value,
        }

    def render(
        self,
        project: ProjectConfig,
        bundle: Bundle,
        options: Optional[ReportGenerationOptions] = None
    ) -> Dict[str, Any]:
        """
        Load the spec, resolve its variables and render the template, without exporting.

        Returns:
            {"content": markdown, "variables": {name: value}}
        """
        opts = options or self.options
        context_manager = ContextManager(opts.context_window_size)
        self._set_state(GenerationState.IDLE)
        logger.info(f"Starting report generation: {project.report_name}")

        logger.info("Step 1: Loading report spec...")
        self._set_state(GenerationState.LOADING_SPEC)
        spec = SpecLoader.load(project.spec_file)

        context = self.build_context(project, bundle)
        clashes = context.conflicting_names(variable.name for variable in spec.variables)
        if clashes:
            raise SpecLoadError(
                f"Spec variables collide with custom, computed or reserved names: {', '.join(clashes)}"
            )

        logger.info(f"Step 2: Resolving {len(spec.variables)} variables...")
        self._set_state(GenerationState.RESOLVING_VARIABLES)
        for variable in spec.variables:
            context.set_variable(variable.name, self._resolve_variable(variable, context, opts, context_manager))

        logger.info(f"Step 3: Rendering template {Path(spec.template_file).name}...")
        self._set_state(GenerationState.RENDERING_TEMPLATE)
        content = self.renderer.render_file(spec.template_file, context.as_dict())

        return {"content": content, "variables": dict(context.variables)}

    @staticmethod
    def build_context(project: ProjectConfig, bundle: Bundle) -> RenderingContext:
        """Base section, custom fields and computed fields for one report"""
        stats = bundle.stats or {}
        metadata = bundle.metadata or {}
        custom_fields = dict(getattr(bundle, "custom_fields", {}) or {})
        computed_fields = dict(getattr(bundle, "computed_fields", {}) or {})

        base = {
            "report_name": project.report_name,
            "author": project.author or config.DEFAULT_AUTHOR,
            "version": project.version,
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "bundle": bundle,
            "custom_fields": custom_fields,
            "computed_fields": computed_fields,
            "stats": stats,
            "metadata": metadata,
            "column_stats": stats.get("columns"),
            "distributions": stats.get("distributions"),
            "ranges": stats.get("ranges"),
            "record_count": metadata.get("record_count", len(bundle.records)),
            "schema_id": metadata.get("schema_id"),
            "normalized": metadata.get("normalized", False),
            "processed": metadata.get("processed", False),
        }
        return RenderingContext(base, custom=custom_fields, computed=computed_fields)

    def _resolve_variable(
        self,
        variable: ReportVariable,
        context: RenderingContext,
        opts: ReportGenerationOptions,
        context_manager: ContextManager
    ) -> Any:
        """Resolve one variable; failures become "[Error: <message>]" """
        start_time = time.time()
        logger.info(f"Resolving variable: {variable.name} ({variable.type})")
        try:
            value = self._execute_variable(variable, context, opts, context_manager)
        except Exception as e:
            logger.error(f"❌ Failed to generate variable {variable.name}: {e}")
            if self.run_logger is not None:
                self.run_logger.variable_resolved(
                    variable.name, success=False,
                    duration_ms=int((time.time() - start_time) * 1000), error=str(e)
                )
            return f"[Error: {e}]"

        logger.info(f"✅ Variable {variable.name} completed: {len(str(value))} chars")
        if self.run_logger is not None:
            self.run_logger.variable_resolved(
                variable.name, success=True, duration_ms=int((time.time() - start_time) * 1000)
            )
        return value

    def _execute_variable(
        self,
        variable: ReportVariable,
        context: RenderingContext,
        opts: ReportGenerationOptions,
        context_manager: ContextManager
    ) -> Any:
        inputs = self.resolve_inputs(variable.inputs, context)

        if opts.validate_variables:
            errors = self._validate_inputs(variable, inputs)
            if errors:
                logger.warning(f"⚠️ Variable validation warnings for {variable.name}: {errors}")

        if opts.use_prompt_library and variable.is_library_prompt:
            template = self.prompt_library.load_reference(variable.prompt_file)
            logger.debug(f"Loaded prompt from library: {variable.prompt_file}")
        else:
            template = self.renderer.load_prompt_file(variable.prompt_file)
            logger.debug(f"Loaded prompt from file: {variable.prompt_file}")

        prompt = self.renderer.render_string(template, inputs)

        if opts.manage_context:
            prompt = self._fit_prompt(variable.name, prompt, context_manager)

        response = self._call_llm(prompt)
        logger.debug(f"LLM response received: {len(response)} chars")

        if opts.parse_structured:
            return self.parse_response_structured(response, variable.type, variable.name)
        return self.parse_response(response, variable.type)

    def _call_llm(self, prompt: str) -> str:
        if self.run_logger is not None:
            return self.llm_client.generate_text(prompt, run_logger=self.run_logger)
        return self.llm_client.generate_text(prompt)

    @staticmethod
    def _fit_prompt(name: str, prompt: str, context_manager: ContextManager) -> str:
        reserve = config.OUTPUT_TOKEN_RESERVE
        if context_manager.fits_in_context(prompt, reserve):
            return prompt

        logger.debug(f"Prompt too large ({len(prompt)} chars), managing context")
        chunks = context_manager.chunk_by_paragraphs(prompt, reserve)
        if len(chunks) > 1:
            logger.warning(f"⚠️ Prompt for {name} split into {len(chunks)} chunks. Using first chunk only.")
            fitted = chunks[0]
        else:
            fitted = context_manager.truncate(prompt, reserve)
            logger.warning(f"⚠️ Prompt for {name} truncated to fit context window")

        logger.debug(f"Context usage: {context_manager.get_context_usage(fitted):.1f}%")
        return fitted

    @staticmethod
    def resolve_inputs(input_paths: List[str], context: RenderingContext) -> Dict[str, Any]:
        """
        Map each input path to its last segment, then add the common inputs.

        "bundle.stats.revenue" -> {"revenue": ...}; bundle, context (flat view),
        stats and metadata are always present.
        """
        resolved: Dict[str, Any] = {}
        for path in input_paths:
            key = path.split(".")[-1] or path
            resolved[key] = context.resolve_path(path)

        flat = context.as_dict()
        resolved["bundle"] = context.base.get("bundle")
        resolved["context"] = flat
        resolved["stats"] = context.base.get("stats")
        resolved["metadata"] = context.base.get("metadata")
        return resolved

    @staticmethod
    def _validate_inputs(variable: ReportVariable, inputs: Dict[str, Any]) -> List[str]:
        errors = []
        for field in COMMON_INPUT_FIELDS:
            if any(field in path for path in variable.inputs) and not inputs.get(field):
                errors.append(f"Missing expected field: {field}")
        for key, value in inputs.items():
            if isinstance(value, str) and not value.strip():
                errors.append(f"Empty string value for: {key}")
        return errors

    @staticmethod
    def parse_response_structured(response: str, type: str, variable_name: str) -> Any:
        """Typed parse; on any parse exception the raw response is returned"""
        try:
            if type in ("markdown", "string"):
                return response.strip()

            if type == "string_list":
                items = StructuredParser.extract_list(response)
                return items if items else ReportEngine.parse_response(response, type)

            if type == "json":
                return StructuredParser.extract_json(response)

            if type == "number":
                number = parse_float(response.strip())
                if number is None:
                    logger.warning(f"⚠️ Could not parse number from response for {variable_name}")
                    return 0
                return number

            return response.strip()
        except Exception as e:
            logger.error(f"❌ Failed to parse {type} response for {variable_name}: {e}")
            return response

    @staticmethod
    def parse_response(response: str, type: str) -> Any:
        """Plain parse without StructuredParser"""
        if type in ("markdown", "string"):
            return response.strip()

        if type == "string_list":
            try:
                parsed = json.loads(response)
                if isinstance(parsed, list):
                    return parsed
            except ValueError:
                pass
            lines = [line.strip() for line in response.split("\n")]
            return [BULLET_PREFIX.sub("", line) for line in lines if line and not BULLET_ONLY.match(line)]

        if type == "json":
            return json.loads(response)

        if type == "number":
            return parse_float(response)

        return response

    def generate_with_library(
        self,
        bundle: Bundle,
        category: str,
        name: str,
        output_template: str,
        project: Optional[Dict[str, Any]] = None
    ) -> str:
        """
        One library prompt, one model call, one output template.

        The template sees the analysis under "analysis" plus the summary context.
        """
        logger.info(f"Generating report with library prompt: {category}/{name}")
        project = project or {}
        template = self.prompt_library.load(category, name)

        summary = self._summary_context(bundle, project, "Report")
        summary["column_count"] = (bundle.stats or {}).get("column_count", 0)
        summary["custom_fields"] = getattr(bundle, "custom_fields", {})
        summary["computed_fields"] = getattr(bundle, "computed_fields", {})

        prompt = self.renderer.render_string(template, summary)
        analysis = self._call_llm(prompt)

        if not Path(output_template).is_file():
            raise TemplateNotFoundError(f"Template file not found: {output_template}")
        return self.renderer.render_file(output_template, {**summary, "analysis": analysis})

    def generate_multi_step(
        self,
        bundle: Bundle,
        steps: List[Dict[str, Any]],
        output_template: str,
        project: Optional[Dict[str, Any]] = None
    ) -> str:
        """
        Run library prompts in sequence; later steps see earlier results.

        Args:
            steps: [{"category", "name", "inputs"?}]; results are keyed step_<i>_<name>
        """
        logger.info(f"Generating multi-step report with {len(steps)} steps")
        summary = self._summary_context(bundle, project or {}, "Multi-Step Report")
        results: Dict[str, Any] = {}

        for i, step in enumerate(steps, start=1):
            logger.info(f"Step {i}: {step['category']}/{step['name']}")
            template = self.prompt_library.load(step["category"], step["name"])
            step_context = {**summary, **results, **(step.get("inputs") or {})}
            result = self._call_llm(self.renderer.render_string(template, step_context))
            results[f"step_{i}_{step['name']}"] = result
            logger.debug(f"Step {i} complete: {len(result)} chars")

        if not Path(output_template).is_file():
            raise TemplateNotFoundError(f"Template file not found: {output_template}")
        return self.renderer.render_file(output_template, {**summary, **results})

    @staticmethod
    def _summary_context(bundle: Bundle, project: Dict[str, Any], default_name: str) -> Dict[str, Any]:
        return {
            "report_name": project.get("report_name", default_name),
            "author": project.get("author", config.DEFAULT_AUTHOR),
            "bundle": bundle,
            "dataset_name": bundle.source,
            "record_count": len(bundle.records),
            "data_sample": json.dumps(bundle.samples.get("main", [])[:3], indent=2, default=str),
            "stats": bundle.stats,
            "metadata": bundle.metadata,
        }
