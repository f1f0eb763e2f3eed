"""
Pipeline executor - runs registered pipelines in isolated workspaces
"""
import shutil
import tempfile
import traceback
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional
import logging

from src.stage2_narrator import TemplateRenderer
from src.stage3_exporter import ExportError, ExportManager

from ..config import settings
from ..logging import RunLogger
from .execution_store import ExecutionStateError, ExecutionStore
from .pipeline_registry import PipelineDefinition, PipelineRegistry, ProcessorContext

logger = logging.getLogger(__name__)

WORKSPACE_PREFIX = "report-pipeline"


@dataclass
class _Run:
    execution_id: str
    definition: PipelineDefinition
    inputs: Dict[str, Any]
    workspace_dir: str


class PipelineExecutor:
    """
    Execute pipelines: validate inputs, process, render the template, export.

    Every execution gets a uuid and a fresh temporary workspace. Failed runs
    are marked failed and their workspace is removed; successful workspaces
    are kept because they hold the artifact.
    """

    def __init__(
        self,
        registry: PipelineRegistry,
        store: Optional[ExecutionStore] = None,
        llm_client_factory: Optional[Callable[[], Any]] = None,
        export_manager: Optional[ExportManager] = None,
        max_workers: int = settings.MAX_CONCURRENT_EXECUTIONS
    ):
        self.registry = registry
        self.store = store or ExecutionStore()
        self.llm_client_factory = llm_client_factory
        self.export_manager = export_manager or ExportManager()
        self.renderer = TemplateRenderer()
        # Thread pool for background executions
        self._pool = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="pipeline_worker")

    def execute(self, pipeline_id: str, inputs: Dict[str, Any]) -> Dict[str, Any]:
        """Run a pipeline synchronously and return the final execution record"""
        run = self._start(pipeline_id, inputs)
        self._run(run)
        return self.store.get(run.execution_id)

    def submit(self, pipeline_id: str, inputs: Dict[str, Any]) -> str:
        """Start a pipeline on the worker pool and return its execution id"""
        run = self._start(pipeline_id, inputs)
        self._pool.submit(self._run, run)
        logger.info(f"Submitted execution {run.execution_id} to executor")
        return run.execution_id

    def submit_future(self, pipeline_id: str, inputs: Dict[str, Any]) -> Future:
        """Like submit(), returning a future that resolves to the final record"""
        run = self._start(pipeline_id, inputs)
        return self._pool.submit(self._run_and_fetch, run)

    def shutdown(self, wait: bool = True) -> None:
        self._pool.shutdown(wait=wait)

    def _start(self, pipeline_id: str, inputs: Dict[str, Any]) -> _Run:
        definition = self.registry.get(pipeline_id)
        execution_id = str(uuid.uuid4())
        workspace_dir = tempfile.mkdtemp(prefix=f"{WORKSPACE_PREFIX}-{execution_id}-")
        self.store.create(execution_id, pipeline_id, inputs, workspace_dir)
        return _Run(execution_id, definition, dict(inputs), workspace_dir)

    def _run_and_fetch(self, run: _Run) -> Dict[str, Any]:
        self._run(run)
        return self.store.get(run.execution_id)

    def _run(self, run: _Run) -> None:
        """Execute one run; never raises, the outcome lands in the store"""
        execution_id = run.execution_id
        definition = run.definition
        run_logger = None

        try:
            run_logger = RunLogger(execution_id, run.workspace_dir)

            logger.info(f"[{execution_id}] Step 1: Validating inputs for {definition.id}...")
            run_logger.stage_start("validate_inputs")
            validated = definition.input_model.model_validate(run.inputs).model_dump()
            output_format = validated.get("format") or definition.output_formats[0]
            run_logger.record_inputs(validated)
            run_logger.stage_end("validate_inputs")

            logger.info(f"[{execution_id}] Step 2: Processing...")
            run_logger.stage_start("process")
            context = ProcessorContext(
                execution_id=execution_id,
                workspace_dir=run.workspace_dir,
                llm_client=self.llm_client_factory() if self.llm_client_factory else None,
                run_logger=run_logger
            )
            data = definition.processor.process(validated, context)
            run_logger.stage_end("process")

            logger.info(f"[{execution_id}] Step 3: Rendering template...")
            run_logger.stage_start("render")
            content = self.renderer.render_file(
                definition.template_path,
                {**data, "inputs": validated, "pipeline": definition.to_dict()}
            )
            run_logger.stage_end("render", metadata={"characters": len(content)})

            logger.info(f"[{execution_id}] Step 4: Exporting {output_format}...")
            run_logger.stage_start("export")
            outputs = self.export_manager.export_all(
                content,
                [output_format],
                str(Path(run.workspace_dir) / "output"),
                filename=definition.id,
                metadata={"title": data.get("report_title") or data.get("report_name") or definition.name}
            )
            if output_format not in outputs:
                raise ExportError(f"Export to {output_format} failed")
            run_logger.record_output(output_format, outputs[output_format])
            run_logger.stage_end("export")

            run_logger.finalize(success=True)
            self.store.complete(execution_id, outputs[output_format], output_format)
            logger.info(f"✅ Execution {execution_id} completed: {outputs[output_format]}")

        except Exception as e:
            logger.exception(f"❌ Execution {execution_id} failed")
            self._record_failure(execution_id, e, traceback.format_exc(), run_logger)
            shutil.rmtree(run.workspace_dir, ignore_errors=True)

    def _record_failure(
        self,
        execution_id: str,
        error: Exception,
        error_traceback: str,
        run_logger: Optional[RunLogger]
    ) -> None:
        """Mark the run failed and close its log without raising"""
        try:
            self.store.fail(execution_id, str(error), error_traceback)
        except ExecutionStateError as state_error:
            logger.error(f"❌ Could not record failure of {execution_id}: {state_error}")

        if run_logger is not None:
            try:
                run_logger.finalize(success=False, error_message=str(error))
            except OSError as log_error:
                logger.warning(f"⚠️ Could not write run log for {execution_id}: {log_error}")
