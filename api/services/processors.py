"""
Built-in pipeline processors: sales analysis and full project reports
"""
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Literal, Optional
import logging

from pydantic import BaseModel, Field

from src.stage1_bundler import BundleLoader, EmptyDatasetError, FormulaEngine, StatsCalculator, load_records
from src.stage2_narrator import ProjectConfigError, ProjectConfigLoader, ReportEngine, ReportError
from src.stage2_narrator import ReportGenerationOptions, TemplateRenderer
from src.stage2_narrator.prompts import PromptLibrary

from ..config import settings
from .input_handlers import resolve_data_source
from .pipeline_registry import PipelineDefinition, PipelineProcessor, PipelineRegistry, ProcessorContext
from .project_service import ProjectService

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent.parent / "templates"

OutputFormat = Literal["md", "html", "pdf", "mdx", "json"]

SALES_INSIGHTS_PROMPT = """Analyze the following sales data summary.
- Total Revenue: ${{ total_revenue | round(2) }}
- Average Revenue per Transaction: ${{ average_revenue | round(2) }}
- Top products by revenue: {{ top_products | dump }}
{% if percent_change is not none %}- Revenue change, second half vs first half: {{ percent_change | round(1) }}%{% endif %}

Provide three distinct, actionable business insights based on this data.
Present them as a bulleted list.
"""


def _generate(llm_client: Any, prompt: str, run_logger: Optional[Any]) -> str:
    if run_logger is not None:
        return llm_client.generate_text(prompt, run_logger=run_logger)
    return llm_client.generate_text(prompt)


class SalesAnalysisInputs(BaseModel):
    data_source: str = Field(..., description="URL or local path of the sales CSV")
    report_title: str = Field("Sales Analysis", description="Report heading")
    revenue_column: str = Field("revenue", description="Numeric revenue column")
    product_column: str = Field("product", description="Product name column")
    date_column: str = Field("date", description="Transaction date column")
    include_insights: bool = Field(True, description="Ask the language model for insights")
    format: Optional[OutputFormat] = Field(None, description="Output format (defaults to the pipeline's first)")


class SalesAnalysisProcessor(PipelineProcessor):
    """Totals, averages and top products for a sales CSV, plus optional LLM insights"""

    def __init__(self, formula_engine: Optional[FormulaEngine] = None):
        self.formula_engine = formula_engine or FormulaEngine()
        self.renderer = TemplateRenderer()

    def process(self, inputs: Dict[str, Any], context: ProcessorContext) -> Dict[str, Any]:
        source = inputs["data_source"]
        revenue = inputs.get("revenue_column", "revenue")
        product = inputs.get("product_column", "product")
        date = inputs.get("date_column", "date")

        data_path = resolve_data_source(source, context.workspace_dir)

        records = load_records(str(data_path))
        if not records:
            raise EmptyDatasetError("No valid sales data could be parsed from the CSV")
        logger.info(f"Found {len(records)} sales records")

        evaluate = self.formula_engine.evaluate
        by_product = evaluate(f"GROUP_BY({product}, SUM({revenue}))", records)
        top_products = [
            {"product": name, "revenue": total}
            for name, total in sorted(by_product.items(), key=lambda item: item[1], reverse=True)[:5]
        ]

        data = {
            "report_title": inputs.get("report_title", "Sales Analysis"),
            "record_count": len(records),
            "total_revenue": evaluate(f"SUM({revenue})", records),
            "average_revenue": evaluate(f"AVG({revenue})", records),
            "top_product": evaluate(f"TOP({product}, {revenue}, 1)", records),
            "top_products": top_products,
            "revenue_by_product": by_product,
            "percent_change": evaluate(f"PERCENT_CHANGE({revenue}, {date})", records) if date in records[0] else None,
            "stats": StatsCalculator().calculate_stats(records),
            "generated_at": datetime.now(timezone.utc).isoformat(),
            "insights": None,
        }

        if inputs.get("include_insights", True):
            if context.llm_client is None:
                logger.warning("⚠️ No LLM client configured, skipping insights")
            else:
                logger.info("Generating AI insights...")
                prompt = self.renderer.render_string(SALES_INSIGHTS_PROMPT, data)
                data["insights"] = _generate(context.llm_client, prompt, context.run_logger).strip()

        return data


class ProjectReportInputs(BaseModel):
    project_id: str = Field(..., description="Directory name of a saved project")
    data_path: Optional[str] = Field(None, description="Dataset to use instead of the project's first data source")
    format: Optional[OutputFormat] = Field(None, description="Output format (defaults to the pipeline's first)")


class ProjectReportProcessor(PipelineProcessor):
    """Bundle a saved project's dataset and resolve its report spec"""

    def __init__(
        self,
        project_service: Optional[ProjectService] = None,
        prompt_library: Optional[PromptLibrary] = None,
        schema_cache_dir: Optional[str] = None
    ):
        self.project_service = project_service or ProjectService()
        self.prompt_library = prompt_library or PromptLibrary(settings.PROMPTS_DIR or None)
        self.schema_cache_dir = schema_cache_dir or settings.schema_cache_dir

    def process(self, inputs: Dict[str, Any], context: ProcessorContext) -> Dict[str, Any]:
        project_id = inputs["project_id"]
        project = self.project_service.get_project(project_id)
        if project is None:
            raise ProjectConfigError(f"Project not found: {project_id}")

        config = ProjectConfigLoader.load(project["config_path"])
        data_path = inputs.get("data_path") or (config.data_sources[0] if config.data_sources else None)
        if not data_path:
            raise ReportError(f"Project {project_id} has no data sources")

        if context.llm_client is None:
            raise ReportError("LLM_API_KEY is not configured")

        loader = BundleLoader(schema_cache_dir=self.schema_cache_dir)
        bundle = loader.load_with_processing(data_path)
        bundle = loader.enrich(bundle, config.fields.custom, config.fields.computed)

        engine = ReportEngine(
            context.llm_client,
            options=ReportGenerationOptions(context_window_size=settings.CONTEXT_WINDOW_SIZE),
            prompt_library=self.prompt_library,
            run_logger=context.run_logger
        )
        rendered = engine.render(config, bundle)

        return {
            "content": rendered["content"],
            "variables": rendered["variables"],
            "report_name": config.report_name,
            "record_count": bundle.record_count,
        }


def register_builtin_pipelines(
    registry: PipelineRegistry,
    project_service: Optional[ProjectService] = None,
    prompt_library: Optional[PromptLibrary] = None
) -> None:
    """Register the sales-analysis and project-report pipelines and their processor keys"""
    project_service = project_service or ProjectService()

    registry.register_processor("sales-analysis", SalesAnalysisProcessor)
    registry.register_processor(
        "project-report",
        lambda: ProjectReportProcessor(project_service, prompt_library)
    )

    registry.register(PipelineDefinition(
        id="sales-analysis",
        name="Sales Analysis Pipeline",
        description="Analyzes sales data from a CSV and generates insights using an LLM.",
        version="1.0.0",
        input_model=SalesAnalysisInputs,
        output_formats=["html", "pdf", "md"],
        template_path=str(TEMPLATES_DIR / "sales-analysis.md.j2"),
        processor=SalesAnalysisProcessor(),
    ), replace=True)

    registry.register(PipelineDefinition(
        id="project-report",
        name="Project Report Pipeline",
        description="Runs a saved project's full bundle and report generation.",
        version="1.0.0",
        input_model=ProjectReportInputs,
        output_formats=["md", "html", "pdf", "mdx", "json"],
        template_path=str(TEMPLATES_DIR / "project-report.md.j2"),
        processor=ProjectReportProcessor(project_service, prompt_library),
    ), replace=True)
