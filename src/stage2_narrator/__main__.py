"""
CLI entry point for the Report Narrator

Usage:
    python -m src.stage2_narrator <config_path> [data_path] [api_key]

Examples:
    python -m src.stage2_narrator report-pipeline.config.json
    python -m src.stage2_narrator my-report/report-pipeline.config.json data/sales.csv

The API key can be provided via:
    1. Command line argument
    2. LLM_API_KEY environment variable
    3. .env file in the current directory (LLM_API_KEY=...)
"""
import logging
import os
import sys
from pathlib import Path

from src.stage1_bundler import BundleLoader

from .exceptions import ReportError
from .llm_client import LLMClient
from .project_config import ProjectConfigLoader
from .report_engine import ReportEngine


def _api_key_from_env_file(env_path: Path):
    if not env_path.exists():
        return None
    with open(env_path) as f:
        for line in f:
            if line.startswith('LLM_API_KEY='):
                return line.strip().split('=', 1)[1]
    return None


def main(config_path: str, data_path: str = None, api_key: str = None) -> dict:
    """
    Load the project, bundle its dataset and generate the report

    Args:
        config_path: Path to report-pipeline.config.json (or .yml)
        data_path: Dataset to use instead of the config's first data source
        api_key: Provider API key
    """
    project = ProjectConfigLoader.load(config_path)

    data_path = data_path or (project.data_sources[0] if project.data_sources else None)
    if not data_path:
        raise ReportError("No dataset given and the project config lists no data sources")

    loader = BundleLoader()
    bundle = loader.load_with_processing(data_path)
    bundle = loader.enrich(bundle, project.fields.custom, project.fields.computed)

    client = LLMClient(
        api_key=api_key,
        model=project.model,
        provider=project.provider,
        temperature=project.temperature
    )
    result = ReportEngine(client).generate(project, bundle)

    print(f"\nReport generated: {project.report_name}")
    for fmt, path in result["outputs"].items():
        print(f"  {fmt}: {path}")
    return result


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)

    config_path = sys.argv[1]
    data_path = sys.argv[2] if len(sys.argv) > 2 else None
    api_key = (
        (sys.argv[3] if len(sys.argv) > 3 else None)
        or os.getenv("LLM_API_KEY")
        or _api_key_from_env_file(Path.cwd() / '.env')
    )

    if not api_key:
        print("Error: No API key found. Please provide via command line, LLM_API_KEY or .env file.")
        sys.exit(1)

    try:
        main(config_path, data_path, api_key)
    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)
