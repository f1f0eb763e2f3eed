"""
Stage 2: Narrator
Turns an enriched bundle into report text: resolves each report variable by
rendering a prompt, calling the language model and parsing the response, then
renders the final template
"""

from .context_manager import ContextManager
from .llm_client import LLMClient
from .project_config import ProjectConfig, ProjectConfigLoader
from .rendering_context import RenderingContext
from .report_engine import GenerationState, ReportEngine, ReportGenerationOptions
from .spec_loader import ReportSpec, ReportVariable, SpecLoader
from .template_renderer import TemplateRenderer
from .variable_validator import VariableValidator
from .exceptions import (
    ReportError,
    SpecLoadError,
    ProjectConfigError,
    PromptNotFoundError,
    InvalidPromptReferenceError,
    TemplateNotFoundError,
    NoJSONFoundError,
    LLMError,
    RetryableLLMError,
    NonRetryableLLMError,
    LLMRetryExhaustedError,
    LLMResponseError
)

__all__ = [
    'ContextManager',
    'LLMClient',
    'ProjectConfig',
    'ProjectConfigLoader',
    'RenderingContext',
    'GenerationState',
    'ReportEngine',
    'ReportGenerationOptions',
    'ReportSpec',
    'ReportVariable',
    'SpecLoader',
    'TemplateRenderer',
    'VariableValidator',
    'ReportError',
    'SpecLoadError',
    'ProjectConfigError',
    'PromptNotFoundError',
    'InvalidPromptReferenceError',
    'TemplateNotFoundError',
    'NoJSONFoundError',
    'LLMError',
    'RetryableLLMError',
    'NonRetryableLLMError',
    'LLMRetryExhaustedError',
    'LLMResponseError'
]
