"""
Configuration for the Report Narrator
Context budgets, parsing markers and LLM provider defaults
"""

from pathlib import Path

# Context window management
DEFAULT_CONTEXT_WINDOW = 8000       # tokens
OUTPUT_TOKEN_RESERVE = 2000         # tokens kept free for the model's answer
DEFAULT_RESERVE = 1000              # reserve used by ContextManager helpers
TOKENS_PER_CHAR = 0.25              # 1 token ~ 4 characters
CHUNK_OVERLAP = 200                 # characters shared by consecutive chunks
PARAGRAPH_CHUNK_OVERLAP = 100       # overlap when splitting an oversized paragraph
TRUNCATION_MARKER = "\n\n[... truncated ...]"
OMISSION_MARKER = "\n\n[... content omitted ...]\n\n"

# Prompt library
LIBRARY_PREFIX = "library:"
PROMPT_EXTENSION = ".prompt.md"
DEFAULT_PROMPTS_DIR = Path(__file__).parent / "prompts" / "templates"

# Project configuration
PROJECT_CONFIG_FILENAME = "report-pipeline.config.json"
DEFAULT_OUTPUT_DIR = "./output"
DEFAULT_AUTHOR = "Anonymous"
OUTPUT_FORMATS = ["md", "html", "pdf", "mdx", "json"]

# Names a report variable may not take
RESERVED_CONTEXT_ROOTS = {"bundle", "context", "ctx", "variables"}

# LLM providers (OpenAI-compatible chat completion endpoints)
PROVIDER_ENDPOINTS = {
    "openrouter": "https://openrouter.ai/api/v1/chat/completions",
    "openai": "https://api.openai.com/v1/chat/completions",
    "deepseek": "https://api.deepseek.com/v1/chat/completions",
    "gemini": "https://generativelanguage.googleapis.com/v1beta/openai/chat/completions",
}
DEFAULT_PROVIDER = "openrouter"
DEFAULT_MODEL = "google/gemini-flash-1.5"
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 4096
LLM_TIMEOUT_SECONDS = 120

# Retry configuration for transient API failures
MAX_RETRIES = 3
RETRY_DELAY_BASE = 2  # seconds (exponential backoff: 2s, 4s, 8s)
RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}
