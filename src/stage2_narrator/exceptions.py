"""
Custom exceptions for the Report Narrator
"""


class ReportError(Exception):
    """Base exception for report generation errors"""
    pass


class SpecLoadError(ReportError):
    """Raised when a report spec is missing or invalid"""
    pass


class ProjectConfigError(ReportError):
    """Raised when a project configuration is missing or invalid"""
    pass


class PromptNotFoundError(ReportError):
    """Raised when a prompt file or library prompt does not exist"""
    pass


class InvalidPromptReferenceError(ReportError):
    """Raised when a library reference is not library:<category>:<name>"""
    pass


class TemplateNotFoundError(ReportError):
    """Raised when the report template file does not exist"""
    pass


class NoJSONFoundError(ReportError):
    """Raised when no JSON object or array can be extracted from text"""
    pass


class LLMError(ReportError):
    """Base exception for language model client errors"""
    pass


class RetryableLLMError(LLMError):
    """Transient failure (network, timeout, rate limit, 5xx)"""
    pass


class NonRetryableLLMError(LLMError):
    """Permanent failure (auth, invalid model, quota, content policy)"""
    pass


class LLMRetryExhaustedError(LLMError):
    """Raised when every retry attempt failed; names the last failure"""
    pass


class LLMResponseError(LLMError):
    """Raised when the API response has no usable content"""
    pass
