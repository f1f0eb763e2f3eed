"""
Prompt tooling: library of reusable prompts, composer, validators and response parsing
"""

from .prompt_composer import PromptComposer
from .prompt_library import PromptLibrary
from .prompt_validator import PromptValidator
from .structured_parser import StructuredParser

__all__ = [
    'PromptComposer',
    'PromptLibrary',
    'PromptValidator',
    'StructuredParser',
]
