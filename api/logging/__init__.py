"""
Structured logging module for pipeline executions
"""
from .structured_logger import RunLogger, LogLevel

__all__ = ["RunLogger", "LogLevel"]
