"""
Structured JSON Logger for pipeline executions

Provides per-run logging with timestamps, stage timing, LLM usage and
per-variable outcomes. Logs are written to <workspace>/logs/run.json
"""
import json
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional
from enum import Enum
from dataclasses import dataclass
import threading


class LogLevel(str, Enum):
    """Log levels for structured logging"""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class LogEntry:
    """A single log entry with timestamp and metadata"""
    timestamp: str
    level: str
    step: str
    message: str
    metadata: Optional[Dict[str, Any]] = None
    duration_ms: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary, excluding None values"""
        result = {
            "timestamp": self.timestamp,
            "level": self.level,
            "step": self.step,
            "message": self.message,
        }
        if self.metadata:
            result["metadata"] = self.metadata
        if self.duration_ms is not None:
            result["duration_ms"] = self.duration_ms
        return result


class RunLogger:
    """
    Per-execution structured JSON logger.

    Keeps entries in memory and rewrites <workspace>/logs/run.json after
    every entry, so the file is readable while the run is in progress.

    Thread-safe for concurrent logging.
    """

    def __init__(self, execution_id: str, workspace_dir: str):
        """
        Args:
            execution_id: Unique execution identifier
            workspace_dir: Execution workspace; logs go to its logs/ folder
        """
        self.execution_id = execution_id
        self.log_dir = Path(workspace_dir) / "logs"
        self.log_file = self.log_dir / "run.json"
        self._lock = threading.Lock()
        self._started = time.time()
        self._stage_timers: Dict[str, float] = {}
        self._data: Dict[str, Any] = {
            "execution_id": execution_id,
            "started_at": self._now(),
            "logs": [],
            "variables": {},
            "token_usage": {"prompt_tokens": 0, "completion_tokens": 0, "total_tokens": 0},
        }

        self.log_dir.mkdir(parents=True, exist_ok=True)
        self._flush()

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat()

    def _flush(self) -> None:
        with open(self.log_file, 'w') as f:
            json.dump(self._data, f, indent=2, default=str)

    def log(
        self,
        level: LogLevel,
        step: str,
        message: str,
        metadata: Optional[Dict[str, Any]] = None,
        duration_ms: Optional[int] = None
    ) -> None:
        """
        Append an entry.

        Args:
            level: Log level (debug, info, warning, error)
            step: Step identifier (e.g. "validate_inputs", "llm_call")
            message: Human-readable message
            metadata: Optional dictionary of additional data
            duration_ms: Optional duration in milliseconds
        """
        entry = LogEntry(
            timestamp=self._now(),
            level=level.value,
            step=step,
            message=message,
            metadata=metadata,
            duration_ms=duration_ms
        )
        with self._lock:
            self._data["logs"].append(entry.to_dict())
            self._data["last_updated"] = entry.timestamp
            self._flush()

    def info(self, step: str, message: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        self.log(LogLevel.INFO, step, message, metadata)

    def warning(self, step: str, message: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        self.log(LogLevel.WARNING, step, message, metadata)

    def error(self, step: str, message: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        self.log(LogLevel.ERROR, step, message, metadata)

    def stage_start(self, stage_name: str, metadata: Optional[Dict[str, Any]] = None) -> None:
        """Mark the start of a pipeline stage"""
        self._stage_timers[stage_name] = time.time()
        self.info(step=stage_name, message=f"Starting {stage_name}", metadata=metadata)

    def stage_end(
        self,
        stage_name: str,
        metadata: Optional[Dict[str, Any]] = None,
        success: bool = True
    ) -> None:
        """Mark the end of a pipeline stage, with its duration when it was started"""
        duration_ms = None
        started = self._stage_timers.pop(stage_name, None)
        if started is not None:
            duration_ms = int((time.time() - started) * 1000)

        self.log(
            level=LogLevel.INFO if success else LogLevel.ERROR,
            step=stage_name,
            message=f"Stage {stage_name} {'completed' if success else 'failed'}",
            metadata=metadata,
            duration_ms=duration_ms
        )

    def llm_call(
        self,
        prompt_preview: str,
        response_preview: str,
        tokens: Dict[str, int],
        duration_ms: int,
        model: str
    ) -> None:
        """Log an LLM API call and add its tokens to the run totals"""
        with self._lock:
            totals = self._data["token_usage"]
            for key in totals:
                totals[key] += int(tokens.get(key) or 0)

        self.log(
            level=LogLevel.INFO,
            step="llm_call",
            message=f"LLM call completed ({tokens.get('total_tokens', 'N/A')} tokens)",
            metadata={
                "model": model,
                "tokens": tokens,
                "prompt_preview": prompt_preview[:500] if prompt_preview else None,
                "response_preview": response_preview[:500] if response_preview else None,
            },
            duration_ms=duration_ms
        )

    def variable_resolved(
        self,
        name: str,
        success: bool,
        duration_ms: Optional[int] = None,
        error: Optional[str] = None
    ) -> None:
        """Record the outcome of one report variable"""
        outcome = {"success": success, "duration_ms": duration_ms}
        if error:
            outcome["error"] = error
        with self._lock:
            self._data["variables"][name] = outcome

        self.log(
            level=LogLevel.INFO if success else LogLevel.ERROR,
            step="variable",
            message=f"Variable {name} {'resolved' if success else 'failed'}",
            metadata={"error": error} if error else None,
            duration_ms=duration_ms
        )

    def record_inputs(self, inputs: Dict[str, Any]) -> None:
        """Record the validated execution inputs"""
        self.info(step="input", message="Execution inputs validated", metadata={"inputs": inputs})

    def record_output(self, output_format: str, file_path: str) -> None:
        """Record the exported artifact"""
        self.info(
            step="output",
            message=f"{output_format} output generated",
            metadata={"file_path": str(file_path), "format": output_format}
        )

    def finalize(self, success: bool = True, error_message: Optional[str] = None) -> None:
        """Close the log with completion status and total duration"""
        with self._lock:
            self._data["completed_at"] = self._now()
            self._data["success"] = success
            self._data["total_duration_ms"] = int((time.time() - self._started) * 1000)
            if error_message:
                self._data["error"] = error_message
            self._flush()

    def get_logs(self) -> Dict[str, Any]:
        """Snapshot of everything logged so far"""
        with self._lock:
            return json.loads(json.dumps(self._data, default=str))
