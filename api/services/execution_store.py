"""
Execution store - persists execution records and enforces their status transitions
"""
import json
import threading
from datetime import datetime
from typing import Any, Dict, List, Optional
import logging

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from ..database.models import Execution, ExecutionStatus
from ..database.connection import SessionLocal

logger = logging.getLogger(__name__)


class ExecutionStateError(Exception):
    """Raised on a duplicate insert or a transition out of a terminal status"""
    pass


class ExecutionStore:
    """
    Thread-safe execution records.

    Each id is inserted exactly once, as running. The only transitions are
    running -> completed and running -> failed.
    """

    def __init__(self, session_factory: sessionmaker = SessionLocal):
        self._session_factory = session_factory
        self._lock = threading.Lock()

    def create(
        self,
        execution_id: str,
        pipeline_id: str,
        inputs: Dict[str, Any],
        workspace_dir: str
    ) -> Dict[str, Any]:
        """Insert a new running execution"""
        with self._lock:
            db = self._session_factory()
            try:
                if db.get(Execution, execution_id) is not None:
                    raise ExecutionStateError(f"Execution {execution_id} already exists")

                execution = Execution(
                    id=execution_id,
                    pipeline_id=pipeline_id,
                    status=ExecutionStatus.RUNNING,
                    inputs_json=json.dumps(inputs, default=str),
                    workspace_dir=workspace_dir,
                    started_at=datetime.utcnow()
                )
                db.add(execution)
                db.commit()
                db.refresh(execution)
                logger.info(f"Created execution {execution_id} for pipeline {pipeline_id}")
                return execution.to_dict()
            finally:
                db.close()

    def complete(self, execution_id: str, output_path: str, output_format: str) -> Dict[str, Any]:
        """Mark a running execution completed with its artifact"""
        return self._finish(
            execution_id,
            ExecutionStatus.COMPLETED,
            output_path=output_path,
            output_format=output_format
        )

    def fail(
        self,
        execution_id: str,
        error_message: str,
        error_traceback: Optional[str] = None
    ) -> Dict[str, Any]:
        """Mark a running execution failed"""
        return self._finish(
            execution_id,
            ExecutionStatus.FAILED,
            error_message=error_message,
            error_traceback=error_traceback
        )

    def _finish(self, execution_id: str, status: ExecutionStatus, **fields) -> Dict[str, Any]:
        with self._lock:
            db = self._session_factory()
            try:
                execution = db.get(Execution, execution_id)
                if execution is None:
                    raise ExecutionStateError(f"Execution {execution_id} not found")
                if execution.status != ExecutionStatus.RUNNING:
                    raise ExecutionStateError(
                        f"Execution {execution_id} is {execution.status.value}; "
                        f"cannot move to {status.value}"
                    )

                execution.status = status
                execution.completed_at = datetime.utcnow()
                for key, value in fields.items():
                    setattr(execution, key, value)
                db.commit()
                db.refresh(execution)
                return execution.to_dict()
            finally:
                db.close()

    def ping(self) -> bool:
        """True when the backing database answers a trivial query"""
        with self._lock:
            db = self._session_factory()
            try:
                db.execute(text("SELECT 1"))
                return True
            except SQLAlchemyError as e:
                logger.warning(f"⚠️ Execution store check failed: {e}")
                return False
            finally:
                db.close()

    def get(self, execution_id: str) -> Optional[Dict[str, Any]]:
        # Readers share the single in-memory connection with writers
        with self._lock:
            db = self._session_factory()
            try:
                execution = db.get(Execution, execution_id)
                return execution.to_dict() if execution else None
            finally:
                db.close()

    def list(
        self,
        pipeline_id: Optional[str] = None,
        status_filter: Optional[ExecutionStatus] = None,
        limit: int = 50
    ) -> List[Dict[str, Any]]:
        """Most recent executions first"""
        with self._lock:
            db = self._session_factory()
            try:
                query = db.query(Execution)
                if pipeline_id:
                    query = query.filter(Execution.pipeline_id == pipeline_id)
                if status_filter:
                    query = query.filter(Execution.status == status_filter)
                executions = query.order_by(Execution.started_at.desc()).limit(limit).all()
                return [execution.to_dict() for execution in executions]
            finally:
                db.close()
