"""
SQLAlchemy models for pipeline executions
"""
import enum
from datetime import datetime
from sqlalchemy import Column, String, DateTime, Text, Enum
from sqlalchemy.ext.declarative import declarative_base

Base = declarative_base()


class ExecutionStatus(enum.Enum):
    """Execution status; running is the only non-terminal state"""
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class Execution(Base):
    """One run of a registered pipeline"""
    __tablename__ = "executions"

    id = Column(String(36), primary_key=True)  # UUID
    pipeline_id = Column(String(100), nullable=False, index=True)
    status = Column(Enum(ExecutionStatus), default=ExecutionStatus.RUNNING)

    # Inputs as submitted (JSON string)
    inputs_json = Column(Text, nullable=True)

    # Workspace and results
    workspace_dir = Column(Text, nullable=True)
    output_format = Column(String(10), nullable=True)
    output_path = Column(Text, nullable=True)

    # Error handling
    error_message = Column(Text, nullable=True)
    error_traceback = Column(Text, nullable=True)

    # Timestamps
    started_at = Column(DateTime, default=datetime.utcnow)
    completed_at = Column(DateTime, nullable=True)

    def to_dict(self):
        """Convert to dictionary"""
        return {
            "id": self.id,
            "pipeline_id": self.pipeline_id,
            "status": self.status.value if self.status else None,
            "inputs_json": self.inputs_json,
            "workspace_dir": self.workspace_dir,
            "output_format": self.output_format,
            "output_path": self.output_path,
            "error_message": self.error_message,
            "error_traceback": self.error_traceback,
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }
