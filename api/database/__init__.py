"""Database models and connection management"""
from .connection import get_engine, init_db, make_session_factory, SessionLocal
from .models import Base, Execution, ExecutionStatus

__all__ = ["get_engine", "init_db", "make_session_factory", "SessionLocal", "Base", "Execution", "ExecutionStatus"]
