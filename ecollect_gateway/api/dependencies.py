"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from sqlalchemy.orm import sessionmaker

from ecollect_gateway.config import settings
from ecollect_gateway.infrastructure.clients.llm import LLMClient
from ecollect_gateway.infrastructure.clients.supabase import SupabaseRecordStore
from ecollect_gateway.infrastructure.database.session import get_session_factory
from ecollect_gateway.infrastructure.record_store import PostgresRecordStore, RecordStore


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_record_store(session_factory: sessionmaker = Depends(get_session_factory)) -> RecordStore:
    """Provide the configured record store backend"""
    if settings.store_backend == "supabase":
        return SupabaseRecordStore()
    return PostgresRecordStore(session_factory)


def get_llm_client() -> LLMClient:
    """Provide assistant completion client instance"""
    return LLMClient()
