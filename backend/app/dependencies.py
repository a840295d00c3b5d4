"""
FastAPI dependency injection setup.

Provides factory functions for service instances used across routes.
"""

from datetime import timedelta
from functools import lru_cache

from app.clients.aas_generator_client import AasGeneratorClient
from app.config import get_settings
from app.services.file_filter import FileAcceptanceFilter
from app.services.orchestrator import WorkflowOrchestrator, parse_blueprint_ids
from app.services.session import UploadSessionStore


@lru_cache
def get_generator_client() -> AasGeneratorClient:
    """Get cached AAS generator client."""
    settings = get_settings()
    return AasGeneratorClient(
        base_url=settings.aas_generator_url,
        api_key=settings.aas_generator_api_key,
        timeout=settings.aas_generator_timeout_seconds,
    )


@lru_cache
def get_file_filter() -> FileAcceptanceFilter:
    """Get cached file acceptance filter."""
    return FileAcceptanceFilter(max_size_bytes=get_settings().max_upload_size_bytes)


@lru_cache
def get_orchestrator() -> WorkflowOrchestrator:
    """
    Get cached workflow orchestrator.

    Blueprint IDs are parsed once from settings and passed in explicitly.
    """
    settings = get_settings()
    return WorkflowOrchestrator(
        generator=get_generator_client(),
        blueprint_ids=parse_blueprint_ids(settings.aas_generator_blueprint_ids),
        language=settings.aas_generator_language,
    )


@lru_cache
def get_session_store() -> UploadSessionStore:
    """Get the process-wide upload session store."""
    return UploadSessionStore(
        get_orchestrator(),
        get_file_filter(),
        ttl=timedelta(minutes=get_settings().session_ttl_minutes),
    )
