"""
Upload endpoints for the VEC-to-AAS wizard.

Provides a streaming endpoint that runs the workflow for a single request
and session endpoints that keep wizard state between calls.
"""

import logging
from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from fastapi.responses import StreamingResponse

from app.dependencies import get_file_filter, get_orchestrator, get_session_store
from app.exceptions import RequestValidationError, SessionNotFoundError
from app.schemas.workflow import (
    ErrorDetail,
    SubmitRequest,
    UploadedFile,
    UploadRequest,
    UploadSessionState,
    WorkflowUpdate,
)
from app.services.file_filter import FileAcceptanceFilter, Rejected
from app.services.orchestrator import WorkflowOrchestrator
from app.services.session import UploadSession, UploadSessionStore, validate_submission

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/upload", tags=["upload"])


async def _read_upload(file: UploadFile) -> UploadedFile:
    contents = await file.read()
    return UploadedFile(
        filename=file.filename or "",
        content_type=file.content_type or "",
        content=contents,
    )


def _validation_exception(exc: RequestValidationError) -> HTTPException:
    detail = ErrorDetail(code="validationError", message=exc.message, fields=exc.errors)
    return HTTPException(
        status_code=422,
        detail=detail.model_dump(exclude_none=True),
    )


def _rejection_exception(decision: Rejected) -> HTTPException:
    detail = ErrorDetail(code=decision.reason, message=decision.message)
    return HTTPException(
        status_code=400,
        detail=detail.model_dump(exclude_none=True),
    )


async def _ndjson(updates: AsyncIterator[WorkflowUpdate]) -> AsyncIterator[str]:
    async for update in updates:
        yield update.model_dump_json(exclude_none=True) + "\n"


def _get_session(session_id: str, store: UploadSessionStore) -> UploadSession:
    try:
        return store.get(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Upload session not found")


@router.post("/process")
async def process_upload(
    file: Annotated[UploadFile, File(...)],
    orchestrator: Annotated[WorkflowOrchestrator, Depends(get_orchestrator)],
    file_filter: Annotated[FileAcceptanceFilter, Depends(get_file_filter)],
    userName: Annotated[str, Form()] = "",
    organizationName: Annotated[str, Form()] = "",
    language: Annotated[str | None, Form()] = None,
) -> StreamingResponse:
    """
    Run the upload workflow for a single submission.

    Streams one WorkflowUpdate per line as newline-delimited JSON. Invalid
    input is rejected before any step runs.
    """
    uploaded = await _read_upload(file)

    errors = validate_submission(userName, organizationName, uploaded)
    if errors:
        raise _validation_exception(RequestValidationError(errors))

    decision = file_filter.accept_file(uploaded)
    if isinstance(decision, Rejected):
        raise _rejection_exception(decision)

    request = UploadRequest(
        file=uploaded,
        userName=userName,
        organizationName=organizationName,
        language=language,
    )
    logger.info(f"Processing upload {uploaded.filename} for {request.organizationName}")
    return StreamingResponse(
        _ndjson(orchestrator.run(request)),
        media_type="application/x-ndjson",
    )


@router.post("/sessions", response_model=UploadSessionState, status_code=201)
async def create_session(
    store: Annotated[UploadSessionStore, Depends(get_session_store)],
) -> UploadSessionState:
    """Create a new upload session."""
    return store.create().snapshot()


@router.get("/sessions/{session_id}", response_model=UploadSessionState)
async def get_session_state(
    session_id: str,
    store: Annotated[UploadSessionStore, Depends(get_session_store)],
    wait: Annotated[
        bool, Query(description="Wait for the current run to finish")
    ] = False,
) -> UploadSessionState:
    """Get the current state of an upload session."""
    session = _get_session(session_id, store)
    if wait:
        await session.wait()
    return session.snapshot()


@router.put("/sessions/{session_id}/file", response_model=UploadSessionState)
async def select_file(
    session_id: str,
    file: Annotated[UploadFile, File(...)],
    store: Annotated[UploadSessionStore, Depends(get_session_store)],
) -> UploadSessionState:
    """
    Select a file for the session.

    A rejected file is reported in the returned state's error message.
    Any run in flight is superseded.
    """
    session = _get_session(session_id, store)
    session.select_file(await _read_upload(file))
    return session.snapshot()


@router.delete("/sessions/{session_id}/file", response_model=UploadSessionState)
async def clear_file(
    session_id: str,
    store: Annotated[UploadSessionStore, Depends(get_session_store)],
) -> UploadSessionState:
    """Remove the selected file and reset the workflow."""
    session = _get_session(session_id, store)
    session.clear_file()
    return session.snapshot()


@router.post(
    "/sessions/{session_id}/submit",
    response_model=UploadSessionState,
    status_code=202,
)
async def submit_session(
    session_id: str,
    form: SubmitRequest,
    store: Annotated[UploadSessionStore, Depends(get_session_store)],
) -> UploadSessionState:
    """Validate the form and start the workflow in the background."""
    session = _get_session(session_id, store)
    try:
        session.submit(form.userName, form.organizationName, form.language)
    except RequestValidationError as e:
        raise _validation_exception(e)
    return session.snapshot()


@router.delete("/sessions/{session_id}", status_code=204)
async def delete_session(
    session_id: str,
    store: Annotated[UploadSessionStore, Depends(get_session_store)],
) -> None:
    """Discard an upload session."""
    try:
        store.delete(session_id)
    except SessionNotFoundError:
        raise HTTPException(status_code=404, detail="Upload session not found")
