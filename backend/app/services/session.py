"""
Upload sessions.

An upload session holds the wizard state for one user: the selected file,
form-field errors, the single visible error message and the projected
workflow status. Runs are dispatched as background tasks and guarded by the
session's request sequencer.
"""

import asyncio
import logging
from datetime import datetime, timedelta
from uuid import uuid4

from app.exceptions import RequestValidationError, SessionNotFoundError
from app.schemas.workflow import (
    FileInfo,
    UploadedFile,
    UploadRequest,
    UploadSessionState,
    WorkflowStatus,
    WorkflowStepStatus,
)
from app.services.file_filter import FileAcceptanceFilter, FilterDecision, Rejected
from app.services.orchestrator import WorkflowOrchestrator
from app.services.projector import WorkflowStatusProjector
from app.services.sequencer import GenerationToken, RequestSequencer
from app.utils.messages import get_message

logger = logging.getLogger(__name__)


def validate_submission(
    user_name: str,
    organization_name: str,
    file: UploadedFile | None,
) -> dict[str, str]:
    """Return field errors for a submission, empty when it is valid."""
    errors: dict[str, str] = {}
    if not user_name.strip():
        errors["userName"] = get_message("form.errors.userNameRequired")
    if not organization_name.strip():
        errors["organizationName"] = get_message("form.errors.organizationRequired")
    if file is None:
        errors["file"] = get_message("form.errors.fileRequired")
    return errors


class UploadSession:
    def __init__(
        self,
        session_id: str,
        orchestrator: WorkflowOrchestrator,
        file_filter: FileAcceptanceFilter,
        projector: WorkflowStatusProjector | None = None,
    ):
        self.session_id = session_id
        self._orchestrator = orchestrator
        self._filter = file_filter
        self._projector = projector or WorkflowStatusProjector()
        self._sequencer = RequestSequencer()
        self._task: asyncio.Task | None = None
        self._tasks: set[asyncio.Task] = set()
        self.last_touched = datetime.now()

        self.selected_file: UploadedFile | None = None
        self.field_errors: dict[str, str] = {}
        self.error_message: str | None = None
        self.status: WorkflowStatus = self._projector.initial()

    def touch(self) -> None:
        self.last_touched = datetime.now()

    @property
    def generation(self) -> int:
        return self._sequencer.generation

    def _reset_workflow(self) -> None:
        self.status = self._projector.initial()
        self.error_message = None

    def select_file(self, file: UploadedFile) -> FilterDecision:
        """Validate and select a file, superseding any run in flight."""
        self._sequencer.invalidate()
        self._reset_workflow()

        decision = self._filter.accept_file(file)
        if isinstance(decision, Rejected):
            self.selected_file = None
            self.error_message = decision.message
            logger.info(f"Session {self.session_id}: rejected {file.filename} ({decision.reason})")
            return decision

        self.selected_file = file
        return decision

    def clear_file(self) -> None:
        self._sequencer.invalidate()
        self.selected_file = None
        self.field_errors = {}
        self._reset_workflow()

    def submit(
        self,
        user_name: str,
        organization_name: str,
        language: str | None = None,
    ) -> GenerationToken:
        """
        Validate the form and start a run in the background.

        Raises:
            RequestValidationError: If a name is blank or no file is selected
        """
        errors = validate_submission(user_name, organization_name, self.selected_file)
        self.field_errors = {k: v for k, v in errors.items() if k != "file"}
        if errors:
            exc = RequestValidationError(errors)
            self.error_message = exc.message
            raise exc

        request = UploadRequest(
            file=self.selected_file,
            userName=user_name,
            organizationName=organization_name,
            language=language,
        )

        token = self._sequencer.advance()
        self._reset_workflow()
        self._task = asyncio.create_task(self._consume(token, request))
        # Superseded runs keep draining after _task moves on
        self._tasks.add(self._task)
        self._task.add_done_callback(self._tasks.discard)
        logger.info(f"Session {self.session_id}: started run {token.generation}")
        return token

    async def _consume(self, token: GenerationToken, request: UploadRequest) -> None:
        updates = self._sequencer.guard(token, self._orchestrator.run(request))
        async for update in updates:
            self.status = self._projector.apply(self.status, update)
            if update.currentStep.status == WorkflowStepStatus.FAILED:
                self.error_message = self.status.errorMessage

    async def wait(self) -> None:
        """Wait for the most recently started run to finish."""
        if self._task is not None:
            await self._task

    def cancel(self) -> None:
        self._sequencer.invalidate()
        for task in list(self._tasks):
            if not task.done():
                task.cancel()

    def snapshot(self) -> UploadSessionState:
        file_info = None
        if self.selected_file is not None:
            file_info = FileInfo(
                filename=self.selected_file.filename,
                size=self.selected_file.size,
                contentType=self.selected_file.content_type or None,
            )
        return UploadSessionState(
            sessionId=self.session_id,
            generation=self.generation,
            file=file_info,
            fieldErrors=dict(self.field_errors),
            errorMessage=self.error_message,
            status=self.status,
        )


class UploadSessionStore:
    """In-memory registry of upload sessions, expiring idle ones."""

    def __init__(
        self,
        orchestrator: WorkflowOrchestrator,
        file_filter: FileAcceptanceFilter,
        ttl: timedelta = timedelta(minutes=30),
    ):
        self._orchestrator = orchestrator
        self._filter = file_filter
        self._ttl = ttl
        self._sessions: dict[str, UploadSession] = {}

    def _is_expired(self, session: UploadSession) -> bool:
        return datetime.now() - session.last_touched >= self._ttl

    def _evict_expired(self) -> None:
        expired = [sid for sid, s in self._sessions.items() if self._is_expired(s)]
        for session_id in expired:
            self._sessions.pop(session_id).cancel()
        if expired:
            logger.info(f"Evicted {len(expired)} idle upload session(s)")

    def create(self) -> UploadSession:
        self._evict_expired()
        session = UploadSession(uuid4().hex, self._orchestrator, self._filter)
        self._sessions[session.session_id] = session
        return session

    def get(self, session_id: str) -> UploadSession:
        self._evict_expired()
        try:
            session = self._sessions[session_id]
        except KeyError:
            raise SessionNotFoundError(f"Unknown upload session: {session_id}") from None
        session.touch()
        return session

    def delete(self, session_id: str) -> None:
        session = self.get(session_id)
        session.cancel()
        del self._sessions[session_id]

    def __len__(self) -> int:
        return len(self._sessions)
