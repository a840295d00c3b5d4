"""
Pydantic models for the upload workflow.

These models define the request consumed by the orchestrator, the step
updates it streams back, and the display state derived from them.
"""

from enum import Enum
from pathlib import PurePosixPath

from pydantic import BaseModel, Field, computed_field, field_validator


class WorkflowStepName(str, Enum):
    """Workflow steps in execution order."""

    UPLOAD = "upload"
    PROCESS = "process"
    GENERATE_AAS = "generateAas"


WORKFLOW_STEPS: tuple[WorkflowStepName, ...] = (
    WorkflowStepName.UPLOAD,
    WorkflowStepName.PROCESS,
    WorkflowStepName.GENERATE_AAS,
)


class WorkflowStepStatus(str, Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class StepDisplayStatus(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class UploadedFile(BaseModel):
    """A file blob with its declared name and content type."""

    filename: str
    content_type: str = ""
    content: bytes = Field(default=b"", repr=False, exclude=True)

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def base_name(self) -> str:
        """File name without directories and without its last extension."""
        name = PurePosixPath(self.filename.replace("\\", "/")).name
        stem, dot, _ = name.rpartition(".")
        return stem if dot and stem else name


class UploadRequest(BaseModel):
    """
    A validated submission.

    Names are trimmed and must not be empty; the file is expected to have
    passed the acceptance filter already.
    """

    file: UploadedFile
    userName: str
    organizationName: str
    language: str | None = None

    @field_validator("userName", "organizationName")
    @classmethod
    def ensure_not_blank(cls, v: str) -> str:
        value = v.strip()
        if not value:
            raise ValueError("must not be empty")
        return value


class CurrentStep(BaseModel):
    name: WorkflowStepName
    status: WorkflowStepStatus
    error: str | None = None

    model_config = {"frozen": True}


class WorkflowResult(BaseModel):
    redirectUrl: str | None = None

    model_config = {"frozen": True}


class WorkflowUpdate(BaseModel):
    """A single step transition emitted by the orchestrator."""

    currentStep: CurrentStep
    result: WorkflowResult | None = None

    model_config = {"frozen": True}

    @classmethod
    def processing(cls, name: WorkflowStepName) -> "WorkflowUpdate":
        return cls(currentStep=CurrentStep(name=name, status=WorkflowStepStatus.PROCESSING))

    @classmethod
    def completed(
        cls, name: WorkflowStepName, redirect_url: str | None = None
    ) -> "WorkflowUpdate":
        result = WorkflowResult(redirectUrl=redirect_url) if redirect_url else None
        return cls(
            currentStep=CurrentStep(name=name, status=WorkflowStepStatus.COMPLETED),
            result=result,
        )

    @classmethod
    def failed(cls, name: WorkflowStepName, error: str) -> "WorkflowUpdate":
        return cls(
            currentStep=CurrentStep(name=name, status=WorkflowStepStatus.FAILED, error=error)
        )


def _idle_steps() -> dict[WorkflowStepName, StepDisplayStatus]:
    return {step: StepDisplayStatus.IDLE for step in WORKFLOW_STEPS}


class WorkflowStatus(BaseModel):
    """
    Display state folded from a run's updates.

    Produced by the status projector; never mutated in place.
    """

    steps: dict[WorkflowStepName, StepDisplayStatus] = Field(default_factory=_idle_steps)
    errorMessage: str | None = None
    redirectUrl: str | None = None

    model_config = {"frozen": True}

    @computed_field
    @property
    def isComplete(self) -> bool:
        return all(self.steps[s] == StepDisplayStatus.SUCCEEDED for s in WORKFLOW_STEPS)

    @computed_field
    @property
    def hasFailed(self) -> bool:
        return any(status == StepDisplayStatus.FAILED for status in self.steps.values())

    @computed_field
    @property
    def inProgress(self) -> bool:
        started = any(status != StepDisplayStatus.IDLE for status in self.steps.values())
        return started and not self.hasFailed and not self.isComplete

    @computed_field
    @property
    def currentStep(self) -> WorkflowStepName | None:
        for status in (StepDisplayStatus.FAILED, StepDisplayStatus.ACTIVE):
            for step in WORKFLOW_STEPS:
                if self.steps[step] == status:
                    return step

        if not self.inProgress:
            return None

        # Between steps: the one after the last succeeded step is up next
        for index in range(len(WORKFLOW_STEPS) - 2, -1, -1):
            if self.steps[WORKFLOW_STEPS[index]] == StepDisplayStatus.SUCCEEDED:
                return WORKFLOW_STEPS[index + 1]
        return None


class SubmitRequest(BaseModel):
    """Form fields submitted for an upload session."""

    userName: str = ""
    organizationName: str = ""
    language: str | None = None


class FileInfo(BaseModel):
    filename: str
    size: int
    contentType: str | None = None


class UploadSessionState(BaseModel):
    """Snapshot of an upload session returned by the API."""

    sessionId: str
    generation: int
    file: FileInfo | None = None
    fieldErrors: dict[str, str] = Field(default_factory=dict)
    errorMessage: str | None = None
    status: WorkflowStatus = Field(default_factory=WorkflowStatus)


class ErrorDetail(BaseModel):
    code: str
    message: str
    fields: dict[str, str] | None = None
