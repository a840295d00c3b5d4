"""
Pydantic schemas for API request/response models.
"""

from app.schemas.generator import (
    CreateAasRequest,
    CreateAasResponse,
)
from app.schemas.workflow import (
    UploadedFile,
    UploadRequest,
    UploadSessionState,
    WorkflowStatus,
    WorkflowStepName,
    WorkflowStepStatus,
    WorkflowUpdate,
)

__all__ = [
    "UploadedFile",
    "UploadRequest",
    "UploadSessionState",
    "WorkflowStatus",
    "WorkflowStepName",
    "WorkflowStepStatus",
    "WorkflowUpdate",
    "CreateAasRequest",
    "CreateAasResponse",
]
