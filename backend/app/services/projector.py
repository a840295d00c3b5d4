"""
Workflow status projector.

Folds the step updates accepted by the sequencer into display state.
"""

from collections.abc import Iterable

from app.schemas.workflow import (
    StepDisplayStatus,
    WorkflowStatus,
    WorkflowStepName,
    WorkflowStepStatus,
    WorkflowUpdate,
)
from app.utils.messages import get_message

_DISPLAY_STATUS: dict[WorkflowStepStatus, StepDisplayStatus] = {
    WorkflowStepStatus.PROCESSING: StepDisplayStatus.ACTIVE,
    WorkflowStepStatus.COMPLETED: StepDisplayStatus.SUCCEEDED,
    WorkflowStepStatus.FAILED: StepDisplayStatus.FAILED,
}


class WorkflowStatusProjector:
    """Pure fold from WorkflowUpdates to WorkflowStatus."""

    def initial(self) -> WorkflowStatus:
        return WorkflowStatus()

    def apply(self, status: WorkflowStatus, update: WorkflowUpdate) -> WorkflowStatus:
        # A failed run has terminated; nothing after it is evaluated
        if status.hasFailed:
            return status

        step = update.currentStep
        steps = dict(status.steps)
        steps[step.name] = _DISPLAY_STATUS[step.status]

        error_message = status.errorMessage
        if step.status == WorkflowStepStatus.FAILED:
            error_message = step.error or get_message("processingError")

        redirect_url = status.redirectUrl
        if (
            step.name == WorkflowStepName.GENERATE_AAS
            and step.status == WorkflowStepStatus.COMPLETED
            and update.result is not None
            and update.result.redirectUrl
        ):
            redirect_url = update.result.redirectUrl

        return WorkflowStatus(steps=steps, errorMessage=error_message, redirectUrl=redirect_url)

    def fold(
        self,
        updates: Iterable[WorkflowUpdate],
        status: WorkflowStatus | None = None,
    ) -> WorkflowStatus:
        current = status or self.initial()
        for update in updates:
            current = self.apply(current, update)
        return current
