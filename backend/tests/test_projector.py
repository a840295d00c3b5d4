"""
Tests for the workflow status projector.
"""

import pytest

from app.schemas.workflow import (
    CurrentStep,
    StepDisplayStatus,
    WorkflowResult,
    WorkflowStepName,
    WorkflowStepStatus,
    WorkflowUpdate,
)
from app.services.projector import WorkflowStatusProjector
from app.utils.messages import get_message

UPLOAD = WorkflowStepName.UPLOAD
PROCESS = WorkflowStepName.PROCESS
GENERATE = WorkflowStepName.GENERATE_AAS


def _successful_run() -> list[WorkflowUpdate]:
    return [
        WorkflowUpdate.processing(UPLOAD),
        WorkflowUpdate.completed(UPLOAD),
        WorkflowUpdate.processing(PROCESS),
        WorkflowUpdate.completed(PROCESS),
        WorkflowUpdate.processing(GENERATE),
        WorkflowUpdate.completed(GENERATE, "/viewer/abc123"),
    ]


@pytest.fixture()
def projector() -> WorkflowStatusProjector:
    return WorkflowStatusProjector()


class TestProjection:
    def test_initial_state_is_idle(self, projector):
        status = projector.initial()

        assert set(status.steps.values()) == {StepDisplayStatus.IDLE}
        assert not status.inProgress
        assert not status.isComplete
        assert status.currentStep is None

    def test_successful_run(self, projector):
        """Test a complete run ends with all steps succeeded and a redirect."""
        status = projector.fold(_successful_run())

        assert set(status.steps.values()) == {StepDisplayStatus.SUCCEEDED}
        assert status.isComplete
        assert not status.inProgress
        assert status.redirectUrl == "/viewer/abc123"
        assert status.errorMessage is None
        assert status.currentStep is None

    def test_partial_run_is_in_progress(self, projector):
        status = projector.fold(_successful_run()[:2])

        assert status.steps[UPLOAD] == StepDisplayStatus.SUCCEEDED
        assert status.steps[PROCESS] == StepDisplayStatus.IDLE
        assert status.inProgress
        assert status.currentStep == PROCESS
        assert status.redirectUrl is None

    def test_active_step_is_current(self, projector):
        status = projector.fold(_successful_run()[:3])

        assert status.steps[PROCESS] == StepDisplayStatus.ACTIVE
        assert status.currentStep == PROCESS

    def test_fold_is_deterministic(self, projector):
        updates = _successful_run()[:4]
        assert projector.fold(updates) == projector.fold(updates)

    def test_apply_does_not_mutate_input(self, projector):
        initial = projector.initial()
        projector.apply(initial, WorkflowUpdate.processing(UPLOAD))
        assert initial.steps[UPLOAD] == StepDisplayStatus.IDLE


class TestFailures:
    def test_failure_sets_error(self, projector):
        updates = _successful_run()[:3] + [WorkflowUpdate.failed(PROCESS, "bad file")]
        status = projector.fold(updates)

        assert status.steps[PROCESS] == StepDisplayStatus.FAILED
        assert status.errorMessage == "bad file"
        assert not status.inProgress
        assert status.currentStep == PROCESS

    def test_updates_after_failure_are_ignored(self, projector):
        """Test the first failure is final."""
        updates = [
            WorkflowUpdate.processing(UPLOAD),
            WorkflowUpdate.failed(UPLOAD, "first"),
            WorkflowUpdate.failed(PROCESS, "second"),
            WorkflowUpdate.completed(GENERATE, "/viewer/x"),
        ]
        status = projector.fold(updates)

        assert status.errorMessage == "first"
        assert status.steps[PROCESS] == StepDisplayStatus.IDLE
        assert status.redirectUrl is None

    def test_failure_without_message_uses_fallback(self, projector):
        update = WorkflowUpdate(
            currentStep=CurrentStep(name=UPLOAD, status=WorkflowStepStatus.FAILED)
        )
        status = projector.apply(projector.initial(), update)

        assert status.errorMessage == get_message("processingError")


class TestRedirect:
    def test_redirect_only_from_final_step(self, projector):
        update = WorkflowUpdate(
            currentStep=CurrentStep(name=PROCESS, status=WorkflowStepStatus.COMPLETED),
            result=WorkflowResult(redirectUrl="/viewer/early"),
        )
        status = projector.apply(projector.initial(), update)

        assert status.redirectUrl is None

    def test_serialized_state_includes_derived_fields(self, projector):
        data = projector.fold(_successful_run()).model_dump(mode="json")

        assert data["isComplete"] is True
        assert data["inProgress"] is False
        assert data["steps"] == {
            "upload": "succeeded",
            "process": "succeeded",
            "generateAas": "succeeded",
        }
