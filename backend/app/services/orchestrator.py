"""
Workflow orchestrator for VEC uploads.

Runs the upload, process and generateAas stages in order and streams a
WorkflowUpdate before and after each stage. The first failing stage ends
the run.
"""

import json
import logging
import re
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Any, Protocol
from urllib.parse import quote

from app.exceptions import ParseError, UpstreamError
from app.schemas.generator import CreateAasResponse
from app.schemas.workflow import UploadRequest, WorkflowStepName, WorkflowUpdate
from app.services.xml_transformer import ParsedNode, XmlToJsonTransformer
from app.utils.messages import get_message

logger = logging.getLogger(__name__)

VIEWER_PATH = "/viewer"

_UNSAFE_ID_CHARS = re.compile(r"[^A-Za-z0-9_-]")


class AasGenerator(Protocol):
    async def create_aas(
        self,
        asset_id_short: str,
        blueprint_ids: list[str] | None = None,
        data: Any = None,
        language: str | None = None,
    ) -> CreateAasResponse: ...


class StageError(Exception):
    """A stage failure with a message meant for the user."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


def parse_blueprint_ids(raw: str | None) -> list[str] | None:
    """
    Parse the blueprint ID setting.

    Anything other than a JSON array of strings is logged and ignored.
    """
    if raw is None or not raw.strip():
        return None
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning(f"Ignoring malformed blueprint ID configuration: {raw!r}")
        return None
    if not isinstance(parsed, list) or not all(isinstance(v, str) for v in parsed):
        logger.warning(f"Blueprint ID configuration is not a list of strings: {raw!r}")
        return None
    return parsed


def derive_asset_id_short(organization_name: str, user_name: str, filename: str) -> str:
    """
    Build a stable assetIdShort from the submission.

    Examples:
        ("ACME Corp", "Jane", "harness v2.vec") -> "ACME-Corp_Jane_harness-v2"
    """
    base_name = filename.replace("\\", "/").rsplit("/", 1)[-1]
    stem, dot, _ = base_name.rpartition(".")
    if dot and stem:
        base_name = stem
    combined = f"{organization_name}_{user_name}_{base_name}"
    return _UNSAFE_ID_CHARS.sub("-", combined)


def build_viewer_url(response: CreateAasResponse) -> str | None:
    """Viewer path for a created AAS, preferring the encoded identifier."""
    identifier = response.base64EncodedAasId or response.aasId
    if not identifier:
        return None
    return f"{VIEWER_PATH}/{quote(identifier, safe='')}"


@dataclass
class WorkflowContext:
    """Working state of a single run. Never shared across runs."""

    request: UploadRequest
    language: str | None = None
    parsed: ParsedNode | None = None
    asset_id_short: str | None = None
    redirect_url: str | None = None


class WorkflowStage(ABC):
    name: WorkflowStepName

    @abstractmethod
    async def run(self, context: WorkflowContext) -> None:
        raise NotImplementedError


class UploadStage(WorkflowStage):
    name = WorkflowStepName.UPLOAD

    async def run(self, context: WorkflowContext) -> None:
        # The acceptance filter already guarded entry
        file = context.request.file
        logger.info(f"Received {file.filename} ({file.size} bytes)")


class ProcessStage(WorkflowStage):
    name = WorkflowStepName.PROCESS

    def __init__(self, transformer: XmlToJsonTransformer):
        self._transformer = transformer

    async def run(self, context: WorkflowContext) -> None:
        file = context.request.file
        try:
            context.parsed = self._transformer.transform(file.content)
        except ParseError as e:
            logger.warning(f"Could not parse {file.filename}: {e}")
            raise StageError(get_message("parseError")) from e
        logger.info(f"Parsed {file.filename}")


class GenerateAasStage(WorkflowStage):
    name = WorkflowStepName.GENERATE_AAS

    def __init__(self, generator: AasGenerator, blueprint_ids: list[str] | None):
        self._generator = generator
        self._blueprint_ids = blueprint_ids

    async def run(self, context: WorkflowContext) -> None:
        if context.parsed is None:
            raise ValueError("WorkflowContext.parsed must be set before AAS generation")

        request = context.request
        context.asset_id_short = derive_asset_id_short(
            request.organizationName, request.userName, request.file.filename
        )
        logger.info(f"Creating AAS {context.asset_id_short}")

        try:
            response = await self._generator.create_aas(
                context.asset_id_short,
                blueprint_ids=self._blueprint_ids,
                data=context.parsed.to_json(),
                language=context.language,
            )
        except UpstreamError as e:
            raise StageError(e.message or get_message("generateAasError")) from e

        context.redirect_url = build_viewer_url(response)
        logger.info(f"Created AAS {context.asset_id_short} -> {context.redirect_url}")


class WorkflowOrchestrator:
    """
    Executes the upload workflow for a single request.

    Stages run sequentially; there are no retries. A failed update is the
    only failure signal returned to the caller.
    """

    def __init__(
        self,
        generator: AasGenerator,
        transformer: XmlToJsonTransformer | None = None,
        blueprint_ids: list[str] | None = None,
        language: str | None = None,
    ):
        self.language = language
        self.stages: list[WorkflowStage] = [
            UploadStage(),
            ProcessStage(transformer or XmlToJsonTransformer()),
            GenerateAasStage(generator, blueprint_ids),
        ]

    async def run(self, request: UploadRequest) -> AsyncIterator[WorkflowUpdate]:
        """
        Run all stages for a request.

        Yields:
            A processing update before each stage, then a completed or failed
            update after it. The final completed update carries the redirect URL.
        """
        context = WorkflowContext(request=request, language=request.language or self.language)
        last_stage = self.stages[-1]

        for stage in self.stages:
            yield WorkflowUpdate.processing(stage.name)
            try:
                await stage.run(context)
            except StageError as e:
                logger.warning(f"Stage {stage.name.value} failed: {e.message}")
                yield WorkflowUpdate.failed(stage.name, e.message)
                return
            except Exception:
                logger.exception(f"Unexpected error in stage {stage.name.value}")
                yield WorkflowUpdate.failed(stage.name, get_message("unexpectedError"))
                return

            redirect_url = context.redirect_url if stage is last_stage else None
            yield WorkflowUpdate.completed(stage.name, redirect_url)


async def collect_run(
    orchestrator: WorkflowOrchestrator, request: UploadRequest
) -> list[WorkflowUpdate]:
    """Materialize a run into a list of updates."""
    return [update async for update in orchestrator.run(request)]
