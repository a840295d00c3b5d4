import asyncio

import pytest

from app.exceptions import UpstreamError, UpstreamErrorKind
from app.schemas.generator import CreateAasResponse
from app.schemas.workflow import UploadedFile, UploadRequest
from app.services.file_filter import FileAcceptanceFilter
from app.services.orchestrator import WorkflowOrchestrator

VEC_XML = """<?xml version="1.0" encoding="UTF-8"?>
<vec:VecContent xmlns:vec="http://www.prostep.org/ecad-if/2011/vec" id="id_1000_0">
    <VecVersion>1.2.0</VecVersion>
    <DocumentVersion id="id_1001_0">
        <DocumentNumber>HARNESS-42</DocumentNumber>
        <DocumentVersion>A</DocumentVersion>
    </DocumentVersion>
    <PartVersion id="id_1002_0"><PartNumber>P-1</PartNumber></PartVersion>
    <PartVersion id="id_1003_0"><PartNumber>P-2</PartNumber></PartVersion>
</vec:VecContent>
"""


class FakeGenerator:
    """In-memory stand-in for the AAS generator client."""

    def __init__(
        self,
        encoded_id: str | None = "abc123",
        aas_id: str | None = "https://example.com/ids/aas/1",
        error: Exception | None = None,
        gate: asyncio.Event | None = None,
    ):
        self.encoded_id = encoded_id
        self.aas_id = aas_id
        self.error = error
        self.gate = gate
        self.calls: list[dict] = []

    async def create_aas(self, asset_id_short, blueprint_ids=None, data=None, language=None):
        self.calls.append(
            {
                "asset_id_short": asset_id_short,
                "blueprint_ids": blueprint_ids,
                "data": data,
                "language": language,
            }
        )
        call_number = len(self.calls)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        encoded = self.encoded_id
        if encoded is not None and self.gate is not None:
            encoded = f"{encoded}-{call_number}"
        return CreateAasResponse(aasId=self.aas_id, base64EncodedAasId=encoded)


@pytest.fixture()
def vec_xml() -> str:
    return VEC_XML


@pytest.fixture()
def vec_file() -> UploadedFile:
    return UploadedFile(
        filename="harness.vec",
        content_type="application/octet-stream",
        content=VEC_XML.encode("utf-8"),
    )


@pytest.fixture()
def upload_request(vec_file: UploadedFile) -> UploadRequest:
    return UploadRequest(file=vec_file, userName="Jane Doe", organizationName="ACME Corp")


@pytest.fixture()
def fake_generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture()
def orchestrator(fake_generator: FakeGenerator) -> WorkflowOrchestrator:
    return WorkflowOrchestrator(
        generator=fake_generator,
        blueprint_ids=["bp-nameplate"],
        language="en",
    )


@pytest.fixture()
def file_filter() -> FileAcceptanceFilter:
    return FileAcceptanceFilter()


@pytest.fixture()
def upstream_conflict() -> UpstreamError:
    return UpstreamError(UpstreamErrorKind.CONFLICT, "AAS with this id already exists")
