"""
Pydantic models for the AAS generator API contract.
"""

from typing import Any

from pydantic import BaseModel


class CreateAasRequest(BaseModel):
    """Body of an AAS Creator request. Sent only when a field is set."""

    blueprintsIds: list[str] | None = None
    data: Any = None
    language: str | None = None

    def is_empty(self) -> bool:
        return self.blueprintsIds is None and self.data is None and self.language is None


class CreateAasResponse(BaseModel):
    """Identifier of the created AAS, plain and base64url-encoded."""

    aasId: str | None = None
    base64EncodedAasId: str | None = None

    model_config = {"extra": "ignore"}
