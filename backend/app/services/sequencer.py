"""
Request sequencing and cancellation guard.

Each submission captures a generation token. Updates from a run are only
passed on while its token is still the live generation; any newer
submission, file selection or file removal makes older runs inert.
"""

import logging
from collections.abc import AsyncIterable, AsyncIterator
from dataclasses import dataclass

from app.schemas.workflow import WorkflowUpdate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationToken:
    generation: int


class RequestSequencer:
    """Monotonic generation counter for one upload session."""

    def __init__(self) -> None:
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    def advance(self) -> GenerationToken:
        """Start a new generation and return its token."""
        self._generation += 1
        return GenerationToken(self._generation)

    def invalidate(self) -> None:
        """Supersede any run in flight without starting a new one."""
        self._generation += 1

    def is_current(self, token: GenerationToken) -> bool:
        return token.generation == self._generation

    async def guard(
        self,
        token: GenerationToken,
        updates: AsyncIterable[WorkflowUpdate],
    ) -> AsyncIterator[WorkflowUpdate]:
        """
        Pass through updates while the token is current.

        Once the token goes stale nothing more is yielded; the source is still
        drained so the superseded run finishes on its own.
        """
        stale = False
        async for update in updates:
            if not stale and not self.is_current(token):
                stale = True
                logger.debug(
                    f"Dropping updates of generation {token.generation} "
                    f"(current is {self._generation})"
                )
            if stale:
                continue
            yield update
