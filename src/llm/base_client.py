"""Abstract backend protocol for provider-agnostic model calls."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class LLMBackend(Protocol):
    """Structural protocol satisfied by any client that can return a text reply.

    Implementations raise UpstreamError (or a subclass) for non-success
    responses and never retry; every failure is terminal for the submission.
    """

    async def complete(self, prompt: str, *, model: str, system_prompt: str = "") -> str:
        """Return the model's reply text for one system + user exchange."""
        ...
