"""
Engine Interfaces
=================
Shared status enum and the protocol for injected drafting clients.

The LLM client is never a module-level singleton: callers construct it
once and pass it into the entry points that need it.
"""
from enum import Enum
from typing import Protocol


class GenerationStatus(str, Enum):
    """Outcome of an engine entry point."""
    SUCCESS = "success"
    PARTIAL = "partial"      # Completed with uncovered or rejected items
    FAILED = "failed"        # Upstream failure, no output


class ProposalDrafter(Protocol):
    """Client that drafts a schedule from a prompt (e.g. an LLM)."""

    def draft(self, prompt: str, contesto: str) -> str:
        """
        Draft a schedule proposal.

        Args:
            prompt: Natural-language instructions and constraints
            contesto: Serialized context excerpt (JSON)

        Returns:
            Raw JSON text of the proposal
        """
        ...
