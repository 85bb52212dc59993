"""
Capability model — which external tools exist on this host.

A CapabilitySet is a snapshot taken once at the start of a run.
Stages still re-check their own tool right before they execute.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class Capability(BaseModel):
    """Presence fact for one external tool."""

    name: str
    present: bool = False
    path: str | None = None         # resolved binary or sourced script
    kind: str = "executable"        # 'executable' | 'shell-function'


class CapabilitySet(BaseModel):
    """All detected capabilities, keyed by tool name."""

    tools: dict[str, Capability] = Field(default_factory=dict)

    def has(self, name: str) -> bool:
        """Whether the named tool was detected."""
        cap = self.tools.get(name)
        return bool(cap and cap.present)

    def get(self, name: str) -> Capability | None:
        return self.tools.get(name)

    def present(self) -> list[str]:
        """Names of all detected tools, sorted."""
        return sorted(n for n, c in self.tools.items() if c.present)

    @classmethod
    def of(cls, *names: str) -> CapabilitySet:
        """Build a set where exactly the given tools are present."""
        return cls(tools={n: Capability(name=n, present=True) for n in names})
