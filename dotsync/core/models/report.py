"""
Report models — per-stage results and the run-wide UpdateReport.

The UpdateReport is created by the top-level run function, handed to
every stage, and discarded when the process exits after printing the
summary.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class StageStatus(str, Enum):
    """Final status of a stage."""

    UPDATED = "updated"
    CURRENT = "up-to-date"         # ran, nothing to change
    SKIPPED = "skipped"
    FAILED = "failed"


class StageResult(BaseModel):
    """Outcome of one stage run."""

    name: str
    title: str = ""
    status: StageStatus = StageStatus.SKIPPED
    reason: str = ""                # why it was skipped
    error: str | None = None        # why it failed
    items: dict[str, list[str]] = Field(default_factory=dict)

    @property
    def label(self) -> str:
        return self.title or self.name

    @classmethod
    def updated(
        cls,
        name: str,
        title: str = "",
        items: dict[str, list[str]] | None = None,
    ) -> StageResult:
        return cls(name=name, title=title, status=StageStatus.UPDATED, items=items or {})

    @classmethod
    def current(cls, name: str, title: str = "") -> StageResult:
        return cls(name=name, title=title, status=StageStatus.CURRENT)

    @classmethod
    def skipped(cls, name: str, reason: str, title: str = "") -> StageResult:
        return cls(name=name, title=title, status=StageStatus.SKIPPED, reason=reason)

    @classmethod
    def failed(
        cls,
        name: str,
        error: str,
        title: str = "",
        items: dict[str, list[str]] | None = None,
    ) -> StageResult:
        return cls(
            name=name,
            title=title,
            status=StageStatus.FAILED,
            error=error,
            items=items or {},
        )


class UpdateReport(BaseModel):
    """Accumulated results of one update-all run.

    ``statuses`` maps stage name to status, ``items`` maps an item
    group label (e.g. "Homebrew casks") to the names updated in that
    group, and ``skipped`` is the flat list of skip reasons.
    """

    statuses: dict[str, StageStatus] = Field(default_factory=dict)
    titles: dict[str, str] = Field(default_factory=dict)
    items: dict[str, list[str]] = Field(default_factory=dict)
    skipped: list[str] = Field(default_factory=list)
    failures: dict[str, str] = Field(default_factory=dict)

    def record(self, result: StageResult) -> None:
        """Merge a stage result into the report."""
        self.statuses[result.name] = result.status
        self.titles[result.name] = result.label

        for group, names in result.items.items():
            self.items.setdefault(group, []).extend(names)

        if result.status == StageStatus.SKIPPED:
            self.skipped.append(f"{result.name} ({result.reason})" if result.reason else result.name)
        elif result.status == StageStatus.FAILED:
            self.failures[result.name] = result.error or "failed"

    def status_of(self, name: str) -> StageStatus | None:
        return self.statuses.get(name)

    @property
    def updated(self) -> list[str]:
        """Stage names that updated, in run order."""
        return [n for n, s in self.statuses.items() if s == StageStatus.UPDATED]

    def to_dict(self) -> dict:
        return self.model_dump(mode="json")
