"""
End-of-run summary built from an UpdateReport.

Item names are de-duplicated after trimming whitespace and sorted;
group order follows the order stages recorded them.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from dotsync.core.models.report import UpdateReport


class ItemGroup(BaseModel):
    """One "<label> updated (N)" block."""

    label: str
    names: list[str] = Field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.names)


class Summary(BaseModel):
    """Renderable view of a finished run."""

    updated: list[str] = Field(default_factory=list)
    groups: list[ItemGroup] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    failed: dict[str, str] = Field(default_factory=dict)

    def to_dict(self) -> dict:
        data = self.model_dump(mode="json")
        for group in data["groups"]:
            group["count"] = len(group["names"])
        return data


def dedupe_sorted(names: list[str]) -> list[str]:
    """Strip, drop empties, de-duplicate by exact equality, sort."""
    return sorted({n.strip() for n in names if n.strip()})


def summarize(report: UpdateReport) -> Summary:
    groups = []
    for label, names in report.items.items():
        unique = dedupe_sorted(names)
        if unique:
            groups.append(ItemGroup(label=label, names=unique))

    return Summary(
        updated=[report.titles.get(n, n) for n in report.updated],
        groups=groups,
        skipped=list(report.skipped),
        failed=dict(report.failures),
    )
