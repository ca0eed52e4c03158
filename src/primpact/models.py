"""Data models for a pull request analysis.

Every record is an immutable pydantic model. Python attributes are snake_case;
serialized output (``model_dump(by_alias=True)``) uses the camelCase field
names that downstream renderers depend on.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _Record(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


class FileStatus(str, Enum):
    """How a file changed between two refs."""

    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"
    COPIED = "copied"


class FileCategory(str, Enum):
    """Coarse role of a file in the repository."""

    SOURCE = "source"
    TEST = "test"
    DOC = "doc"
    CONFIG = "config"
    OTHER = "other"


class SymbolKind(str, Enum):
    """Kinds of exported symbols."""

    FUNCTION = "function"
    CLASS = "class"
    VARIABLE = "variable"
    CONST = "const"
    TYPE = "type"
    INTERFACE = "interface"
    ENUM = "enum"


class BreakingChangeType(str, Enum):
    REMOVED_EXPORT = "removed_export"
    CHANGED_SIGNATURE = "changed_signature"
    CHANGED_TYPE = "changed_type"
    RENAMED_EXPORT = "renamed_export"


class Severity(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


SEVERITY_BY_TYPE: dict[BreakingChangeType, Severity] = {
    BreakingChangeType.REMOVED_EXPORT: Severity.HIGH,
    BreakingChangeType.CHANGED_SIGNATURE: Severity.MEDIUM,
    BreakingChangeType.CHANGED_TYPE: Severity.MEDIUM,
    BreakingChangeType.RENAMED_EXPORT: Severity.LOW,
}


# -- Diff layer --


class ChangedFile(_Record):
    """A single file touched by the change set."""

    path: str
    status: FileStatus
    old_path: str | None = None  # rename/copy source
    additions: int = Field(default=0, ge=0)
    deletions: int = Field(default=0, ge=0)
    language: str = "unknown"
    category: FileCategory


# -- Export layer --


class ExportedSymbol(_Record):
    """A symbol exported from a module."""

    name: str
    kind: SymbolKind
    signature: str | None = None
    is_default: bool = False

    @property
    def key(self) -> tuple[bool, str]:
        """Identity used for deduplication and base/head matching."""
        return (self.is_default, self.name)


class FileExports(_Record):
    """All exported symbols of one file, in extraction order."""

    file_path: str
    symbols: list[ExportedSymbol] = Field(default_factory=list)


# -- Breaking changes --


class BreakingChange(_Record):
    """A removal or incompatible alteration of an exported symbol."""

    file_path: str
    type: BreakingChangeType
    symbol_name: str
    before: str
    after: str | None = None  # None only for removed exports
    severity: Severity
    consumers: list[str] = Field(default_factory=list)


# -- Test coverage --


class TestCoverageGap(_Record):
    """A changed source file with no correspondingly changed test."""

    __test__ = False  # not a pytest test class

    source_file: str
    expected_test_files: list[str] = Field(default_factory=list)
    test_file_exists: bool = False
    test_file_changed: bool = False


class TestCoverageReport(_Record):
    __test__ = False

    changed_source_files: int = Field(default=0, ge=0)
    source_files_with_test_changes: int = Field(default=0, ge=0)
    coverage_ratio: float = Field(default=1.0, ge=0.0, le=1.0)
    gaps: list[TestCoverageGap] = Field(default_factory=list)


# -- Documentation staleness --


class StaleReference(_Record):
    """A documentation line mentioning something removed or renamed."""

    doc_file: str
    line: int = Field(ge=1)
    reference: str
    reason: str


class DocStalenessReport(_Record):
    stale_references: list[StaleReference] = Field(default_factory=list)
    checked_files: list[str] = Field(default_factory=list)


# -- Impact graph --


class ImpactEdge(_Record):
    """``from_`` imports ``to``."""

    from_: str = Field(alias="from")
    to: str
    type: Literal["imports"] = "imports"


class ImpactGraph(_Record):
    directly_changed: list[str] = Field(default_factory=list)
    indirectly_affected: list[str] = Field(default_factory=list)
    edges: list[ImpactEdge] = Field(default_factory=list)


# -- Risk --


class RiskFactor(_Record):
    """One weighted contributor to the overall risk score."""

    name: str
    score: float = Field(ge=0, le=100)
    weight: float = Field(ge=0, le=1)
    description: str
    details: list[str] | None = None


class RiskAssessment(_Record):
    score: int = Field(ge=0, le=100)
    level: RiskLevel
    factors: list[RiskFactor] = Field(default_factory=list)


# -- Top-level result --


class PRAnalysis(_Record):
    """Immutable snapshot of one analysis run."""

    repo_path: str
    base_branch: str
    head_branch: str
    changed_files: list[ChangedFile] = Field(default_factory=list)
    breaking_changes: list[BreakingChange] = Field(default_factory=list)
    test_coverage: TestCoverageReport
    doc_staleness: DocStalenessReport
    impact_graph: ImpactGraph
    risk_score: RiskAssessment
    summary: str
