"""Data classes shared by checks, the runner, and the report builder."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Status(str, Enum):
    """Outcome of a single check."""

    PASS = "PASS"
    WARNING = "WARNING"
    FAIL = "FAIL"


@dataclass
class CheckResult:
    """Exactly one per executed check.

    ``evidence`` always holds the full list of offending entities, even
    when ``message`` only shows the first few of them.
    """

    check_id: int = 0
    name: str = ""
    status: Status = Status.PASS
    message: str = ""
    elapsed_ms: int = 0
    category: str | None = None
    code: str | None = None
    evidence: list[str] = field(default_factory=list)

    @property
    def evidence_count(self) -> int:
        return len(self.evidence)


@dataclass(frozen=True)
class Candidate:
    """One unit of a batched query pass.

    ``label`` is embedded as a string literal in the merged statement and
    used to route rows back to this candidate.
    """

    label: str
    sql: str


@dataclass(frozen=True, order=True)
class ColumnRef:
    """A column as reported by catalog metadata."""

    schema: str
    table: str
    column: str
    data_type: str = field(default="", compare=False)

    @property
    def table_key(self) -> str:
        return f"{self.schema}.{self.table}"

    def __str__(self) -> str:
        return f"{self.schema}.{self.table}.{self.column}"


@dataclass(frozen=True)
class RelationshipEdge:
    """Directed child -> parent column link.

    ``source`` is ``"inferred"`` for name-matched links and ``"declared"``
    for links backed by a foreign key constraint.
    """

    child: ColumnRef
    parent: ColumnRef
    source: str = "inferred"

    @property
    def key(self) -> tuple[str, str, str, str, str, str]:
        """Column-pair identity, independent of how the edge was found."""
        return (
            self.child.schema,
            self.child.table,
            self.child.column,
            self.parent.schema,
            self.parent.table,
            self.parent.column,
        )

    def __str__(self) -> str:
        return f"{self.child} -> {self.parent.schema}.{self.parent.table}"
