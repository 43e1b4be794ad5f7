"""
Validation Issues — the result types shared by both validators.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional


class Severity(str, Enum):
    ERROR = "error"      # blocks: invalid graph / connection must not be made
    WARNING = "warning"  # advisory only


class IssueCategory(str, Enum):
    CONNECTION = "connection"
    STRUCTURE = "structure"
    BUSINESS = "business"
    DATA = "data"


@dataclass(frozen=True)
class ValidationIssue:
    """One finding of a validator.

    ``id`` is stable for the same finding on the same graph so the
    host can diff issue panels between edits.
    """
    id: str
    severity: Severity
    message: str
    category: IssueCategory
    node_id: Optional[str] = None
    edge_id: Optional[str] = None

    @property
    def is_error(self) -> bool:
        return self.severity == Severity.ERROR

    def to_dict(self) -> Dict[str, Any]:
        """Serialize for the host's issue panel."""
        out: Dict[str, Any] = {
            "id": self.id,
            "type": self.severity.value,
            "message": self.message,
            "category": self.category.value,
        }
        if self.node_id is not None:
            out["nodeId"] = self.node_id
        if self.edge_id is not None:
            out["edgeId"] = self.edge_id
        return out


def error(
    issue_id: str,
    message: str,
    category: IssueCategory,
    node_id: Optional[str] = None,
    edge_id: Optional[str] = None,
) -> ValidationIssue:
    return ValidationIssue(issue_id, Severity.ERROR, message, category, node_id, edge_id)


def warning(
    issue_id: str,
    message: str,
    category: IssueCategory,
    node_id: Optional[str] = None,
    edge_id: Optional[str] = None,
) -> ValidationIssue:
    return ValidationIssue(issue_id, Severity.WARNING, message, category, node_id, edge_id)


@dataclass
class ValidationResult:
    """Whole-graph verdict. Warnings never affect ``is_valid``."""
    errors: List[ValidationIssue] = field(default_factory=list)
    warnings: List[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @classmethod
    def from_issues(cls, issues: Iterable[ValidationIssue]) -> "ValidationResult":
        result = cls()
        for issue in issues:
            (result.errors if issue.is_error else result.warnings).append(issue)
        return result

    def issues_for_node(self, node_id: str) -> List[ValidationIssue]:
        return [i for i in self.errors + self.warnings if i.node_id == node_id]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "errors": [i.to_dict() for i in self.errors],
            "warnings": [i.to_dict() for i in self.warnings],
        }


class WorkflowValidationError(ValueError):
    """Raised by callers that gate an action (publishing) on validity."""

    def __init__(self, result: ValidationResult) -> None:
        self.result = result
        lines = "\n".join(f"  • {e.message}" for e in result.errors)
        super().__init__(f"Workflow validation failed:\n{lines}")


def is_connection_allowed(issues: Iterable[ValidationIssue]) -> bool:
    """True when a connection attempt produced no blocking issue."""
    return not any(i.is_error for i in issues)
