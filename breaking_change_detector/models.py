"""Data models for detected changes and analysis output."""

import json
from dataclasses import asdict, dataclass, field
from enum import StrEnum


class ChangeType(StrEnum):
    """Kinds of differences between two API surfaces."""

    FUNCTION_REMOVED = "function_removed"
    FUNCTION_ADDED = "function_added"
    PARAMETER_ADDED_REQUIRED = "parameter_added_required"
    PARAMETER_REMOVED = "parameter_removed"
    PARAMETER_TYPE_CHANGED = "parameter_type_changed"
    RETURN_TYPE_CHANGED = "return_type_changed"
    INTERFACE_REMOVED = "interface_removed"
    INTERFACE_PROPERTY_REMOVED = "interface_property_removed"
    INTERFACE_PROPERTY_ADDED = "interface_property_added"
    INTERFACE_PROPERTY_REQUIRED = "interface_property_required"
    INTERFACE_PROPERTY_TYPE_CHANGED = "interface_property_type_changed"
    INTERFACE_EXTENDS_CHANGED = "interface_extends_changed"
    TYPE_REMOVED = "type_removed"
    TYPE_CHANGED = "type_changed"
    EXPORT_REMOVED = "export_removed"


class Severity(StrEnum):
    """How disruptive a change is for existing consumers."""

    CRITICAL = "critical"
    MAJOR = "major"
    MINOR = "minor"

    @property
    def rank(self) -> int:
        """Ordinal value, higher is more severe."""
        return {"minor": 1, "major": 2, "critical": 3}[self.value]

    @property
    def is_breaking(self) -> bool:
        return self is not Severity.MINOR


@dataclass(frozen=True)
class Change:
    """One detected difference between two API surfaces."""

    type: ChangeType
    name: str  # "goodbye", or "<parent>.<member>" such as "User.email"
    description: str
    file_path: str
    line_number: int
    severity: Severity
    previous_value: str | None = None
    current_value: str | None = None
    migration_hint: str | None = None

    @property
    def symbol(self) -> str:
        """The top-level symbol this change belongs to."""
        return self.name.split(".", 1)[0]

    @property
    def is_breaking(self) -> bool:
        return self.severity.is_breaking

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization, excluding None values."""
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass(frozen=True)
class DocumentationArtifact:
    """A documentation page that may reference API symbols."""

    path: str
    content: str
    type: str  # "API_REFERENCE", "GUIDE", "README", ...


@dataclass
class BreakingChangeReport:
    """Complete result of comparing two snapshots of a source file."""

    file_path: str
    analyzed_at: str
    breaking_changes: list[Change]
    non_breaking_changes: list[Change]
    suggested_version_bump: str  # "major", "minor" or "none"
    affected_documentation: list[str] = field(default_factory=list)

    @property
    def has_breaking_changes(self) -> bool:
        return bool(self.breaking_changes)

    @property
    def changes(self) -> list[Change]:
        """All changes, breaking ones first."""
        return self.breaking_changes + self.non_breaking_changes

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "file_path": self.file_path,
            "analyzed_at": self.analyzed_at,
            "has_breaking_changes": self.has_breaking_changes,
            "breaking_changes": [c.to_dict() for c in self.breaking_changes],
            "non_breaking_changes": [c.to_dict() for c in self.non_breaking_changes],
            "suggested_version_bump": self.suggested_version_bump,
            "affected_documentation": self.affected_documentation,
        }

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)
