"""Map change kinds to severities and derive version bumps."""

import logging
from collections.abc import Iterable

from breaking_change_detector.models import Change, ChangeType, Severity

logger = logging.getLogger(__name__)

SEVERITY_BY_CHANGE_TYPE: dict[ChangeType, Severity] = {
    # Whole symbols disappearing
    ChangeType.FUNCTION_REMOVED: Severity.CRITICAL,
    ChangeType.INTERFACE_REMOVED: Severity.CRITICAL,
    ChangeType.TYPE_REMOVED: Severity.CRITICAL,
    ChangeType.EXPORT_REMOVED: Severity.CRITICAL,
    # Contract narrowed or altered
    ChangeType.PARAMETER_ADDED_REQUIRED: Severity.MAJOR,
    ChangeType.PARAMETER_REMOVED: Severity.MAJOR,
    ChangeType.PARAMETER_TYPE_CHANGED: Severity.MAJOR,
    ChangeType.RETURN_TYPE_CHANGED: Severity.MAJOR,
    ChangeType.INTERFACE_PROPERTY_REMOVED: Severity.MAJOR,
    ChangeType.INTERFACE_PROPERTY_ADDED: Severity.MAJOR,
    ChangeType.INTERFACE_PROPERTY_REQUIRED: Severity.MAJOR,
    ChangeType.INTERFACE_PROPERTY_TYPE_CHANGED: Severity.MAJOR,
    ChangeType.INTERFACE_EXTENDS_CHANGED: Severity.MAJOR,
    # Informational; aliases cannot be checked structurally
    ChangeType.FUNCTION_ADDED: Severity.MINOR,
    ChangeType.TYPE_CHANGED: Severity.MINOR,
}


def classify_severity(change_type: ChangeType | str) -> Severity:
    """Look up the severity of a change kind.

    Raises:
        ValueError: if ``change_type`` is not a known change kind
    """
    return SEVERITY_BY_CHANGE_TYPE[ChangeType(change_type)]


def is_breaking(change: Change) -> bool:
    """A change is breaking when its severity is critical or major."""
    return change.severity.is_breaking


def highest_severity(changes: Iterable[Change]) -> Severity | None:
    """The most severe level among ``changes``, or None when there are none."""
    return max((c.severity for c in changes), key=lambda s: s.rank, default=None)


def suggest_version_bump(changes: Iterable[Change]) -> str:
    """Suggest a semantic version bump for a set of changes.

    Returns:
        "major" if anything is breaking, "minor" if there are only
        non-breaking changes, "none" if there are no changes at all
    """
    severity = highest_severity(changes)
    if severity is None:
        bump = "none"
    elif severity.is_breaking:
        bump = "major"
    else:
        bump = "minor"
    logger.debug(f"Suggested version bump: {bump}")
    return bump
