"""Main analyzer that orchestrates parsing, diffing and doc impact."""

import logging
from collections.abc import Iterable, Mapping
from datetime import UTC, datetime

from breaking_change_detector.differ import detect_breaking_changes
from breaking_change_detector.doc_impact import analyze_documentation_impact
from breaking_change_detector.models import BreakingChangeReport, DocumentationArtifact
from breaking_change_detector.severity import suggest_version_bump
from breaking_change_detector.surface.models import ApiSurface
from breaking_change_detector.surface.parser import parse_api_surface

logger = logging.getLogger(__name__)


def analyze_breaking_changes(
    old_code: str,
    new_code: str,
    file_path: str,
    docs: Iterable[DocumentationArtifact | Mapping] | None = None,
) -> BreakingChangeReport:
    """Compare two snapshots of a source file.

    Args:
        old_code: Source text before the change
        new_code: Source text after the change
        file_path: Path of the file, used as provenance
        docs: Optional documentation corpus to check for stale references

    Returns:
        BreakingChangeReport with classified changes and affected docs
    """
    logger.info(f"Starting breaking change analysis of {file_path}")
    old_surface = parse_api_surface(old_code, file_path)
    new_surface = parse_api_surface(new_code, file_path)
    return analyze_surfaces(old_surface, new_surface, docs)


def analyze_surfaces(
    old_surface: ApiSurface,
    new_surface: ApiSurface,
    docs: Iterable[DocumentationArtifact | Mapping] | None = None,
) -> BreakingChangeReport:
    """Build a report from two already parsed surfaces."""
    analyzed_at = datetime.now(UTC).isoformat()
    changes = detect_breaking_changes(old_surface, new_surface)

    affected = []
    if docs is not None:
        affected = analyze_documentation_impact(changes, docs)

    report = BreakingChangeReport(
        file_path=new_surface.file_path,
        analyzed_at=analyzed_at,
        breaking_changes=[c for c in changes if c.is_breaking],
        non_breaking_changes=[c for c in changes if not c.is_breaking],
        suggested_version_bump=suggest_version_bump(changes),
        affected_documentation=affected,
    )
    logger.info(
        f"Analysis complete: {len(report.breaking_changes)} breaking, "
        f"{len(report.non_breaking_changes)} non-breaking, "
        f"{len(affected)} affected docs, bump {report.suggested_version_bump}"
    )
    return report
