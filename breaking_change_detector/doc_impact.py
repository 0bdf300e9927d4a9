"""Find documentation pages that mention symbols affected by API changes."""

import logging
import re
from collections.abc import Iterable, Mapping

from breaking_change_detector.models import Change, DocumentationArtifact

logger = logging.getLogger(__name__)

# Document types written to describe APIs. Narrative types such as README,
# CHANGELOG, ARCHITECTURE and ADR mention symbols casually and are excluded.
REFERENCE_DOC_TYPES = frozenset(
    {"API_REFERENCE", "GUIDE", "TUTORIAL", "INLINE_COMMENT"}
)

# Only this many leading characters of each document are searched.
MAX_SCANNED_CHARS = 200_000


class InvalidDocumentError(ValueError):
    """A documentation entry is missing its path or content."""


def analyze_documentation_impact(
    changes: Iterable[Change],
    docs: Iterable[DocumentationArtifact | Mapping] | None,
    *,
    reference_types: Iterable[str] | None = None,
    max_scan_chars: int = MAX_SCANNED_CHARS,
) -> list[str]:
    """Return the paths of reference docs that mention a changed symbol.

    A document is affected when its type is reference-like and its content
    contains, as a whole word, the top-level symbol of any change (``greet``
    for a change named ``greet.title``). Matching is case-sensitive.

    Args:
        changes: Changes produced by detect_breaking_changes
        docs: DocumentationArtifact objects or mappings with path, content
            and type keys; None means no documentation
        reference_types: Allowed document types, defaults to
            REFERENCE_DOC_TYPES
        max_scan_chars: Leading characters of each document to search

    Returns:
        Distinct affected doc paths, in corpus order

    Raises:
        InvalidDocumentError: if a document has no path or content
    """
    allowed = {
        _normalize_type(t)
        for t in (REFERENCE_DOC_TYPES if reference_types is None else reference_types)
    }
    symbols = list(dict.fromkeys(change.symbol for change in changes))
    if not symbols or not docs:
        return []

    pattern = _symbol_pattern(symbols)
    affected: list[str] = []

    for entry in docs:
        doc = _coerce_document(entry)
        if _normalize_type(doc.type) not in allowed:
            logger.debug(f"Skipping {doc.path}: type {doc.type} is not reference-like")
            continue
        if doc.path in affected:
            continue

        match = pattern.search(doc.content, 0, max_scan_chars)
        if match:
            affected.append(doc.path)
            logger.debug(f"{doc.path} mentions '{match.group(0)}'")

    logger.info(
        f"Found {len(affected)} affected docs for {len(symbols)} changed symbols"
    )
    return affected


def _symbol_pattern(symbols: list[str]) -> re.Pattern:
    # Longest first so alternation prefers "getUserById" over "getUser".
    alternatives = "|".join(
        re.escape(s) for s in sorted(symbols, key=len, reverse=True)
    )
    return re.compile(rf"(?<![\w$])(?:{alternatives})(?![\w$])")


def _normalize_type(doc_type: str) -> str:
    return str(doc_type).strip().upper().replace("-", "_")


def _coerce_document(entry: DocumentationArtifact | Mapping) -> DocumentationArtifact:
    if isinstance(entry, DocumentationArtifact):
        doc = entry
    elif isinstance(entry, Mapping):
        doc = DocumentationArtifact(
            path=entry.get("path"),
            content=entry.get("content"),
            type=entry.get("type", ""),
        )
    else:
        raise InvalidDocumentError(f"Unsupported documentation entry: {entry!r}")

    if not doc.path or doc.content is None:
        raise InvalidDocumentError(
            f"Documentation entry needs a path and content: {entry!r}"
        )
    return doc
