from __future__ import annotations

"""
Pipeline Domain Data Models.

Defines the result structures used to communicate computation outcomes
between the core services, the pipeline engine and the CLI.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional

# -----------------------------------------------------------------------------
# CORE DATA MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class ComputedProperties:
    """
    Output of one hierarchical property computation.

    Attributes:
        properties: Flat, insertion-ordered key to value map.
        user_defined_keys: Keys written by overrides, environment or system
                           properties (already module-prefixed).
    """
    properties: Dict[str, str]
    user_defined_keys: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class AnalysisResult:
    """
    Unified result object of a complete pipeline execution.

    Attributes:
        ok: Flag indicating success or failure.
        error: Descriptive message in case of failure.
        skipped: True when the analysis was skipped (sonar.skip, empty map).
        properties: Final property map handed to the scanner bootstrap.
        user_defined_keys: Keys exempt from path filtering.
        collected_sources: Orphan files added by scan-all.
        fingerprint: Cache fingerprint of the cache-relevant properties.
        resolution_files: Interchange files read or written.
        output_path: Where the properties were persisted, if anywhere.
        summary: Technical execution statistics.
    """
    ok: bool
    error: str = ""
    skipped: bool = False

    properties: Dict[str, str] = field(default_factory=dict)
    user_defined_keys: List[str] = field(default_factory=list)
    collected_sources: List[str] = field(default_factory=list)
    fingerprint: str = ""
    resolution_files: List[str] = field(default_factory=list)
    output_path: Optional[str] = None

    summary: Dict[str, Any] = field(default_factory=dict)

# -----------------------------------------------------------------------------
# FACTORY FUNCTIONS
# -----------------------------------------------------------------------------

def create_error_result(error: str, summary_extra: Optional[Dict[str, Any]] = None) -> AnalysisResult:
    """
    Create a failed pipeline result instance.

    Args:
        error: Detailed error description.
        summary_extra: Additional metadata for the summary payload.

    Returns:
        AnalysisResult: An immutable error result object.
    """
    return AnalysisResult(ok=False, error=error, summary=summary_extra or {})


def create_skipped_result(reason: str, properties: Optional[Dict[str, str]] = None) -> AnalysisResult:
    return AnalysisResult(
        ok=True,
        skipped=True,
        properties=dict(properties or {}),
        summary={"skip_reason": reason},
    )
