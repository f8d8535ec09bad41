"""Test-result adapters."""

from codepaint.adapters.unit.jest import (
    FAILURE_LOCATION_MATCHERS,
    collect_failure_messages,
    extract_failure_locations,
    load_results_document,
)

__all__ = [
    "FAILURE_LOCATION_MATCHERS",
    "collect_failure_messages",
    "extract_failure_locations",
    "load_results_document",
]
