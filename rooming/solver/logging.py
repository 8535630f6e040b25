"""
Search Logger - per-solve record of search progress.

Tracks phase progress, score improvements, and feasibility warnings.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any

logger = logging.getLogger(__name__)


class SearchLogger:
    """Collects progress and warnings during a single solve call."""

    def __init__(self, debug_mode: bool = False) -> None:
        self.debug_mode = debug_mode
        self.phase_counts: dict[str, int] = defaultdict(int)
        self.improvements: list[dict[str, Any]] = []
        self.feasibility_warnings: list[str] = []
        self.progress: list[str] = []

    def count(self, phase: str, amount: int = 1) -> None:
        """Count an event (restart, discarded placement, ...) for the summary."""
        self.phase_counts[phase] += amount

    def log_improvement(self, phase: str, score: int) -> None:
        """Log a new best score."""
        self.improvements.append({"phase": phase, "score": score})
        if self.debug_mode:
            logger.debug(f"[SEARCH] {phase}: new best score {score}")

    def log_feasibility_warning(self, warning: str) -> None:
        """Log a feasibility problem that the search worked around."""
        self.feasibility_warnings.append(warning)
        logger.warning(f"[FEASIBILITY] {warning}")

    def log_progress(self, message: str) -> None:
        self.progress.append(message)
        if self.debug_mode:
            logger.debug(f"[SEARCH] {message}")

    def get_summary(self) -> dict[str, Any]:
        return {
            "phase_counts": dict(self.phase_counts),
            "improvements": list(self.improvements),
            "feasibility_warnings": list(self.feasibility_warnings),
            "progress": list(self.progress),
        }
