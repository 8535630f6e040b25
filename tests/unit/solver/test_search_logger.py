"""Tests for the per-solve SearchLogger."""

from __future__ import annotations

import logging

from rooming.solver.logging import SearchLogger


class TestSearchLogger:
    def test_counts_accumulate(self):
        search_logger = SearchLogger()
        search_logger.count("random_restart")
        search_logger.count("random_restart")
        search_logger.count("annealing_accepted", 10)
        assert search_logger.get_summary()["phase_counts"] == {"random_restart": 2, "annealing_accepted": 10}

    def test_improvements_recorded(self):
        search_logger = SearchLogger()
        search_logger.log_improvement("initial", -3)
        search_logger.log_improvement("perturbation", 4)
        assert search_logger.improvements == [
            {"phase": "initial", "score": -3},
            {"phase": "perturbation", "score": 4},
        ]

    def test_feasibility_warning_is_logged(self, caplog):
        search_logger = SearchLogger()
        with caplog.at_level(logging.WARNING, logger="rooming.solver.logging"):
            search_logger.log_feasibility_warning("start violates must_not")
        assert search_logger.feasibility_warnings == ["start violates must_not"]
        assert "[FEASIBILITY] start violates must_not" in caplog.text

    def test_debug_output_only_in_debug_mode(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="rooming.solver.logging"):
            SearchLogger(debug_mode=False).log_progress("quiet")
            SearchLogger(debug_mode=True).log_progress("loud")
        assert "quiet" not in caplog.text
        assert "[SEARCH] loud" in caplog.text

    def test_summary_is_a_snapshot(self):
        search_logger = SearchLogger()
        summary = search_logger.get_summary()
        search_logger.log_progress("later")
        assert summary["progress"] == []
