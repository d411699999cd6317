"""Tests for structured logging."""

import json
import logging

from evolution_kernel.observability import JSONFormatter, setup_logging


class TestJSONFormatter:
    def test_extras_surfaced(self):
        record = logging.LogRecord(
            "evolution_kernel.evolution.lifecycle", logging.INFO, __file__, 1,
            "Evolution applied", None, None,
        )
        record.evolution_id = "evo_1"
        record.category = "vote_parameters"
        payload = json.loads(JSONFormatter().format(record))
        assert payload["message"] == "Evolution applied"
        assert payload["evolution_id"] == "evo_1"
        assert payload["category"] == "vote_parameters"
        assert "actor" not in payload

    def test_setup_is_idempotent(self):
        logger = logging.getLogger("evolution_kernel")
        setup_logging("DEBUG", "json")
        setup_logging("INFO", "text")
        ours = [h for h in logger.handlers if getattr(h, "_evolution_kernel", False)]
        assert len(ours) == 1
        assert logger.level == logging.INFO
