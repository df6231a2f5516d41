"""
Tests for settings and logging setup.
"""

from __future__ import annotations

import logging

import json_log_formatter

from community_map import logging_config
from community_map.config import PlanningCenterConfig, Settings, get_settings


class TestSettings:
    def test_singleton(self):
        assert get_settings() is get_settings()

    def test_credentials_need_both_values(self):
        assert PlanningCenterConfig(client_id="a", secret="b").has_credentials
        assert not PlanningCenterConfig(client_id="a", secret="").has_credentials
        assert not PlanningCenterConfig(client_id="", secret="b").has_credentials

    def test_groups_endpoint(self):
        assert PlanningCenterConfig().groups_endpoint == "/groups/v2/groups"


class TestLogging:
    def test_production_uses_json(self, monkeypatch):
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        monkeypatch.setattr(logging_config, "get_settings",
                            lambda: Settings(env="production", log_level="DEBUG"))
        try:
            logging_config.setup_logging()
            assert len(root.handlers) == 1
            assert isinstance(root.handlers[0].formatter, json_log_formatter.JSONFormatter)
            assert root.level == logging.DEBUG
            assert logging.getLogger("httpx").level == logging.WARNING
        finally:
            root.handlers = saved_handlers
            root.setLevel(saved_level)
