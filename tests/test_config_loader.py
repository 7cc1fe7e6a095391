# ABOUTME: Tests for dashboard settings loading.
# ABOUTME: Covers defaults for missing keys, path anchoring and the base URL override.

import json
import pytest
from pathlib import Path

from scripts.core_processing.config_loader import (
    API_BASE_URL_ENV,
    DEFAULT_SETTINGS,
    load_config,
    load_dashboard_settings,
)


class TestLoadConfig:

    @pytest.mark.unit
    def test_missing_file_returns_none(self, temp_output_dir):
        assert load_config(temp_output_dir / 'absent.json') is None

    @pytest.mark.unit
    def test_invalid_json_returns_none(self, temp_output_dir):
        path = temp_output_dir / 'broken.json'
        path.write_text('{not json')
        assert load_config(path) is None


class TestLoadDashboardSettings:

    @pytest.mark.unit
    def test_shipped_config_loads(self, project_root, monkeypatch):
        monkeypatch.delenv(API_BASE_URL_ENV, raising=False)

        settings = load_dashboard_settings('config/dashboard_config.json', project_root)

        assert settings['api_base_url'] == 'http://localhost:3000/api/external'
        assert settings['auto_loop']['min_viewport_width'] == 2500
        assert settings['page_size'] == 100

    @pytest.mark.unit
    def test_missing_keys_get_defaults(self, temp_output_dir, monkeypatch):
        monkeypatch.delenv(API_BASE_URL_ENV, raising=False)
        path = temp_output_dir / 'dashboard_config.json'
        path.write_text(json.dumps({'poll_interval_s': 60, 'auto_loop': {'dwell_ms': 10000}}))

        settings = load_dashboard_settings(path, temp_output_dir)

        assert settings['poll_interval_s'] == 60
        assert settings['auto_loop']['dwell_ms'] == 10000
        assert settings['auto_loop']['inactivity_ms'] == 30000
        assert settings['request_timeout_s'] == DEFAULT_SETTINGS['request_timeout_s']

    @pytest.mark.unit
    def test_unreadable_file_uses_defaults(self, temp_output_dir, monkeypatch):
        monkeypatch.delenv(API_BASE_URL_ENV, raising=False)

        settings = load_dashboard_settings('missing.json', temp_output_dir)

        assert settings['api_base_url'] == DEFAULT_SETTINGS['api_base_url']
        # Defaults are copied, never shared
        settings['auto_loop']['dwell_ms'] = 1
        assert DEFAULT_SETTINGS['auto_loop']['dwell_ms'] == 30000

    @pytest.mark.unit
    def test_relative_paths_anchor_at_project_root(self, temp_output_dir):
        settings = load_dashboard_settings('missing.json', temp_output_dir)

        assert Path(settings['export_dir']) == temp_output_dir / 'exports'
        assert Path(settings['log_file']) == temp_output_dir / 'logs' / 'dashboard.log'

    @pytest.mark.unit
    def test_environment_overrides_base_url(self, temp_output_dir, monkeypatch):
        monkeypatch.setenv(API_BASE_URL_ENV, 'http://hydromon.internal/api/external')

        settings = load_dashboard_settings('missing.json', temp_output_dir)

        assert settings['api_base_url'] == 'http://hydromon.internal/api/external'
