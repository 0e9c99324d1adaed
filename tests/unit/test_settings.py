"""
Unit tests for settings management.
"""

import pytest

from beatsync.config.settings import Settings, AnalysisSettings, load_settings
from beatsync.utils.exceptions import ConfigurationError


class TestSettings:

    def test_defaults(self):
        settings = Settings()

        assert settings.analysis.window_size == 2048
        assert settings.analysis.hop_size == 512
        assert settings.analysis.min_spacing == 0.08
        assert settings.analysis.spectral_weight == 0.3
        assert settings.sync.lookahead == 0.1

    def test_from_dict(self):
        settings = Settings.from_dict({'analysis': {'window_size': 1024}, 'sync': {'lookahead': 0.05}})

        assert settings.analysis.window_size == 1024
        assert settings.analysis.hop_size == 512
        assert settings.sync.lookahead == 0.05

    def test_unknown_section(self):
        with pytest.raises(ConfigurationError):
            Settings.from_dict({'video': {}})

    def test_unknown_key(self):
        with pytest.raises(ConfigurationError):
            Settings.from_dict({'analysis': {'fft_size': 4096}})

    def test_yaml_round_trip(self, tmp_path):
        path = tmp_path / "config" / "beatsync.yaml"
        original = Settings(analysis=AnalysisSettings(hop_size=256, min_spacing=0.1))
        original.save_to_file(str(path))

        assert Settings.load_from_file(str(path)) == original

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            Settings.load_from_file(str(tmp_path / "nope.yaml"))

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("analysis: [unclosed")

        with pytest.raises(ConfigurationError):
            Settings.load_from_file(str(path))

    def test_non_mapping_yaml(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")

        with pytest.raises(ConfigurationError):
            Settings.load_from_file(str(path))

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv('BEATSYNC_HOP_SIZE', '256')
        monkeypatch.setenv('BEATSYNC_LOOKAHEAD', '0.2')

        settings = Settings.from_environment()

        assert settings.analysis.hop_size == 256
        assert settings.sync.lookahead == 0.2

    def test_invalid_environment_value(self, monkeypatch):
        monkeypatch.setenv('BEATSYNC_WINDOW_SIZE', 'large')

        with pytest.raises(ConfigurationError):
            Settings.from_environment()

    def test_load_settings_prefers_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv('BEATSYNC_HOP_SIZE', '128')
        path = tmp_path / "beatsync.yaml"
        path.write_text("analysis:\n  hop_size: 1024\n")

        assert load_settings(str(path)).analysis.hop_size == 1024
        assert load_settings(None).analysis.hop_size == 128

    def test_load_settings_missing_file_raises(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_settings(str(tmp_path / "missing.yaml"))
