"""
Configuration management for BeatSync.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass, field, asdict, fields

from .constants import *
from ..utils.exceptions import ConfigurationError


@dataclass
class AnalysisSettings:
    """Energy extraction and beat classification settings."""
    window_size: int = WINDOW_SIZE
    hop_size: int = HOP_SIZE
    spectral_weight: float = SPECTRAL_WEIGHT
    min_spacing: float = MIN_BEAT_SPACING
    strong_factor: float = STRONG_THRESHOLD_FACTOR
    regular_factor: float = REGULAR_THRESHOLD_FACTOR
    chunk_windows: int = CHUNK_WINDOWS


@dataclass
class SyncSettings:
    """Playback synchronization settings."""
    lookahead: float = SYNC_LOOKAHEAD


@dataclass
class DecoderSettings:
    """Audio decoding settings."""
    dtype: str = DECODE_DTYPE
    librosa_fallback: bool = True


@dataclass
class LoggingSettings:
    """Logging settings."""
    level: str = LOG_LEVEL
    format: str = LOG_FORMAT


@dataclass
class Settings:
    """Main settings container."""
    analysis: AnalysisSettings = field(default_factory=AnalysisSettings)
    sync: SyncSettings = field(default_factory=SyncSettings)
    decoder: DecoderSettings = field(default_factory=DecoderSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    _SECTIONS = {
        'analysis': AnalysisSettings,
        'sync': SyncSettings,
        'decoder': DecoderSettings,
        'logging': LoggingSettings,
    }

    @classmethod
    def load_from_file(cls, config_path: str) -> 'Settings':
        """
        Load settings from a YAML configuration file.

        Args:
            config_path: Path to the configuration file

        Returns:
            Settings instance

        Raises:
            ConfigurationError: If file cannot be loaded or parsed
        """
        try:
            with open(config_path, 'r') as f:
                config_data = yaml.safe_load(f)
        except FileNotFoundError:
            raise ConfigurationError(f"Configuration file not found: {config_path}")
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file: {e}")

        if config_data is not None and not isinstance(config_data, dict):
            raise ConfigurationError(
                f"Configuration root must be a mapping, got {type(config_data).__name__}"
            )

        return cls.from_dict(config_data or {})

    @classmethod
    def from_dict(cls, config_data: Dict[str, Any]) -> 'Settings':
        """
        Create settings from a dictionary.

        Unknown sections or keys raise ConfigurationError rather than being
        silently ignored.

        Args:
            config_data: Configuration data dictionary

        Returns:
            Settings instance
        """
        settings = cls()

        for section, values in config_data.items():
            section_cls = cls._SECTIONS.get(section)
            if section_cls is None:
                raise ConfigurationError(f"Unknown configuration section: {section}")
            try:
                setattr(settings, section, section_cls(**(values or {})))
            except TypeError as e:
                raise ConfigurationError(f"Invalid '{section}' settings: {e}")

        return settings

    @classmethod
    def from_environment(cls) -> 'Settings':
        """
        Create settings from environment variables.

        Returns:
            Settings instance with environment overrides
        """
        settings = cls()

        overrides = {
            'BEATSYNC_WINDOW_SIZE': (settings.analysis, 'window_size', int),
            'BEATSYNC_HOP_SIZE': (settings.analysis, 'hop_size', int),
            'BEATSYNC_MIN_SPACING': (settings.analysis, 'min_spacing', float),
            'BEATSYNC_LOOKAHEAD': (settings.sync, 'lookahead', float),
            'BEATSYNC_LOG_LEVEL': (settings.logging, 'level', str),
        }

        for env_name, (section, attr, convert) in overrides.items():
            if env_name not in os.environ:
                continue
            try:
                setattr(section, attr, convert(os.environ[env_name]))
            except ValueError:
                raise ConfigurationError(
                    f"Invalid value for {env_name}: {os.environ[env_name]!r}"
                )

        return settings

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert settings to dictionary.

        Returns:
            Settings as dictionary
        """
        return {f.name: asdict(getattr(self, f.name)) for f in fields(self)}

    def save_to_file(self, config_path: str):
        """
        Save settings to a YAML configuration file.

        Args:
            config_path: Path to save the configuration file

        Raises:
            ConfigurationError: If file cannot be saved
        """
        try:
            config_dir = Path(config_path).parent
            config_dir.mkdir(parents=True, exist_ok=True)

            with open(config_path, 'w') as f:
                yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=True)

        except OSError as e:
            raise ConfigurationError(f"Error saving configuration: {e}")


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the global settings instance.

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings.from_environment()
    return _settings


def load_settings(config_path: Optional[str] = None) -> Settings:
    """
    Load settings from file or environment.

    Args:
        config_path: Optional path to configuration file

    Returns:
        Settings instance

    Raises:
        ConfigurationError: If an explicit config_path cannot be loaded
    """
    global _settings

    if config_path:
        _settings = Settings.load_from_file(config_path)
    else:
        _settings = Settings.from_environment()

    return _settings
