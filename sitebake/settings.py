#!/usr/bin/env python3
"""
Settings loader for Sitebake static site generator.
Supports configuration from sitebake.yml, sitebake.yaml, or sitebake.json files.
"""

import os
import json
import yaml
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Dict, Any, Mapping, Optional, Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DEFAULT_TIMEZONE = 'America/Chicago'
TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S %Z'


def default_timestamp(timezone_name: str = DEFAULT_TIMEZONE, now: Optional[datetime] = None) -> str:
    """
    Format the current time in the given timezone as a build timestamp.

    Unknown timezone names fall back to UTC.
    """
    try:
        tz = ZoneInfo(timezone_name)
    except (TypeError, ValueError, ZoneInfoNotFoundError):
        tz = timezone.utc
    now = now or datetime.now(timezone.utc)
    return now.astimezone(tz).strftime(TIMESTAMP_FORMAT)


@dataclass(frozen=True)
class BuildConfig:
    """Read-only configuration shared by every page render in a run."""

    src_dir: str = './src'
    out_dir: str = './site'
    pages_glob: str = 'pages/**/*.template.html'
    build_timestamp: str = ''
    shared_patterns: Tuple[str, ...] = ('_includes/*.html', '_layouts/*.html')
    default_layout: str = 'public'
    layout_block: str = 'layout_name'
    page_suffix: str = '.template.html'
    output_suffix: str = '.html'
    data: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'shared_patterns', tuple(self.shared_patterns))
        object.__setattr__(self, 'data', MappingProxyType(dict(self.data)))

    @property
    def pages_root(self) -> str:
        return os.path.join(self.src_dir, 'pages')

    @property
    def pages_pattern(self) -> str:
        return os.path.join(self.src_dir, self.pages_glob)

    @property
    def shared_globs(self) -> Tuple[str, ...]:
        return tuple(os.path.join(self.src_dir, pattern) for pattern in self.shared_patterns)


class SitebakeSettings:
    """Load and manage Sitebake configuration settings."""

    # Default configuration
    DEFAULT_SETTINGS = {
        'src': './src',
        'out': './site',
        'glob': 'pages/**/*.template.html',
        'timestamp': None,
        'timezone': DEFAULT_TIMEZONE,
        'layout': 'public',
        'shared': ['_includes/*.html', '_layouts/*.html'],
        'data': {},
        'log_file': None,
        'verbose': False
    }

    # Config file names to look for (in order of preference)
    CONFIG_FILES = ['sitebake.yml', 'sitebake.yaml', 'sitebake.json']

    def __init__(self, config_dir: str = None):
        """
        Initialize settings loader.

        Args:
            config_dir: Directory to look for config files. Defaults to current directory.
        """
        self.config_dir = config_dir or os.getcwd()
        self.settings = self._defaults()
        self.config_file_path = None
        self.warnings = []

    def _defaults(self) -> Dict[str, Any]:
        settings = dict(self.DEFAULT_SETTINGS)
        settings['shared'] = list(settings['shared'])
        settings['data'] = {}
        return settings

    def load_settings(self) -> Dict[str, Any]:
        """
        Load settings from configuration file if it exists.

        A file that cannot be loaded is recorded in ``warnings`` and the
        defaults are kept.

        Returns:
            Dictionary of configuration settings
        """
        config_file = self._find_config_file()

        if config_file:
            self.config_file_path = config_file
            try:
                loaded_settings = self._load_config_file(config_file)
                if loaded_settings:
                    if not isinstance(loaded_settings, dict):
                        raise ValueError(f"Configuration file {config_file} must contain a mapping")
                    # Merge with defaults, giving preference to loaded settings
                    self.settings.update(loaded_settings)
            except (ValueError, IOError) as e:
                self.warnings.append(f"Failed to load config file {config_file}: {e}")

        return self.settings.copy()

    def _find_config_file(self) -> Optional[str]:
        """
        Find the first available configuration file.

        Returns:
            Path to config file or None if not found
        """
        for filename in self.CONFIG_FILES:
            config_path = os.path.join(self.config_dir, filename)
            if os.path.exists(config_path):
                return config_path
        return None

    def _load_config_file(self, config_path: str) -> Dict[str, Any]:
        """
        Load configuration from a file.

        Args:
            config_path: Path to the configuration file

        Returns:
            Dictionary of configuration settings
        """
        try:
            file_ext = os.path.splitext(config_path)[1].lower()

            with open(config_path, 'r', encoding='utf-8') as f:
                if file_ext in ['.yml', '.yaml']:
                    return yaml.safe_load(f) or {}
                elif file_ext == '.json':
                    return json.load(f) or {}
                else:
                    raise ValueError(f"Unsupported config file format: {file_ext}")
        except FileNotFoundError:
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        except PermissionError:
            raise PermissionError(f"Permission denied reading configuration file: {config_path}")
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file {config_path}: {e}")
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in configuration file {config_path}: {e}")
        except (IOError, OSError) as e:
            raise IOError(f"Error reading configuration file {config_path}: {e}")

    def create_sample_config(self, file_format: str = 'yml') -> str:
        """
        Create a sample configuration file.

        Args:
            file_format: Format for config file ('yml', 'yaml', or 'json')

        Returns:
            Path to created sample config file
        """
        filename = f'sitebake.{file_format}'
        config_path = os.path.join(self.config_dir, filename)

        try:
            with open(config_path, 'w', encoding='utf-8') as f:
                if file_format in ['yml', 'yaml']:
                    f.write("# Sitebake Configuration File\n")
                    f.write("# Configure your static site generator settings here\n\n")
                    f.write("# Build settings\n")
                    f.write("src: ./src\n")
                    f.write("out: ./site\n")
                    f.write("glob: pages/**/*.template.html\n\n")
                    f.write("# Shared includes and layouts, relative to src\n")
                    f.write("shared:\n")
                    f.write("  - _includes/*.html\n")
                    f.write("  - _layouts/*.html\n\n")
                    f.write("# Layout used when a page does not define layout_name\n")
                    f.write("layout: public\n\n")
                    f.write("# Build timestamp\n")
                    f.write("timezone: America/Chicago\n\n")
                    f.write("# Extra values available to every template\n")
                    f.write("data:\n")
                    f.write("  site_title: My Static Site\n")
                elif file_format == 'json':
                    sample_config = {
                        'src': './src',
                        'out': './site',
                        'glob': 'pages/**/*.template.html',
                        'shared': ['_includes/*.html', '_layouts/*.html'],
                        'layout': 'public',
                        'timezone': DEFAULT_TIMEZONE,
                        'data': {'site_title': 'My Static Site'}
                    }
                    json.dump(sample_config, f, indent=2)
                else:
                    raise ValueError(f"Unsupported config file format: {file_format}")
        except PermissionError:
            raise PermissionError(f"Permission denied creating configuration file: {config_path}")
        except (IOError, OSError) as e:
            raise IOError(f"Error writing configuration file {config_path}: {e}")

        return config_path

    def merge_with_args(self, args_dict: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge configuration settings with command-line arguments.
        Command-line arguments take precedence over config file settings.

        Args:
            args_dict: Dictionary of command-line arguments

        Returns:
            Merged configuration dictionary
        """
        merged = self.settings.copy()

        # Override with non-None command line arguments
        for key, value in args_dict.items():
            if value is not None:
                merged[key] = value

        return merged


def to_build_config(settings: Dict[str, Any], now: Optional[datetime] = None) -> BuildConfig:
    """
    Freeze a merged settings dictionary into a BuildConfig.

    The build timestamp is computed here when none was supplied, so every
    page in the run sees the same value.
    """
    timestamp = settings.get('timestamp')
    if not timestamp:
        timestamp = default_timestamp(settings.get('timezone') or DEFAULT_TIMEZONE, now=now)

    data = settings.get('data') or {}
    if not isinstance(data, dict):
        raise ValueError(f"'data' setting must be a mapping, got {type(data).__name__}")

    shared = settings.get('shared')
    if shared is None:
        shared = SitebakeSettings.DEFAULT_SETTINGS['shared']
    elif isinstance(shared, str):
        shared = [shared]

    # A key left blank in the config file loads as None
    defaults = SitebakeSettings.DEFAULT_SETTINGS
    src, out, pages_glob = (settings.get(key) or defaults[key] for key in ('src', 'out', 'glob'))

    return BuildConfig(
        src_dir=os.path.expanduser(src),
        out_dir=os.path.expanduser(out),
        pages_glob=pages_glob,
        build_timestamp=timestamp,
        shared_patterns=tuple(shared),
        default_layout=settings.get('layout') or 'public',
        data=data
    )
