"""
Configuration Management

Loads mapper configuration from built-in defaults, an optional YAML file
and environment variables (including a local .env file).
"""

import copy
import os
from pathlib import Path
from typing import Dict, Any, Optional, Union
from dotenv import load_dotenv

from .utils.file_utils import load_config as load_yaml_config
from .utils.logging_utils import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_FILE = Path('config') / 'mapper_config.yaml'

DEFAULT_CONFIG: Dict[str, Any] = {
    'columns': {
        'designite': {
            'commit': ['child_commit_id', 'commit_id'],
            'path': ['file_path'],
            'drop': ['left_commit_id', 'child_commit'],
        },
        'churn': {
            'commit': ['child_commit', 'commit_id'],
            'new_path': ['new_path'],
            'old_path': ['old_path'],
            'drop': ['parent_commit', 'index'],
        },
    },
    'input': {
        'encoding': 'utf-8',
    },
    'output': {
        'encoding': 'utf-8',
        'quote_all': True,
        'clash_suffix': '_churn',
        'designite_suffix': '_designite',
    },
    'report': {
        'path': None,
        'min_match_rate': 0.5,
    },
    'logging': {
        'level': 'INFO',
        'colorize': True,
        'file': {
            'enabled': False,
            'path': 'logs/churnmap.log',
        },
    },
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge ``override`` into ``base`` recursively, returning ``base``."""
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


class Config:
    """
    Mapper configuration manager.

    Loads configuration from:
    1. Built-in defaults (DEFAULT_CONFIG)
    2. YAML file (explicit path, $CHURNMAP_CONFIG, or config/mapper_config.yaml)
    3. Environment variables (.env in the working directory is loaded first)

    Example:
        >>> config = Config()
        >>> print(config.get('output.clash_suffix'))
        _churn
    """

    def __init__(self, config_file: Optional[Union[str, Path]] = None):
        """
        Initialize configuration.

        Args:
            config_file: Path to YAML config file (optional). A path given
                here must exist; the default file is only read if present.
        """
        env_path = Path.cwd() / '.env'
        if env_path.exists():
            load_dotenv(env_path)
            logger.info(f"Loaded environment variables from: {env_path}")

        self.config = copy.deepcopy(DEFAULT_CONFIG)

        if config_file is None and os.getenv('CHURNMAP_CONFIG'):
            config_file = os.getenv('CHURNMAP_CONFIG')

        if config_file is not None:
            _deep_merge(self.config, load_yaml_config(config_file))
            logger.info(f"Loaded config from: {config_file}")
        elif DEFAULT_CONFIG_FILE.exists():
            _deep_merge(self.config, load_yaml_config(DEFAULT_CONFIG_FILE))
            logger.info(f"Loaded config from: {DEFAULT_CONFIG_FILE}")
        else:
            logger.debug("No config file found - using built-in defaults")

        self._apply_env_overrides()

    def _apply_env_overrides(self):
        """Apply environment variable overrides to config."""
        if os.getenv('LOG_LEVEL'):
            self.set('logging.level', os.getenv('LOG_LEVEL'))

        if os.getenv('CHURNMAP_CLASH_SUFFIX'):
            self.set('output.clash_suffix', os.getenv('CHURNMAP_CLASH_SUFFIX'))

        if os.getenv('CHURNMAP_REPORT_PATH'):
            self.set('report.path', os.getenv('CHURNMAP_REPORT_PATH'))

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Args:
            key: Config key (e.g., 'columns.churn.new_path')
            default: Default value if key not found

        Returns:
            Configuration value

        Example:
            >>> config.get('columns.churn.new_path')
            ['new_path']
            >>> config.get('nonexistent.key', 'default')
            'default'
        """
        keys = key.split('.')
        value = self.config

        for k in keys:
            if isinstance(value, dict) and k in value:
                value = value[k]
            else:
                return default

        return value

    def set(self, key: str, value: Any):
        """
        Set a configuration value using dot notation.

        Args:
            key: Config key (e.g., 'report.path')
            value: Value to set
        """
        keys = key.split('.')
        config = self.config

        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value

    def get_section(self, section: str) -> Dict[str, Any]:
        """
        Get a top-level configuration section ('columns', 'output', ...).

        Args:
            section: Section name

        Returns:
            Section dictionary (empty if missing)
        """
        return self.config.get(section, {})

    def to_dict(self) -> Dict[str, Any]:
        """
        Get the full configuration as a dictionary.

        Returns:
            Deep copy of the configuration dictionary
        """
        return copy.deepcopy(self.config)
