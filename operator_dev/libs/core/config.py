"""
Configuration Management

Optional YAML file with retry tuning, the override settle delay and
connection defaults. Command-line flags win over anything set here.
"""

import logging
import yaml
from pathlib import Path
from typing import Dict, Any

from .exceptions import ConfigurationError
from .constants import RetryConstants, FileConstants

logger = logging.getLogger(__name__)

NUMBER = (int, float)


class ConfigManager:
    """Reads, checks and templates the operator-dev configuration file"""

    # Allowed sections and keys; every key is optional
    CONFIG_SCHEMA = {
        'retry': {
            'type': dict,
            'fields': {
                'steps': {'type': int, 'min': 1},
                'duration': {'type': NUMBER, 'min': 0},
                'factor': {'type': NUMBER, 'min': 1},
                'jitter': {'type': NUMBER, 'min': 0},
                'cap': {'type': NUMBER, 'min': 0}
            }
        },
        'override': {
            'type': dict,
            'fields': {
                'settle_delay': {'type': NUMBER, 'min': 0}
            }
        },
        'global': {
            'type': dict,
            'fields': {
                'skip_tls': {'type': bool},
                'debug': {'type': bool},
                'kubeconfig': {'type': str},
                'context': {'type': str}
            }
        },
    }

    def __init__(self):
        self.config_data: Dict[str, Any] = {}

    def load_config(self, config_path: str) -> Dict[str, Any]:
        """
        Read and check a configuration file. An empty file is an empty configuration.

        Args:
            config_path: Path to the YAML file

        Returns:
            Dict with the loaded sections

        Raises:
            ConfigurationError: If the file is missing, unreadable, not YAML, or fails the schema
        """
        config_file = Path(config_path)

        if not config_file.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")
        if not config_file.is_file():
            raise ConfigurationError(f"Configuration path is not a file: {config_path}")

        try:
            data = yaml.safe_load(config_file.read_text()) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file {config_path}: {e}")
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file {config_path}: {e}")

        if not isinstance(data, dict):
            raise ConfigurationError("Configuration must be a dictionary")

        self._check_section(data, self.CONFIG_SCHEMA, "config")
        self.config_data = data

        logger.info(f"Loaded configuration from {config_path}")
        return self.config_data

    def _check_section(self, data: Dict[str, Any], fields: Dict[str, Any], path: str) -> None:
        """
        Check one mapping of the file against its schema, recursing into sub-sections.

        Unknown keys only produce a warning; a key set to null counts as unset.
        """
        for key in data:
            if key not in fields:
                logger.warning(f"Ignoring unknown configuration key: {path}.{key}")

        for key, rule in fields.items():
            value = data.get(key)
            if value is None:
                continue

            where = f"{path}.{key}"
            expected = rule['type']
            # bool is an int subclass, never accept it for numeric fields
            if not isinstance(value, expected) or (isinstance(value, bool) and expected is not bool):
                type_name = "number" if isinstance(expected, tuple) else expected.__name__
                raise ConfigurationError(f"{where} must be a {type_name}")

            if 'min' in rule and value < rule['min']:
                raise ConfigurationError(f"{where} must be >= {rule['min']}")

            if 'fields' in rule:
                self._check_section(value, rule['fields'], where)

    def get_section(self, section: str) -> Dict[str, Any]:
        """Return one top-level section, or an empty dict when it is absent"""
        return self.config_data.get(section) or {}

    def get_value(self, key: str, default: Any = None) -> Any:
        """
        Look up a dotted key such as 'override.settle_delay'.

        Returns default when any part of the path is missing or the value is null.
        """
        value = self.config_data
        try:
            for part in key.split('.'):
                value = value[part]
        except (KeyError, TypeError):
            return default

        return default if value is None else value

    def generate_config_template(self, output_dir: str = None) -> str:
        """
        Write the commented template into output_dir (current directory when omitted).

        Returns:
            str: Path of the written file

        Raises:
            ConfigurationError: If the file cannot be written
        """
        target_dir = Path(output_dir) if output_dir else Path.cwd()
        config_file = target_dir / FileConstants.DEFAULT_CONFIG_FILE

        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            config_file.write_text(self.get_config_template_content())
        except OSError as e:
            raise ConfigurationError(f"Cannot write configuration template to {config_file}: {e}")

        logger.info(f"Configuration template written: {config_file}")
        return str(config_file)

    def _render(self, data: Dict[str, Any], depth: int = 0) -> str:
        """Render the template mapping as YAML; keys starting with '#' become comment lines"""
        pad = "  " * depth
        lines = []

        for key, value in data.items():
            if key.startswith("#"):
                lines.append(f"{pad}{key}")
            elif isinstance(value, dict):
                lines.append(f"{pad}{key}:")
                lines.append(self._render(value, depth + 1))
            elif isinstance(value, bool):
                lines.append(f"{pad}{key}: {str(value).lower()}")
            elif isinstance(value, str):
                lines.append(f'{pad}{key}: "{value}"')
            else:
                lines.append(f"{pad}{key}: {value}")

        return "\n".join(lines)

    def get_config_template_content(self) -> str:
        """Template text with every key at its built-in default"""
        template = {
            "# operator-dev configuration file": None,
            "# Command-line flags take precedence over these values": None,
            "retry": {
                "# Conflict retry policy for ClusterVersion and Deployment updates": None,
                "steps": RetryConstants.DEFAULT_STEPS,
                "duration": RetryConstants.DEFAULT_DURATION,
                "factor": RetryConstants.DEFAULT_FACTOR,
                "jitter": RetryConstants.DEFAULT_JITTER,
                "cap": RetryConstants.DEFAULT_CAP
            },
            "override": {
                "# Seconds to wait for the cluster version operator to observe the override": None,
                "settle_delay": RetryConstants.DEFAULT_SETTLE_DELAY
            },
            "global": {
                "skip_tls": False,
                "debug": False,
                "kubeconfig": "",
                "context": ""
            }
        }

        return self._render(template) + "\n"
