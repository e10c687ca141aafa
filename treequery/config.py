"""
Configuration management for the treequery engine.

This module provides configuration loading with sensible defaults for
adapter settings, severities and per-rule options.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import copy
import logging
import os

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAMES = [".treequery.yml", ".treequery.yaml", "treequery.yml", "treequery.yaml"]

_DEFAULTS: Dict[str, Any] = {
    "enabled_rules": ["*"],
    "max_findings_per_file": 50,
    "named_only": True,
    "tree_width": 80,
    "rule_severities": {},
    "rule_configs": {
        "usage.call_sites": {
            "functions": [],
        },
        "overview.strip_implementations": {
            "placeholder": "...",
        },
    },
}


@dataclass
class EngineConfig:
    """Configuration for the treequery engine."""

    # Rule patterns (fnmatch) to run
    enabled_rules: List[str]
    max_findings_per_file: int = 50

    # Adapter settings
    named_only: bool = True

    # Width used by the tree structure dump
    tree_width: int = 80

    # Rule severity overrides (rule_id -> severity)
    rule_severities: Dict[str, str] = None

    # Rule-specific configuration
    rule_configs: Dict[str, Dict[str, Any]] = None

    def __post_init__(self):
        if self.rule_severities is None:
            self.rule_severities = {}
        if self.rule_configs is None:
            self.rule_configs = {}

    def rule_config(self, rule_id: str) -> Dict[str, Any]:
        """Options for one rule (empty when not configured)."""
        return dict(self.rule_configs.get(rule_id, {}))


def load_config(config_path: Optional[str] = None) -> EngineConfig:
    """
    Load configuration from file or use defaults.

    Args:
        config_path: Path to config file (YAML). If None, uses defaults.

    Returns:
        EngineConfig instance

    Raises:
        ConfigError: if the file exists but is not valid YAML or has unknown keys.
    """
    merged_config = copy.deepcopy(_DEFAULTS)

    if config_path and os.path.exists(config_path):
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                file_config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to load config from {config_path}: {e}") from e

        if not isinstance(file_config, dict):
            raise ConfigError(f"Config file {config_path} must contain a mapping")

        unknown = sorted(set(file_config) - set(_DEFAULTS))
        if unknown:
            raise ConfigError(f"Unknown config keys in {config_path}: {', '.join(unknown)}")

        # Deep merge the nested sections, replace everything else
        for key, value in file_config.items():
            if key == "rule_severities":
                merged_config["rule_severities"].update(value or {})
            elif key == "rule_configs":
                for rule_id, rule_config in (value or {}).items():
                    merged_config["rule_configs"].setdefault(rule_id, {}).update(rule_config or {})
            else:
                merged_config[key] = value

        logger.debug("Loaded config from %s", config_path)
    elif config_path:
        logger.warning("Config file %s not found, using defaults", config_path)

    return EngineConfig(**merged_config)


def get_default_config() -> EngineConfig:
    """Get default configuration without loading from file."""
    return load_config(None)


def save_config(config: EngineConfig, config_path: str) -> None:
    """
    Save configuration to file.

    Args:
        config: EngineConfig to save
        config_path: Path where to save the config
    """
    config_dict = {
        "enabled_rules": config.enabled_rules,
        "max_findings_per_file": config.max_findings_per_file,
        "named_only": config.named_only,
        "tree_width": config.tree_width,
        "rule_severities": config.rule_severities,
        "rule_configs": config.rule_configs,
    }

    directory = os.path.dirname(config_path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    with open(config_path, 'w', encoding='utf-8') as f:
        yaml.dump(config_dict, f, default_flow_style=False, indent=2)


def find_config_file(start_path: str = ".") -> Optional[str]:
    """
    Find configuration file by walking up the directory tree.

    Looks for .treequery.yml, .treequery.yaml, treequery.yml and treequery.yaml,
    in that order, in each directory from ``start_path`` up to the filesystem root.
    """
    current_path = os.path.abspath(start_path)
    if os.path.isfile(current_path):
        current_path = os.path.dirname(current_path)

    while True:
        for config_name in CONFIG_FILE_NAMES:
            config_path = os.path.join(current_path, config_name)
            if os.path.exists(config_path):
                return config_path

        parent_path = os.path.dirname(current_path)
        if parent_path == current_path:
            # Reached the root directory
            break
        current_path = parent_path

    return None


def get_rule_severity(rule_id: str, config: EngineConfig, default_severity: str = "info") -> str:
    """Get the configured severity for a rule, falling back to default."""
    if config.rule_severities and rule_id in config.rule_severities:
        return config.rule_severities[rule_id]
    return default_severity
