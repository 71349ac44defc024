#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Configuration module for the Milvus demo.
Loads settings from YAML files and provides a centralized configuration object.
"""

import copy
import os
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


DEFAULTS: Dict[str, Dict[str, Any]] = {
    'general': {
        'log_level': 'INFO',
    },
    'paths': {
        'log_dir': "logs",
    },
    'milvus': {
        'host': "localhost",
        'port': 19530,
        'user': "",
        'password': "",
        'alias': "default",
        'timeout': 30.0,
        'shard_num': 1,
        'collection_name': "gosdk_index_example",
        'description': "this is the example collection for indexing",
        'dimension': 8,
        'index_type': "IVF_FLAT",
        'metric_type': "L2",
        'nlist': 128,
        'nprobe': 16,
        'scalar_index_type': "STL_SORT",
        'consistency_level': "Strong",
    },
    'schema': {
        'id_field': "ID",
        'title_field': "Title",
        'year_field': "Year",
        'vector_field': "Vector",
        'title_max_length': 512,
    },
    'data': {
        'csv_path': "data/films.csv",
    },
    'search': {
        'top_k': 10,
        'filter_expr': "Year > 1990",
        'output_fields': ["ID", "Title"],
    },
    'logging': {
        'file_output': False,
        'log_file': None,
    },
}


class Config:
    """Configuration class for the Milvus demo settings."""

    def __init__(self, config_path: Optional[str] = None, config_dict: Optional[Dict[str, Any]] = None):
        """
        Initialize configuration with default values or from a YAML file or dictionary.

        Args:
            config_path: Path to the configuration YAML file. If None, uses configs/default_config.yaml when present.
            config_dict: Dictionary containing configuration settings. Takes precedence over config_path.
        """
        self.base_dir = self._find_project_root()
        self._set_defaults()

        if config_dict is not None:
            self.load_from_dict(config_dict)
            return

        if config_path is None:
            default_config = os.path.join(self.base_dir, "configs", "default_config.yaml")
            if os.path.exists(default_config):
                config_path = default_config
                logging.info(f"Using default config file: {default_config}")
            else:
                logging.warning("Default config file not found. Using built-in defaults.")
        elif not os.path.exists(config_path):
            raise FileNotFoundError(f"Config file not found: {config_path}")

        if config_path:
            self._load_from_yaml(config_path)

    def _find_project_root(self) -> str:
        """
        Find and return the project root directory.

        Returns:
            The absolute path to the project root directory.
        """
        # utils -> milvus_demo -> project root
        project_root = Path(__file__).resolve().parent.parent.parent
        if (project_root / "configs").exists():
            return str(project_root)

        return os.getcwd()

    def _load_from_yaml(self, config_path: str) -> None:
        """
        Load configuration from a YAML file.

        Args:
            config_path: Path to the YAML configuration file.
        """
        with open(config_path, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f) or {}

        if not isinstance(config_data, dict):
            raise ValueError(f"Config file {config_path} must contain a mapping at the top level")

        self.load_from_dict(config_data)
        logging.info(f"Configuration loaded from {config_path}")

    def load_from_dict(self, config_data: Dict[str, Any]) -> None:
        """
        Merge configuration sections from a dictionary over the current values.

        Args:
            config_data: Dictionary containing configuration settings.
        """
        for key, value in config_data.items():
            current = self.__dict__.get(key)
            if isinstance(current, dict) and isinstance(value, dict):
                current.update(value)
            else:
                setattr(self, key, value)

    def _set_defaults(self) -> None:
        """Set default configuration values."""
        for section, values in DEFAULTS.items():
            setattr(self, section, copy.deepcopy(values))

    def resolve_path(self, path: str) -> str:
        """Return path unchanged when absolute, else relative to the project root."""
        if os.path.isabs(path):
            return path
        return os.path.join(self.base_dir, path)

    @property
    def csv_path(self) -> str:
        return self.resolve_path(self.data['csv_path'])

    @property
    def dimension(self) -> int:
        return int(self.milvus['dimension'])

    def save(self, path: Optional[str] = None) -> None:
        """
        Save current configuration to a YAML file.

        Args:
            path: Path to save the configuration. If None, uses configs/current_config.yaml.
        """
        if path is None:
            path = os.path.join(self.base_dir, "configs", "current_config.yaml")

        config_data = {}
        for key, value in self.__dict__.items():
            if not key.startswith('_') and key != 'base_dir':
                config_data[key] = value

        os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(config_data, f, default_flow_style=False, allow_unicode=True)
        logging.info(f"Configuration saved to {path}")

    def get_general(self, name: str, default: Any = None) -> Any:
        """
        Get a value from the general section.

        Args:
            name: Setting key.
            default: Returned when the key is missing.
        """
        general = self.__dict__.get('general')
        if isinstance(general, dict):
            return general.get(name, default)
        return default

    def __str__(self) -> str:
        return f"Milvus demo configuration at {self.base_dir}"

    def __repr__(self) -> str:
        sections = []
        for section in DEFAULTS:
            if section in self.__dict__:
                sections.append(f"{section}: {self.__dict__[section]}")

        return "Milvus demo configuration:\n" + "\n".join(sections)
