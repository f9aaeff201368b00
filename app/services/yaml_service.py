"""YAML file operations service."""

import logging
import os
import tempfile
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict

import yaml

logger = logging.getLogger("wellness")


class YAMLService:
    """Service for YAML file operations."""

    @staticmethod
    def load_yaml(file_path: Path) -> Dict[str, Any]:
        """
        Load YAML file and return as dictionary.

        Args:
            file_path: Path to YAML file

        Returns:
            Parsed YAML content as dictionary

        Raises:
            FileNotFoundError: If file doesn't exist
            yaml.YAMLError: If file is not valid YAML
        """
        if not file_path.exists():
            raise FileNotFoundError(f"YAML file not found: {file_path}")

        with open(file_path, "r", encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f)
                logger.debug(f"Loaded YAML from: {file_path}")
                return data or {}
            except yaml.YAMLError as e:
                logger.error(f"Error parsing YAML file {file_path}: {e}")
                raise

    @staticmethod
    def save_yaml(file_path: Path, data: Dict[str, Any]) -> None:
        """
        Save dictionary to YAML file.

        The file is written to a temporary sibling first and then moved into
        place, so readers never observe a half-written document.

        Args:
            file_path: Path to save YAML file
            data: Data to save

        Raises:
            yaml.YAMLError: If data cannot be serialized to YAML
        """
        # Ensure parent directory exists
        file_path.parent.mkdir(parents=True, exist_ok=True)

        formatted = YAMLService._format_nested_dict(data)

        fd, tmp_name = tempfile.mkstemp(dir=file_path.parent, prefix=f".{file_path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                yaml.safe_dump(
                    formatted,
                    f,
                    default_flow_style=False,
                    allow_unicode=True,
                    sort_keys=False,
                )
            os.replace(tmp_name, file_path)
            logger.debug(f"Saved YAML to: {file_path}")
        except yaml.YAMLError as e:
            logger.error(f"Error saving YAML file {file_path}: {e}")
            raise
        finally:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)

    @staticmethod
    def _format_nested_dict(data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Recursively format nested dictionaries, converting datetime objects.

        Args:
            data: Dictionary to format

        Returns:
            Formatted dictionary
        """
        formatted = {}
        for key, value in data.items():
            formatted[key] = YAMLService._format_value(value)
        return formatted

    @staticmethod
    def _format_value(value: Any) -> Any:
        if isinstance(value, (datetime, date)):
            return value.isoformat()
        if isinstance(value, dict):
            return YAMLService._format_nested_dict(value)
        if isinstance(value, (list, tuple)):
            return [YAMLService._format_value(item) for item in value]
        return value
