"""Utility modules."""

from .file_utils import FileUtils
from .logger import setup_logger
from .validators import sanitize_input, validate_email

__all__ = ["FileUtils", "sanitize_input", "validate_email", "setup_logger"]
