"""Utility modules for the proxy auth core."""

from .file_utils import atomic_write, read_text, remove_file
from .logger import ContextAwareLogger, configure_logging, get_logger
from .password_utils import random_password

__all__ = [
    "ContextAwareLogger",
    "atomic_write",
    "configure_logging",
    "get_logger",
    "random_password",
    "read_text",
    "remove_file",
]
