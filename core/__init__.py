"""
Core utilities shared across SparkStudio.

- validators: form field checks (email, password, prompts, ...)
- formatters: display strings (time ago, counts, hashtags, ...)
- logger: tagged SparkStudio loggers
"""

from . import formatters, validators
from .logger import get_logger

__all__ = ["formatters", "validators", "get_logger"]
