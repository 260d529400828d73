"""
Utility functions for MedVoice.

This module provides common utility functions used throughout
the application.
"""

from .json_decode import best_effort_json, extract_fenced_block
from .string_utils import generate_id, is_blank, normalize_label

__all__ = [
    # JSON utilities
    "best_effort_json",
    "extract_fenced_block",
    # String utilities
    "generate_id",
    "is_blank",
    "normalize_label",
]
