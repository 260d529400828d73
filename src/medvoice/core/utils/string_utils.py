"""
String utility functions for MedVoice.
"""

import unicodedata
import uuid
from typing import Any


def generate_id(prefix: str = "") -> str:
    """Generate a unique opaque ID with optional prefix."""
    unique_id = uuid.uuid4().hex
    return f"{prefix}{unique_id}" if prefix else unique_id


def is_blank(value: Any) -> bool:
    """True for None, empty containers and whitespace-only strings."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


def normalize_label(text: str) -> str:
    """Lowercase, strip diacritics and surrounding punctuation.

    Used to match loosely formatted model labels ("Lékař:", "LEKAR") against
    a fixed vocabulary.
    """
    decomposed = unicodedata.normalize("NFKD", text or "")
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.strip().strip(":.-_ ").lower()
