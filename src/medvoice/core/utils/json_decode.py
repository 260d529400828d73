"""
Best-effort decoding of model output that is expected to be JSON.

Models asked for JSON sometimes wrap it in a markdown code fence or return
something that is not JSON at all. Callers pass a fallback that matches the
shape they expect; decoding never raises.
"""

import json
import logging
import re
from typing import Any, Optional

logger = logging.getLogger("medvoice")

_FENCE_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```", re.IGNORECASE)


def extract_fenced_block(text: str) -> Optional[str]:
    """Return the inner content of the first fenced code block, if any."""
    match = _FENCE_RE.search(text)
    return match.group(1) if match else None


def best_effort_json(text: Optional[str], fallback: Any) -> Any:
    """Decode ``text`` as JSON, returning ``fallback`` on any failure.

    A fenced block (```json ... ``` or ``` ... ```) takes precedence over
    the surrounding text; otherwise the whole (stripped) text is parsed.
    """
    if not isinstance(text, str) or not text.strip():
        return fallback

    candidate = extract_fenced_block(text)
    if candidate is None:
        candidate = text.strip()

    try:
        return json.loads(candidate)
    except (ValueError, TypeError, RecursionError) as e:
        logger.warning(f"Model output is not valid JSON, using fallback: {e}")
        return fallback
