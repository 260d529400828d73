"""
Speaker mapping for diarized transcription output.
Maps loosely formatted model speaker labels onto the fixed Speaker vocabulary
and turns raw segment payloads into validated TranscriptSegments.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from ...core.utils.string_utils import normalize_label
from ...domain.entities.transcript import TranscriptSegment
from ...domain.enums.clinical import Speaker

logger = logging.getLogger(__name__)

# Keys are normalize_label() output: lowercase, no diacritics
_SPEAKER_ALIASES: Dict[str, Speaker] = {
    "lekar": Speaker.DOCTOR,
    "lekarka": Speaker.DOCTOR,
    "doktor": Speaker.DOCTOR,
    "doktorka": Speaker.DOCTOR,
    "doctor": Speaker.DOCTOR,
    "physician": Speaker.DOCTOR,
    "mudr": Speaker.DOCTOR,
    "pacient": Speaker.PATIENT,
    "pacientka": Speaker.PATIENT,
    "patient": Speaker.PATIENT,
    "sestra": Speaker.NURSE,
    "zdravotni sestra": Speaker.NURSE,
    "nurse": Speaker.NURSE,
}

DEFAULT_SPEAKER = Speaker.PATIENT


def map_speaker_label(label: Any) -> Optional[Speaker]:
    """Resolve a model speaker label ("Lékař", "lekar:", "Doctor") to a Speaker."""
    if isinstance(label, Speaker):
        return label
    if not isinstance(label, str):
        return None
    return _SPEAKER_ALIASES.get(normalize_label(label))


def _as_seconds(value: Any) -> float:
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return 0.0
    if seconds != seconds or seconds < 0:  # NaN or negative
        return 0.0
    return seconds


def parse_segments(raw_segments: Any) -> Tuple[TranscriptSegment, ...]:
    """
    Build TranscriptSegments from decoded model output.

    Segments with empty text are dropped. Times are clamped to be non-negative
    and an end before its start is moved up to the start. An unrecognized
    speaker falls back to DEFAULT_SPEAKER.
    """
    if not isinstance(raw_segments, list):
        return ()

    segments: List[TranscriptSegment] = []
    for item in raw_segments:
        if not isinstance(item, dict):
            continue
        text = item.get("text")
        if not isinstance(text, str) or not text.strip():
            continue

        speaker = map_speaker_label(item.get("speaker"))
        if speaker is None:
            logger.warning(f"Unrecognized speaker label {item.get('speaker')!r}, using {DEFAULT_SPEAKER.value}")
            speaker = DEFAULT_SPEAKER

        start = _as_seconds(item.get("start"))
        end = max(_as_seconds(item.get("end")), start)
        segments.append(TranscriptSegment(speaker=speaker, text=text.strip(), start=start, end=end))

    return tuple(segments)
