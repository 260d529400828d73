"""Transcript value types."""

from dataclasses import dataclass
from typing import Sequence, Tuple

from ..enums.clinical import Speaker


@dataclass(frozen=True)
class TranscriptSegment:
    """One diarized utterance with its time span in seconds."""

    speaker: Speaker
    text: str
    start: float = 0.0
    end: float = 0.0

    def __post_init__(self) -> None:
        if self.start < 0 or self.end < 0:
            raise ValueError("Segment times must be non-negative")
        if self.start > self.end:
            raise ValueError("Segment start must not be after its end")

    def render(self) -> str:
        return f"{self.speaker.value}: {self.text}"


def render_transcript(segments: Sequence[TranscriptSegment]) -> str:
    """Render segments as speaker-prefixed lines separated by blank lines."""
    return "\n\n".join(segment.render() for segment in segments)


@dataclass(frozen=True)
class TranscriptionResult:
    """Output of the transcription stage."""

    text: str
    segments: Tuple[TranscriptSegment, ...] = ()
