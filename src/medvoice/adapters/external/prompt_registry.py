"""
Prompt registry for AI scenarios and version tracking.

Every gateway call names its scenario; the version string of the prompt used
for that scenario is attached to logs and spans so output changes can be
traced back to prompt changes. Bump a version whenever its prompt text in
``medvoice.application.prompts`` changes.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional, Union


class PromptScenario(str, Enum):
    """AI scenarios for telemetry and prompt versioning."""

    TRANSCRIBE = "transcribe"
    EXTRACT_ENTITIES = "extract_entities"
    DETECT_DOCUMENTS = "detect_documents"
    GENERATE_DOCUMENT = "generate_document"
    SUMMARIZE = "summarize"
    CORRECT_TRANSCRIPT = "correct_transcript"
    ASSISTANT = "assistant"


PROMPT_VERSIONS: dict[PromptScenario, str] = {
    PromptScenario.TRANSCRIBE: "TRANSCRIBE_V2_2025-03-04",
    PromptScenario.EXTRACT_ENTITIES: "ENTITIES_V2_2025-03-04",
    PromptScenario.DETECT_DOCUMENTS: "DETECT_V2_2026-10-18",
    PromptScenario.GENERATE_DOCUMENT: "GENERATE_V3_2025-03-18",
    PromptScenario.SUMMARIZE: "SUMMARY_V1_2025-02-10",
    PromptScenario.CORRECT_TRANSCRIPT: "CORRECT_V1_2025-02-10",
    PromptScenario.ASSISTANT: "ASSISTANT_V1_2025-02-10",
}


def prompt_version(scenario: Optional[Union[str, PromptScenario]]) -> str:
    """Version of the prompt for ``scenario`` ("UNKNOWN" for ad-hoc calls)."""
    if scenario is None:
        return "UNKNOWN"
    try:
        return PROMPT_VERSIONS.get(PromptScenario(scenario), "UNKNOWN")
    except ValueError:
        return "UNKNOWN"


__all__ = ["PromptScenario", "PROMPT_VERSIONS", "prompt_version"]
