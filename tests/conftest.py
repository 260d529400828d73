"""
Shared test fixtures: a scripted AI gateway, a scripted chat client and
ready-made settings/workflow objects. No test talks to a real AI service.
"""

import asyncio
import json
from types import SimpleNamespace
from typing import Any, Dict, List, Optional, Sequence

import pytest

from medvoice.application.dto.consultation_dto import AudioPayload
from medvoice.application.ports.services.ai_gateway import AIGateway, Part
from medvoice.application.use_cases.process_consultation import ConsultationWorkflow
from medvoice.core.config import AISettings, PipelineSettings, ProviderSettings, Settings
from medvoice.domain.enums.clinical import ModelTier

TRANSCRIPT_SEGMENTS = {
    "segments": [
        {"speaker": "Lékař", "text": "Jak se máte?", "start": 0.0, "end": 1.5},
        {"speaker": "Pacient", "text": "Bolí mě hlava.", "start": 1.6, "end": 3.0},
    ]
}
TRANSCRIPT_TEXT = "Lékař: Jak se máte?\n\nPacient: Bolí mě hlava."

AMBULATORY_DOCUMENT = {
    "subjektivni": "Bolest hlavy tři dny, bez nauzey.",
    "objektivni": "Klidný, orientovaný, neurologicky bez ložiskového nálezu.",
    "vitalni_funkce": {"tk": "130/85", "p": "72", "tt": "36.8"},
    "diagnoza": [{"kod": "R51", "nazev": "Bolest hlavy"}],
    "plan": {
        "doporuceni": "Klidový režim, dostatek tekutin.",
        "medikace": [{"nazev": "Paralen", "sila": "500 mg", "davkovani": "1-0-1"}],
        "kontrola": "za týden",
    },
}

DEFAULT_RESPONSES: Dict[str, str] = {
    "transcribe": json.dumps(TRANSCRIPT_SEGMENTS, ensure_ascii=False),
    "extract_entities": json.dumps(
        {
            "entities": [
                {"category": "SYMPTOM", "text": "bolest hlavy"},
                {"category": "MEDICATION", "text": "Paralen 500 mg"},
            ]
        },
        ensure_ascii=False,
    ),
    "detect_documents": json.dumps({"intents": ["AMBULANTNI_ZAZNAM"]}),
    "generate_document": json.dumps(AMBULATORY_DOCUMENT, ensure_ascii=False),
    "summarize": "S: bolest hlavy 3 dny\nO: TK 130/85\nA: cefalea\nP: Paralen",
    "correct_transcript": "",
    "assistant": "Pacient udává bolest hlavy.",
}


class FakeGateway(AIGateway):
    """
    Scripted AIGateway.

    Outcomes are queued per scenario with ``script``; a queued exception is
    raised, a string is returned. Unscripted calls get DEFAULT_RESPONSES.
    ``events`` records ("start"|"finish", scenario) in order; ``hold`` makes
    calls of a scenario wait on an asyncio.Event.
    """

    def __init__(self) -> None:
        self.calls: List[Dict[str, Any]] = []
        self.events: List[tuple] = []
        self._scripts: Dict[str, List[Any]] = {}
        self._gates: Dict[str, asyncio.Event] = {}

    def script(self, scenario: str, *outcomes: Any) -> "FakeGateway":
        self._scripts.setdefault(str(getattr(scenario, "value", scenario)), []).extend(outcomes)
        return self

    def hold(self, scenario: str) -> asyncio.Event:
        gate = asyncio.Event()
        self._gates[str(getattr(scenario, "value", scenario))] = gate
        return gate

    def calls_for(self, scenario: str) -> List[Dict[str, Any]]:
        name = str(getattr(scenario, "value", scenario))
        return [call for call in self.calls if call["scenario"] == name]

    async def generate(
        self,
        system_prompt: str,
        parts: Sequence[Part],
        *,
        json_mode: bool = False,
        model_tier: ModelTier = ModelTier.FAST,
        scenario: Optional[str] = None,
    ) -> str:
        name = str(getattr(scenario, "value", scenario))
        self.calls.append(
            {
                "system_prompt": system_prompt,
                "parts": list(parts),
                "json_mode": json_mode,
                "model_tier": model_tier,
                "scenario": name,
            }
        )
        self.events.append(("start", name))
        # Give sibling tasks a chance to start before this one completes
        await asyncio.sleep(0)
        gate = self._gates.get(name)
        if gate is not None:
            await gate.wait()

        queue = self._scripts.get(name)
        outcome = queue.pop(0) if queue else DEFAULT_RESPONSES.get(name, "")
        self.events.append(("finish", name))
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


class FakeChatClient:
    """
    Stands in for AzureAIClient: each ``chat`` call consumes the next scripted
    outcome (exception raised, string returned as completion content).
    """

    def __init__(self, *outcomes: Any) -> None:
        self._outcomes = list(outcomes)
        self.calls: List[Dict[str, Any]] = []

    async def chat(self, messages, *, model, json_mode=False, **kwargs):
        self.calls.append({"messages": messages, "model": model, "json_mode": json_mode})
        outcome = self._outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=outcome))],
            usage=SimpleNamespace(total_tokens=42),
        )


class RecordingSleep:
    """Injected instead of asyncio.sleep so backoff tests run instantly."""

    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def ai_settings() -> AISettings:
    return AISettings(
        endpoint="https://example-resource.openai.azure.com",
        api_key="test-key",
        max_attempts=3,
        base_delay_seconds=1.0,
        max_delay_seconds=8.0,
    )


@pytest.fixture
def settings(ai_settings) -> Settings:
    return Settings(
        app_env="testing",
        ai=ai_settings,
        pipeline=PipelineSettings(summarize=False, thorough_by_default=False),
        provider=ProviderSettings(
            name="MUDr. Jana Nováková",
            address="Lékařská 12, Praha 2",
            registration_id="12345678",
            secondary_registration_id="87654321",
            specialization_code="001",
            contact="+420 123 456 789",
        ),
    )


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def workflow(gateway, settings) -> ConsultationWorkflow:
    return ConsultationWorkflow(gateway, settings=settings)


@pytest.fixture
def audio() -> AudioPayload:
    return AudioPayload(data=b"RIFF\x00\x00\x00\x00WAVEfmt ", mime_type="audio/wav", filename="visit.wav")
