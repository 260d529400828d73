"""Question answering over the current consultation transcript."""

import logging
from dataclasses import dataclass
from typing import List, Tuple

from ...adapters.external.prompt_registry import PromptScenario
from ...domain.enums.clinical import ModelTier
from ..ports.services.ai_gateway import AIGateway, TextPart
from ..prompts import assistant_system

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssistantTurn:
    question: str
    answer: str


class ConsultationAssistant:
    """
    One conversation with the clinical assistant.

    Each session owns its own instance; ``start_new_conversation`` drops the
    history (called when the session is reset).
    """

    def __init__(self, gateway: AIGateway, max_history: int = 10):
        self._gateway = gateway
        self._max_history = max_history
        self._history: List[AssistantTurn] = []
        self._conversation = 0

    @property
    def history(self) -> Tuple[AssistantTurn, ...]:
        return tuple(self._history)

    def start_new_conversation(self) -> None:
        self._history = []
        self._conversation += 1

    async def ask(self, question: str, transcript: str) -> str:
        if not question or not question.strip():
            raise ValueError("Question must not be empty")

        parts = []
        for turn in self._history[-self._max_history:]:
            parts.append(TextPart(f"Dotaz lékaře: {turn.question}"))
            parts.append(TextPart(f"Odpověď asistenta: {turn.answer}"))
        parts.append(TextPart(f"Dotaz lékaře: {question.strip()}"))
        conversation = self._conversation

        answer = await self._gateway.generate(
            assistant_system(transcript),
            parts,
            model_tier=ModelTier.DEEP,
            scenario=PromptScenario.ASSISTANT,
        )
        answer = (answer or "").strip()
        if conversation != self._conversation:
            logger.info("Assistant answer dropped: conversation was restarted")
            return answer
        self._history.append(AssistantTurn(question=question.strip(), answer=answer))
        logger.info(f"Assistant answered: turns={len(self._history)}")
        return answer
