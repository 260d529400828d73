"""
In-process consultation repository.

Sessions are not persisted; restarting the service drops them.
"""

import logging
from typing import Dict, Optional

from medvoice.application.ports.repositories.consultation_repo import ConsultationRepository
from medvoice.application.use_cases.process_consultation import ConsultationWorkflow

logger = logging.getLogger(__name__)


class InMemoryConsultationRepository(ConsultationRepository):
    """Dict-backed repository for the workflows of one process."""

    def __init__(self) -> None:
        self._workflows: Dict[str, ConsultationWorkflow] = {}

    async def save(self, workflow: ConsultationWorkflow) -> ConsultationWorkflow:
        self._workflows[workflow.session_id] = workflow
        logger.debug(f"Saved consultation {workflow.session_id} (total={len(self._workflows)})")
        return workflow

    async def find_by_id(self, session_id: str) -> Optional[ConsultationWorkflow]:
        return self._workflows.get(session_id)

    async def delete(self, session_id: str) -> bool:
        return self._workflows.pop(session_id, None) is not None
