"""
Consultation repository interface for live consultation workflows.
"""

from typing import Optional

from medvoice.application.use_cases.process_consultation import ConsultationWorkflow


class ConsultationRepository:
    """Repository interface for consultation workflows, keyed by session id."""

    async def save(self, workflow: ConsultationWorkflow) -> ConsultationWorkflow:
        """Store a workflow under its current session id."""
        raise NotImplementedError

    async def find_by_id(self, session_id: str) -> Optional[ConsultationWorkflow]:
        """Find a workflow by session id."""
        raise NotImplementedError

    async def delete(self, session_id: str) -> bool:
        """Delete a workflow by session id."""
        raise NotImplementedError
