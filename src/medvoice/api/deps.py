"""FastAPI dependency providers."""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from ..adapters.db.memory.consultation_repository import InMemoryConsultationRepository
from ..application.ports.repositories.consultation_repo import ConsultationRepository
from ..application.ports.services.ai_gateway import AIGateway
from ..application.use_cases.process_consultation import ConsultationWorkflow
from ..core.ai_factory import get_ai_gateway as build_ai_gateway
from ..core.config import Settings, get_settings
from ..domain.errors import ConsultationNotFoundError


@lru_cache()
def get_consultation_repository() -> ConsultationRepository:
    """Get the process-wide consultation repository."""
    return InMemoryConsultationRepository()


@lru_cache()
def get_ai_gateway() -> AIGateway:
    """Get the AI gateway shared by all consultations."""
    return build_ai_gateway(get_settings())


def get_app_settings() -> Settings:
    return get_settings()


# Dependency annotations for FastAPI
ConsultationRepositoryDep = Annotated[ConsultationRepository, Depends(get_consultation_repository)]
AIGatewayDep = Annotated[AIGateway, Depends(get_ai_gateway)]
SettingsDep = Annotated[Settings, Depends(get_app_settings)]


async def get_workflow(consultation_id: str, repo: ConsultationRepositoryDep) -> ConsultationWorkflow:
    """Resolve the workflow addressed by the ``consultation_id`` path parameter."""
    workflow = await repo.find_by_id(consultation_id)
    if workflow is None:
        raise ConsultationNotFoundError(consultation_id)
    return workflow


WorkflowDep = Annotated[ConsultationWorkflow, Depends(get_workflow)]
