"""
Consultation endpoints: audio processing, review and editing of one session.
"""

import logging
from typing import Optional

from fastapi import APIRouter, File, Form, Request, UploadFile, status

from ...application.dto.consultation_dto import AudioPayload
from ...application.schema_registry import schema_for
from ...application.use_cases.process_consultation import ConsultationWorkflow
from ...core.utils.string_utils import generate_id
from ...domain.documents import StructuredReport
from ...domain.errors import NoReportError
from ..deps import AIGatewayDep, ConsultationRepositoryDep, SettingsDep, WorkflowDep
from ..schemas.common import ApiResponse, ErrorResponse
from ..schemas.consultation import (
    AssistantRequest,
    AssistantResponse,
    ConsultationOut,
    CreateConsultationRequest,
    RegenerateRequest,
    UpdateEntitiesRequest,
    UpdateReportRequest,
    UpdateTranscriptRequest,
    ValidateRequest,
    ValidationOut,
    to_consultation_out,
    to_validation_out,
)
from ..utils.responses import ok

router = APIRouter(prefix="/consultations", tags=["Consultations"])
logger = logging.getLogger("medvoice")

_ERROR_RESPONSES = {
    404: {"model": ErrorResponse, "description": "Consultation not found"},
    409: {"model": ErrorResponse, "description": "Consultation busy or reset"},
    422: {"model": ErrorResponse, "description": "Invalid input"},
}
_STAGE_RESPONSES = {
    **_ERROR_RESPONSES,
    429: {"model": ErrorResponse, "description": "AI service quota exceeded"},
    502: {"model": ErrorResponse, "description": "AI service failure"},
}


@router.post(
    "",
    response_model=ApiResponse[ConsultationOut],
    status_code=status.HTTP_201_CREATED,
)
async def create_consultation(
    request: Request,
    repo: ConsultationRepositoryDep,
    gateway: AIGatewayDep,
    settings: SettingsDep,
    body: Optional[CreateConsultationRequest] = None,
):
    """Start an empty consultation session."""
    provider = body.provider if body is not None else None
    workflow = ConsultationWorkflow(gateway, settings=settings, provider=provider)
    await repo.save(workflow)
    logger.info(f"Consultation created: {workflow.session_id}")
    return ok(request, data=to_consultation_out(workflow.snapshot()), message="Consultation created")


@router.get(
    "/{consultation_id}",
    response_model=ApiResponse[ConsultationOut],
    responses={404: _ERROR_RESPONSES[404]},
)
async def get_consultation(request: Request, workflow: WorkflowDep):
    """Current snapshot of the session (safe to poll while processing)."""
    return ok(request, data=to_consultation_out(workflow.snapshot()))


@router.post(
    "/{consultation_id}/audio",
    response_model=ApiResponse[ConsultationOut],
    responses=_STAGE_RESPONSES,
)
async def process_audio(
    request: Request,
    workflow: WorkflowDep,
    audio_file: UploadFile = File(..., description="Consultation recording (wav or mp3)"),
    thorough: Optional[bool] = Form(None, description="Use the Deep model tier"),
):
    """
    Run the full pipeline on a recording.

    Transcribes, extracts entities and candidate document types, then
    generates and validates the default document. The session ends in
    ``review``.
    """
    data = await audio_file.read()
    audio = AudioPayload(
        data=data,
        mime_type=audio_file.content_type or "",
        filename=audio_file.filename,
    )
    logger.info(
        f"Processing audio for {workflow.session_id}: filename={audio.filename} "
        f"mime={audio.mime_type} size={audio.size_bytes}"
    )
    result = await workflow.process_audio(audio, thorough=thorough)
    return ok(request, data=to_consultation_out(result), message="Consultation processed")


@router.post(
    "/{consultation_id}/regenerate",
    response_model=ApiResponse[ConsultationOut],
    responses=_STAGE_RESPONSES,
)
async def regenerate_report(request: Request, workflow: WorkflowDep, body: Optional[RegenerateRequest] = None):
    """Generate the document again, optionally as another type or from replaced entities."""
    body = body or RegenerateRequest()
    entities = None if body.entities is None else [e.to_entity() for e in body.entities]
    result = await workflow.regenerate(
        report_type=body.report_type, entities=entities, thorough=body.thorough
    )
    return ok(request, data=to_consultation_out(result), message="Document regenerated")


@router.put(
    "/{consultation_id}/report",
    response_model=ApiResponse[ConsultationOut],
    responses=_ERROR_RESPONSES,
)
async def update_report(request: Request, workflow: WorkflowDep, body: UpdateReportRequest):
    """Store clinician edits of the document fields and re-validate."""
    result = workflow.update_report(body.data)
    return ok(request, data=to_consultation_out(result), message="Document updated")


@router.post(
    "/{consultation_id}/validate",
    response_model=ApiResponse[ValidationOut],
    responses=_ERROR_RESPONSES,
)
async def validate_report(request: Request, workflow: WorkflowDep, body: Optional[ValidateRequest] = None):
    """Validate the stored document, or a draft when ``data`` is supplied."""
    if body is None or body.data is None:
        return ok(request, data=to_validation_out(workflow.validate()))

    current = workflow.snapshot().report
    report_type = body.report_type or (current.report_type if current is not None else None)
    if report_type is None:
        raise NoReportError("validate a draft without a document type")
    document = schema_for(report_type).model.model_validate({**body.data, "doc_type": report_type.value})
    draft = StructuredReport(
        id=current.id if current is not None else generate_id(),
        report_type=report_type,
        data=document,
    )
    return ok(request, data=to_validation_out(workflow.validate(draft)))


@router.patch(
    "/{consultation_id}/entities",
    response_model=ApiResponse[ConsultationOut],
    responses=_ERROR_RESPONSES,
)
async def update_entities(request: Request, workflow: WorkflowDep, body: UpdateEntitiesRequest):
    """Apply clinician entity edits in order; edited entities become MANUAL."""
    result = workflow.update_entities([edit.to_edit() for edit in body.edits])
    return ok(request, data=to_consultation_out(result), message="Entities updated")


@router.post(
    "/{consultation_id}/entities/extract",
    response_model=ApiResponse[ConsultationOut],
    responses=_STAGE_RESPONSES,
)
async def reextract_entities(request: Request, workflow: WorkflowDep):
    """Extract entities from the current transcript, keeping manual ones."""
    result = await workflow.reextract_entities()
    return ok(request, data=to_consultation_out(result), message="Entities extracted")


@router.put(
    "/{consultation_id}/transcript",
    response_model=ApiResponse[ConsultationOut],
    responses=_ERROR_RESPONSES,
)
async def update_transcript(request: Request, workflow: WorkflowDep, body: UpdateTranscriptRequest):
    """Replace the transcript text (segments are not re-timed)."""
    result = workflow.update_transcript(body.transcript)
    return ok(request, data=to_consultation_out(result), message="Transcript updated")


@router.post(
    "/{consultation_id}/transcript/correct",
    response_model=ApiResponse[ConsultationOut],
    responses=_STAGE_RESPONSES,
)
async def correct_transcript(request: Request, workflow: WorkflowDep):
    """Proof-read the transcript with the AI service."""
    result = await workflow.correct_transcript()
    return ok(request, data=to_consultation_out(result), message="Transcript corrected")


@router.post(
    "/{consultation_id}/assistant",
    response_model=ApiResponse[AssistantResponse],
    responses=_STAGE_RESPONSES,
)
async def ask_assistant(request: Request, workflow: WorkflowDep, body: AssistantRequest):
    """Ask the clinical assistant about this consultation."""
    answer = await workflow.ask_assistant(body.question)
    return ok(request, data=AssistantResponse(
        question=body.question,
        answer=answer,
        turns=len(workflow.assistant.history),
    ))


@router.post(
    "/{consultation_id}/reset",
    response_model=ApiResponse[ConsultationOut],
    responses={404: _ERROR_RESPONSES[404]},
)
async def reset_consultation(request: Request, workflow: WorkflowDep, repo: ConsultationRepositoryDep):
    """Cancel in-flight work and start over; the session gets a new id."""
    previous_id = workflow.session_id
    result = workflow.reset()
    await repo.delete(previous_id)
    await repo.save(workflow)
    logger.info(f"Consultation reset: {previous_id} -> {workflow.session_id}")
    return ok(request, data=to_consultation_out(result), message="Consultation reset")


@router.delete(
    "/{consultation_id}",
    response_model=ApiResponse[dict],
    responses={404: _ERROR_RESPONSES[404]},
)
async def delete_consultation(
    request: Request, consultation_id: str, workflow: WorkflowDep, repo: ConsultationRepositoryDep
):
    """Cancel in-flight work and forget the session."""
    workflow.reset()
    await repo.delete(consultation_id)
    return ok(request, data={"session_id": consultation_id, "deleted": True}, message="Consultation deleted")
