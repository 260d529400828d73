"""Consultation workflow: the orchestrator behind one recorded consultation.

Sequencing:

    validate audio -> transcribe -> (extract entities || classify [|| summarize])
        -> generate default document -> review

Only extraction, classification and the optional summary run concurrently;
everything else waits for its input. A failing stage moves the session to
ERROR, keeps whatever was produced before it and raises StageFailedError.
``reset`` cancels in-flight work; anything that finishes afterwards is
discarded.
"""

import asyncio
import time
from contextlib import contextmanager
from typing import Any, Awaitable, Dict, Iterator, Mapping, Optional, Sequence, Set

from ...core.config import Settings, get_settings
from ...core.exceptions import (
    InvalidAudioFormatError,
    InvalidAudioPayloadError,
    RateLimitExceededError,
    StageFailedError,
)
from ...core.structured_logger import get_logger
from ...domain.documents import ProviderConfig, StructuredReport
from ...domain.entities.consultation import ConsultationSession, ProcessingResult
from ...domain.entities.medical_entity import MedicalEntity
from ...domain.entities.validation import ValidationResult
from ...domain.enums.clinical import BASELINE_REPORT_TYPE, ReportType, SessionStatus
from ...domain.errors import (
    ConsultationResetError,
    InvalidSessionStateError,
    NoReportError,
    NoTranscriptError,
)
from ...observability.tracing import add_span_attribute, set_span_status, trace_operation
from ..dto.consultation_dto import AudioPayload, EntityEdit
from ..ports.services.ai_gateway import AIGateway
from ..schema_registry import schema_for
from ..utils.entity_reconciliation import apply_entity_edits, assess_entities, merge_extracted_entities
from ..validation.report_rules import validate_report
from .classify_documents import ClassifyDocumentsUseCase
from .consultation_assistant import ConsultationAssistant
from .correct_transcript import CorrectTranscriptUseCase
from .extract_entities import ExtractEntitiesUseCase
from .generate_document import GenerateDocumentUseCase
from .summarize_transcript import SummarizeTranscriptUseCase
from .transcribe_consultation import TranscribeConsultationUseCase

QUOTA_MESSAGE = "Byla překročena kvóta AI služby. Zkuste to prosím za chvíli."

STAGE_VALIDATE_AUDIO = "validate_audio"
STAGE_TRANSCRIBE = "transcribe"
STAGE_EXTRACT = "extract_entities"
STAGE_CLASSIFY = "classify_documents"
STAGE_SUMMARIZE = "summarize"
STAGE_GENERATE = "generate_document"
STAGE_CORRECT = "correct_transcript"


class ConsultationWorkflow:
    """Owns one ConsultationSession and every operation on it."""

    def __init__(
        self,
        gateway: AIGateway,
        settings: Optional[Settings] = None,
        provider: Optional[ProviderConfig] = None,
    ):
        self._settings = settings or get_settings()
        if provider is None:
            provider = ProviderConfig(**self._settings.provider.model_dump())
        self._provider = provider

        self._transcribe = TranscribeConsultationUseCase(gateway)
        self._extract = ExtractEntitiesUseCase(gateway)
        self._classify = ClassifyDocumentsUseCase(gateway)
        self._summarize = SummarizeTranscriptUseCase(gateway)
        self._generate = GenerateDocumentUseCase(gateway, provider)
        self._correct = CorrectTranscriptUseCase(gateway)
        self._assistant = ConsultationAssistant(gateway)

        self._session = ConsultationSession()
        self._epoch = 0
        self._busy: Optional[str] = None
        self._tasks: Set[asyncio.Task] = set()
        self._events = get_logger("workflow")

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def session_id(self) -> str:
        return str(self._session.id)

    @property
    def status(self) -> SessionStatus:
        return self._session.status

    @property
    def provider(self) -> ProviderConfig:
        return self._provider

    @property
    def assistant(self) -> ConsultationAssistant:
        return self._assistant

    def snapshot(self) -> ProcessingResult:
        return self._session.snapshot()

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    async def process_audio(
        self, audio: Optional[AudioPayload], thorough: Optional[bool] = None
    ) -> ProcessingResult:
        """Run the full pipeline on recorded audio and leave the session in REVIEW."""
        deep = self._deep(thorough)
        with self._exclusive("process audio") as epoch:
            session = self._session
            self._clear_results()
            session.transition(SessionStatus.PROCESSING_AUDIO)

            try:
                self._check_audio(audio)
            except (InvalidAudioPayloadError, InvalidAudioFormatError) as e:
                self._record_failure(STAGE_VALIDATE_AUDIO, e)
                raise StageFailedError(STAGE_VALIDATE_AUDIO, e) from e

            transcription = await self._run_stage(STAGE_TRANSCRIBE, epoch, self._transcribe.execute(audio))
            session.transcript = transcription.text
            session.segments = transcription.segments
            session.segments_in_sync = True

            session.transition(SessionStatus.ANALYZING)
            branches: Dict[str, Awaitable[Any]] = {
                STAGE_EXTRACT: self._extract.execute(session.transcript),
                STAGE_CLASSIFY: self._classify.execute(session.transcript),
            }
            if self._settings.pipeline.summarize:
                branches[STAGE_SUMMARIZE] = self._summarize.execute(session.transcript, deep)
            results = await self._run_parallel(epoch, branches)
            self._apply_analysis(results)

            session.transition(SessionStatus.GENERATING)
            report_type = session.candidate_types[0] if session.candidate_types else BASELINE_REPORT_TYPE
            report = await self._run_stage(
                STAGE_GENERATE,
                epoch,
                self._generate.execute(self._source_text(), report_type, session.entities, deep),
            )
            self._accept_report(report)
            session.transition(SessionStatus.REVIEW)
            self._events.info("consultation processed", session_id=self.session_id, report_type=report_type.value)
            return session.snapshot()

    async def regenerate(
        self,
        report_type: Optional[ReportType] = None,
        entities: Optional[Sequence[MedicalEntity]] = None,
        thorough: Optional[bool] = None,
    ) -> ProcessingResult:
        """
        Generate the document again from scratch.

        ``entities`` (when given) replace the session's entities, but only if
        generation succeeds. On failure the previous report and entities stay
        untouched and the session moves to ERROR.
        """
        deep = self._deep(thorough)
        with self._exclusive("regenerate") as epoch:
            session = self._session
            if not session.has_transcript:
                raise NoTranscriptError("regenerate the document")

            if report_type is None:
                if session.report is not None:
                    report_type = session.report.report_type
                elif session.candidate_types:
                    report_type = session.candidate_types[0]
                else:
                    report_type = BASELINE_REPORT_TYPE
            report_type = ReportType(report_type)
            new_entities = session.entities if entities is None else tuple(entities)

            session.transition(SessionStatus.GENERATING)
            report = await self._run_stage(
                STAGE_GENERATE,
                epoch,
                self._generate.execute(self._source_text(), report_type, new_entities, deep),
            )
            session.entities = new_entities
            session.entity_issues = assess_entities(new_entities)
            self._accept_report(report)
            session.transition(SessionStatus.REVIEW)
            return session.snapshot()

    # ------------------------------------------------------------------
    # Review operations
    # ------------------------------------------------------------------

    def validate(self, report: Optional[StructuredReport] = None) -> ValidationResult:
        """Validate ``report`` (default: the session's current report)."""
        if report is not None:
            return validate_report(report)
        if self._session.report is None:
            raise NoReportError("validate")
        result = validate_report(self._session.report)
        self._session.validation = result
        return result

    def update_entities(self, edits: Sequence[EntityEdit]) -> ProcessingResult:
        """Apply clinician edits; the next generation sees them verbatim."""
        with self._exclusive("edit entities"):
            entities = apply_entity_edits(self._session.entities, edits)
            self._session.entities = entities
            self._session.entity_issues = assess_entities(entities)
            return self._session.snapshot()

    def update_report(self, data: Mapping[str, Any]) -> ProcessingResult:
        """Replace the document fields with clinician-edited values and re-validate."""
        with self._exclusive("edit the document"):
            current = self._session.report
            if current is None:
                raise NoReportError("edit the document")
            payload = dict(data)
            payload["doc_type"] = current.report_type.value
            if "poskytovatel" not in payload and current.data is not None:
                poskytovatel = current.data.poskytovatel
                payload["poskytovatel"] = poskytovatel.model_dump() if poskytovatel else None
            # Clinician input is validated strictly; a bad field is a client error
            document = schema_for(current.report_type).model.model_validate(payload)
            self._accept_report(current.with_data(document))
            return self._session.snapshot()

    def update_transcript(self, text: str) -> ProcessingResult:
        """
        Replace the transcript text.

        Segments are not re-timed; the snapshot reports ``segments_in_sync=False``
        once the text diverges from them.
        """
        with self._exclusive("edit the transcript"):
            self._set_transcript(text)
            return self._session.snapshot()

    async def correct_transcript(self) -> ProcessingResult:
        """Proof-read the transcript with the AI service and store the result."""
        with self._exclusive("correct the transcript") as epoch:
            if not self._session.has_transcript:
                raise NoTranscriptError("correct the transcript")
            corrected = await self._run_stage(
                STAGE_CORRECT, epoch, self._correct.execute(self._session.transcript)
            )
            self._set_transcript(corrected)
            return self._session.snapshot()

    async def reextract_entities(self) -> ProcessingResult:
        """Extract entities from the current transcript, keeping manual ones."""
        with self._exclusive("extract entities") as epoch:
            if not self._session.has_transcript:
                raise NoTranscriptError("extract entities")
            extracted = await self._run_stage(
                STAGE_EXTRACT, epoch, self._extract.execute(self._session.transcript)
            )
            merged = merge_extracted_entities(self._session.entities, extracted)
            self._session.entities = merged
            self._session.entity_issues = assess_entities(merged)
            return self._session.snapshot()

    async def ask_assistant(self, question: str) -> str:
        """Answer a question about this consultation (Deep tier)."""
        epoch = self._epoch
        session_id = self.session_id
        task = self._track(self._assistant.ask(question, self._session.transcript))
        try:
            answer = await task
        except asyncio.CancelledError:
            self._ensure_current(epoch, session_id)
            raise
        self._ensure_current(epoch, session_id)
        return answer

    def reset(self) -> ProcessingResult:
        """Cancel in-flight work and start an empty session."""
        self._epoch += 1
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()
        self._busy = None
        previous = self.session_id
        self._session = ConsultationSession()
        self._assistant.start_new_conversation()
        self._events.info("consultation reset", previous_session_id=previous, session_id=self.session_id)
        return self._session.snapshot()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _deep(self, thorough: Optional[bool]) -> bool:
        return self._settings.pipeline.thorough_by_default if thorough is None else bool(thorough)

    @contextmanager
    def _exclusive(self, operation: str) -> Iterator[int]:
        if self._busy is not None:
            raise InvalidSessionStateError(operation, f"busy: {self._busy}")
        epoch = self._epoch
        self._busy = operation
        try:
            yield epoch
        finally:
            # A reset in the meantime already released the session
            if epoch == self._epoch:
                self._busy = None

    def _check_audio(self, audio: Optional[AudioPayload]) -> None:
        if audio is None or not audio.data:
            raise InvalidAudioPayloadError("No audio was recorded or uploaded")
        mime_type = (audio.mime_type or "").split(";")[0].strip().lower()
        allowed = [m.lower() for m in self._settings.audio.allowed_mime_types]
        if mime_type not in allowed:
            raise InvalidAudioFormatError(audio.mime_type or "unknown", {"allowed": allowed})
        max_bytes = self._settings.audio.max_size_mb * 1024 * 1024
        if audio.size_bytes > max_bytes:
            raise InvalidAudioPayloadError(
                f"Audio is larger than {self._settings.audio.max_size_mb} MB",
                {"size_bytes": audio.size_bytes, "max_bytes": max_bytes},
            )

    def _clear_results(self) -> None:
        session = self._session
        session.transcript = ""
        session.summary = ""
        session.segments = ()
        session.segments_in_sync = True
        session.entities = ()
        session.candidate_types = ()
        session.report = None
        session.validation = None
        session.entity_issues = ()

    def _source_text(self) -> str:
        """Generation input: the summary when one was produced, else the transcript."""
        session = self._session
        return session.summary if session.summary.strip() else session.transcript

    def _set_transcript(self, text: str) -> None:
        session = self._session
        if text != session.transcript and session.segments:
            session.segments_in_sync = False
        session.transcript = text

    def _accept_report(self, report: StructuredReport) -> None:
        self._session.report = report
        self._session.validation = validate_report(report)

    def _apply_analysis(self, results: Mapping[str, Any]) -> None:
        session = self._session
        if STAGE_EXTRACT in results:
            session.entities = tuple(results[STAGE_EXTRACT])
            session.entity_issues = assess_entities(session.entities)
        if STAGE_CLASSIFY in results:
            session.candidate_types = tuple(results[STAGE_CLASSIFY])
        if STAGE_SUMMARIZE in results:
            session.summary = results[STAGE_SUMMARIZE]

    def _record_failure(self, stage: str, error: BaseException) -> None:
        is_quota = isinstance(error, RateLimitExceededError)
        message = QUOTA_MESSAGE if is_quota else (getattr(error, "message", None) or str(error))
        self._session.fail(stage, message, is_quota)
        self._events.error(
            "stage failed",
            session_id=self.session_id,
            stage=stage,
            error=type(error).__name__,
            is_quota=is_quota,
        )

    def _track(self, coro: Awaitable[Any]) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _ensure_current(self, epoch: int, session_id: str) -> None:
        if epoch != self._epoch:
            raise ConsultationResetError(session_id)

    async def _run_stage(self, stage: str, epoch: int, coro: Awaitable[Any]) -> Any:
        session_id = self.session_id
        task = self._track(coro)
        start_time = time.perf_counter()
        self._events.info("stage started", session_id=session_id, stage=stage)
        with trace_operation("consultation_stage", {"stage": stage, "session_id": session_id}) as span:
            try:
                result = await task
            except asyncio.CancelledError:
                self._ensure_current(epoch, session_id)
                raise
            except Exception as e:
                self._ensure_current(epoch, session_id)
                set_span_status(span, success=False, error_message=str(e))
                self._record_failure(stage, e)
                raise StageFailedError(stage, e) from e
            self._ensure_current(epoch, session_id)
            duration_ms = (time.perf_counter() - start_time) * 1000.0
            add_span_attribute(span, "duration_ms", duration_ms)
            set_span_status(span, success=True)
        self._events.info(
            "stage finished", session_id=session_id, stage=stage, duration_ms=round(duration_ms, 2)
        )
        return result

    async def _run_parallel(self, epoch: int, branches: Mapping[str, Awaitable[Any]]) -> Dict[str, Any]:
        """
        Run independent stages concurrently.

        If one fails the others are cancelled; results of branches that had
        already finished are still applied to the session.
        """
        session_id = self.session_id
        tasks = {name: self._track(coro) for name, coro in branches.items()}
        for name in tasks:
            self._events.info("stage started", session_id=session_id, stage=name)
        try:
            values = await asyncio.gather(*tasks.values())
        except asyncio.CancelledError:
            for task in tasks.values():
                task.cancel()
            self._ensure_current(epoch, session_id)
            raise
        except Exception as e:
            for task in tasks.values():
                if not task.done():
                    task.cancel()
            # Let the cancelled siblings settle so no exception goes unretrieved
            await asyncio.gather(*tasks.values(), return_exceptions=True)
            self._ensure_current(epoch, session_id)

            failed = next(
                (
                    name
                    for name, task in tasks.items()
                    if not task.cancelled() and task.exception() is e
                ),
                "analyze",
            )
            finished = {
                name: task.result()
                for name, task in tasks.items()
                if not task.cancelled() and task.exception() is None
            }
            self._apply_analysis(finished)
            self._record_failure(failed, e)
            raise StageFailedError(failed, e) from e

        self._ensure_current(epoch, session_id)
        for name in tasks:
            self._events.info("stage finished", session_id=session_id, stage=name)
        return dict(zip(tasks.keys(), values))
