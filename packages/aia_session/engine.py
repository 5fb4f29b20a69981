from typing import Any, Callable, Dict, List, Mapping, Optional, TYPE_CHECKING

from packages.aia_core.config import AIAConfig
from packages.aia_core.dto import ResumeUploadDTO
from packages.aia_core.errors import CollaboratorError, InputValidationError
from packages.aia_core.logging import get_logger
from .catalog import DEFAULT_CATALOG, QuestionCatalog, QuestionSlot
from .concurrency import CommandBusyError, CommandGuard
from .dto import CandidateSession, FinalizedCandidate, Turn
from .resume import ResumeOffer, ResumeProtocol
from .scoring import ScoringPipeline
from .sequencer import QuestionSequencer
from .state import (
    ABANDONED_SUMMARY,
    TIMEOUT_ANSWER,
    CandidateStatus,
    SessionEvent,
    TurnRole,
)
from .store import SessionStateStore
from .timer import CountdownTimer

if TYPE_CHECKING:
    from packages.aia_providers.question import QuestionGenerator
    from packages.aia_providers.report.base import IReportGenerator
    from packages.aia_providers.resume.base import IResumeParser
    from packages.aia_providers.scoring.base import IAnswerScorer

logger = get_logger("aia.session.engine")

ALLOWED_RESUME_EXTENSIONS = ("pdf", "docx")
CONTACT_FIELDS = ("name", "email", "phone")

SessionListener = Callable[[SessionEvent, Dict[str, Any]], None]

class SessionController:
    """
    Core state machine of the interview.
    Owns the current session and the finalized list (through the store),
    the countdown timer and the question sequencer.

    Every command returns True when the transition was applied and False when
    it was ignored (wrong state, stale question, another command in flight).
    Input problems raise InputValidationError; collaborator failures raise
    CollaboratorError and leave the stored session as it was.
    """
    def __init__(
        self,
        store: SessionStateStore,
        resume_parser: "IResumeParser",
        question_generator: "QuestionGenerator",
        scorer: "IAnswerScorer",
        reporter: "IReportGenerator",
        catalog: QuestionCatalog = DEFAULT_CATALOG,
        config: Optional[AIAConfig] = None,
        tick_interval: Optional[float] = None
    ):
        self.config = config or AIAConfig()
        self.store = store
        self.catalog = catalog
        self.resume_parser = resume_parser
        self.pipeline = ScoringPipeline(scorer, reporter)
        self.sequencer = QuestionSequencer(catalog, question_generator, self.pipeline, self.complete_interview)
        self.resume_protocol = ResumeProtocol()
        self.guard = CommandGuard()
        interval = tick_interval if tick_interval is not None else self.config.TIMER_TICK_SECONDS
        self.timer = CountdownTimer(self._on_tick, self._on_timeout, interval=interval)
        self.resume_offer: Optional[ResumeOffer] = None
        self._listeners: List[SessionListener] = []

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------
    @property
    def session(self) -> CandidateSession:
        return self.store.current

    @property
    def finalized(self) -> List[FinalizedCandidate]:
        return self.store.finalized

    @property
    def current_slot(self) -> Optional[QuestionSlot]:
        return self.catalog.get(self.session.current_question_index)

    def view_finalized_candidate(self, candidate_id: str) -> Optional[FinalizedCandidate]:
        record = self.store.find_finalized(candidate_id)
        if record is None:
            return None
        return record.model_copy(deep=True)

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------
    def add_listener(self, listener: SessionListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: SessionListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, event: SessionEvent, **payload) -> None:
        payload.setdefault("candidate_id", self.session.id)
        for listener in list(self._listeners):
            try:
                listener(event, payload)
            except Exception:
                logger.exception(f"Listener failed on {event.value}")

    # ------------------------------------------------------------------
    # Process start
    # ------------------------------------------------------------------
    async def start(self) -> Optional[ResumeOffer]:
        """
        Load persisted state and apply the resume protocol.
        Returns the ResumeOffer if an interrupted session was found.
        """
        self.timer.stop()
        self.store.load()
        self.resume_offer = self.resume_protocol.inspect(self.store)

        session = self.session
        if (
            self.resume_offer is None
            and session.status == CandidateStatus.INTERVIEWING
            and self.sequencer.needs_bootstrap(session)
        ):
            logger.info(f"Session {session.id} has no question yet; delivering question 1")
            with self.guard.acquire("start"):
                await self._issue_first_question(session)
        return self.resume_offer

    # ------------------------------------------------------------------
    # Intake
    # ------------------------------------------------------------------
    async def submit_resume(self, upload: ResumeUploadDTO) -> bool:
        try:
            with self.guard.acquire("submit_resume"):
                return await self._submit_resume(upload)
        except CommandBusyError as e:
            return self._reject("submit_resume", e.message)

    async def _submit_resume(self, upload: ResumeUploadDTO) -> bool:
        session = self.session
        if session.status != CandidateStatus.UPLOAD:
            return self._reject("submit_resume", f"status is {session.status.value}")
        if upload.extension not in ALLOWED_RESUME_EXTENSIONS:
            raise InputValidationError(
                "Invalid file type. Please upload a PDF or DOCX file.",
                details={"file_name": upload.file_name}
            )

        session.status = CandidateStatus.PROCESSING
        session.resume_file_name = upload.file_name
        self.store.persist()
        logger.info(f"Parsing resume '{upload.file_name}' for {session.id}")

        try:
            contact = await self.resume_parser.parse(upload)
        except Exception as e:
            self._revert_to_upload(session)
            logger.exception("Resume parsing failed")
            raise CollaboratorError("parseResume", str(e)) from e

        work = session.model_copy(deep=True)
        work.name, work.email, work.phone = contact.name, contact.email, contact.phone

        missing = contact.missing_fields()
        if missing:
            work.status = CandidateStatus.MISSING_INFO
            self.store.replace_current(work)
            logger.info(f"Session {work.id} needs contact details: {missing}")
            return True

        welcome = (
            f"Hello, {work.name}. Welcome to the interview for the {self.config.ROLE_TITLE} role. "
            "Let's begin with the first question."
        )
        try:
            await self._enter_interview(work, welcome)
        except CollaboratorError:
            self._revert_to_upload(session)
            raise
        return True

    def _revert_to_upload(self, session: CandidateSession) -> None:
        session.status = CandidateStatus.UPLOAD
        self.store.persist()

    async def confirm_missing_info(self, fields: Mapping[str, str]) -> bool:
        try:
            with self.guard.acquire("confirm_missing_info"):
                return await self._confirm_missing_info(fields)
        except CommandBusyError as e:
            return self._reject("confirm_missing_info", e.message)

    async def _confirm_missing_info(self, fields: Mapping[str, str]) -> bool:
        session = self.session
        if session.status != CandidateStatus.MISSING_INFO:
            return self._reject("confirm_missing_info", f"status is {session.status.value}")

        cleaned = {key: (fields.get(key) or "").strip() for key in CONTACT_FIELDS}
        blank = [key for key in session.missing_contact_fields() if not cleaned[key]]
        if blank:
            raise InputValidationError("Please fill in all required fields.", details={"missing": blank})

        work = session.model_copy(deep=True)
        for key in CONTACT_FIELDS:
            if cleaned[key]:
                setattr(work, key, cleaned[key])

        welcome = (
            f"Thank you, {work.name}. We've confirmed your contact details. "
            f"Let's begin the interview for the {self.config.ROLE_TITLE} role."
        )
        await self._enter_interview(work, welcome)
        return True

    async def _enter_interview(self, work: CandidateSession, welcome: str) -> None:
        """Seed the welcome turn, deliver question 1 and commit."""
        work.status = CandidateStatus.INTERVIEWING
        work.history.append(Turn(
            role=TurnRole.INTERVIEWER,
            question_id=0,
            content=welcome,
            score=None,
            rationale=None,
            time_spent=0
        ))
        work.current_question_index = 1
        logger.info(f"Session {work.id} entering INTERVIEWING")
        await self._issue_first_question(work)

    async def _issue_first_question(self, work: CandidateSession) -> None:
        await self.sequencer.advance(work, 1)
        self.store.replace_current(work)
        self._emit(SessionEvent.QUESTION_ISSUED, question_id=work.current_question_index)
        self._arm_timer()

    # ------------------------------------------------------------------
    # Answers
    # ------------------------------------------------------------------
    async def submit_answer(self, text: str, question_id: Optional[int] = None) -> bool:
        """
        Answer the pending question. If question_id is given, the submission
        is ignored unless that exact question is still pending.
        """
        return await self._dispatch_submission(text, question_id, is_timeout=False)

    async def _dispatch_submission(self, text: str, question_id: Optional[int], is_timeout: bool) -> bool:
        command = "timeout" if is_timeout else "submit_answer"
        try:
            with self.guard.acquire(command):
                return await self._submit_answer(text, question_id, is_timeout)
        except CommandBusyError as e:
            return self._reject(command, e.message)

    async def _submit_answer(self, text: str, question_id: Optional[int], is_timeout: bool) -> bool:
        command = "timeout" if is_timeout else "submit_answer"
        session = self.session
        if session.status != CandidateStatus.INTERVIEWING:
            return self._reject(command, f"status is {session.status.value}")

        pending = session.pending_question()
        if pending is None:
            return self._reject(command, "no pending question")
        if question_id is not None and pending.question_id != question_id:
            return self._reject(command, f"question {question_id} is no longer pending")
        if not is_timeout and not (text or "").strip():
            raise InputValidationError("Answer must not be empty.", details={"question_id": pending.question_id})

        answer = TIMEOUT_ANSWER if is_timeout else text
        slot = self.catalog.require(pending.question_id)
        self.timer.stop()
        time_spent = max(0, slot.time_limit_seconds - session.time_remaining)

        try:
            result = await self.pipeline.score_answer(pending.content, answer)
            work = session.model_copy(deep=True)
            target = work.pending_question()
            target.score = result.score
            target.rationale = result.rationale
            target.time_spent = time_spent
            work.history.append(Turn(
                role=TurnRole.CANDIDATE,
                question_id=slot.id,
                content=answer,
                time_spent=time_spent
            ))
            work.time_remaining = 0
            logger.info(
                f"Question {slot.id} of {work.id} scored {result.score} "
                f"({'timeout' if is_timeout else 'answered'} after {time_spent}s)"
            )
            await self.sequencer.advance(work, slot.id + 1)
        except CollaboratorError:
            # Stored session untouched; the same question stays pending
            self._arm_timer()
            raise

        self._emit(SessionEvent.ANSWER_SCORED, question_id=slot.id, score=result.score, timeout=is_timeout)

        if self.session.id != work.id:
            # complete_interview already archived it and installed a fresh session
            return True

        self.store.replace_current(work)
        self._emit(SessionEvent.QUESTION_ISSUED, question_id=work.current_question_index)
        self._arm_timer()
        return True

    async def complete_interview(self, session: CandidateSession, final_score: int, summary: str) -> None:
        """
        Archive `session` as COMPLETED and install a fresh session.
        Called by the sequencer once the catalog is exhausted.
        """
        if session.id != self.session.id:
            logger.warning(f"complete_interview ignored: {session.id} is not the current session")
            return

        self.timer.stop()
        record = FinalizedCandidate.freeze(
            session,
            CandidateStatus.COMPLETED,
            score=final_score,
            summary=summary,
            current_question_index=self.catalog.exhausted_index,
            time_remaining=0
        )
        self.store.archive(record, CandidateSession())
        self.resume_offer = None
        logger.info(f"Interview {record.id} COMPLETED with score {final_score}")
        self._emit(SessionEvent.SESSION_COMPLETED, candidate_id=record.id, score=final_score)

    # ------------------------------------------------------------------
    # Pause / Resume / New
    # ------------------------------------------------------------------
    async def pause(self) -> bool:
        try:
            with self.guard.acquire("pause"):
                session = self.session
                if session.status != CandidateStatus.INTERVIEWING:
                    return self._reject("pause", f"status is {session.status.value}")
                self.timer.stop()
                session.status = CandidateStatus.PAUSED
                self.store.persist()
                self.resume_offer = ResumeProtocol.offer_for(self.store)
                logger.info(f"Session {session.id} PAUSED with {session.time_remaining}s remaining")
                self._emit(SessionEvent.SESSION_PAUSED, time_remaining=session.time_remaining)
                return True
        except CommandBusyError as e:
            return self._reject("pause", e.message)

    async def resume(self) -> bool:
        try:
            with self.guard.acquire("resume"):
                return await self._resume()
        except CommandBusyError as e:
            return self._reject("resume", e.message)

    async def _resume(self) -> bool:
        session = self.session
        if session.status != CandidateStatus.PAUSED:
            return self._reject("resume", f"status is {session.status.value}")

        session.status = CandidateStatus.INTERVIEWING
        self.store.persist()
        self.resume_offer = None
        logger.info(f"Session {session.id} resumed with {session.time_remaining}s remaining")
        self._emit(SessionEvent.SESSION_RESUMED, time_remaining=session.time_remaining)

        try:
            pending = session.pending_question()
            if pending is None and self.sequencer.needs_bootstrap(session):
                await self._issue_first_question(session.model_copy(deep=True))
            elif pending is not None and session.time_remaining <= 0:
                logger.info(f"Question {pending.question_id} expired while paused; submitting timeout")
                self._emit(SessionEvent.QUESTION_TIMEOUT, question_id=pending.question_id)
                await self._submit_answer(TIMEOUT_ANSWER, pending.question_id, is_timeout=True)
            else:
                self._arm_timer()
        except CollaboratorError:
            if self.session is session:
                self.timer.stop()
                session.status = CandidateStatus.PAUSED
                self.store.persist()
                self.resume_offer = ResumeProtocol.offer_for(self.store)
            raise
        return True

    async def start_new(self) -> bool:
        try:
            with self.guard.acquire("start_new"):
                session = self.session
                if not session.status.is_active:
                    return self._reject("start_new", f"status is {session.status.value}")

                self.timer.stop()
                self.resume_offer = None
                if session.has_question_turns():
                    record = FinalizedCandidate.freeze(
                        session,
                        CandidateStatus.ABANDONED,
                        score=0,
                        summary=ABANDONED_SUMMARY
                    )
                    self.store.archive(record, CandidateSession())
                    logger.info(f"Session {record.id} ABANDONED at question {record.current_question_index}")
                    self._emit(SessionEvent.SESSION_ABANDONED, candidate_id=record.id)
                else:
                    logger.info(f"Session {session.id} discarded before any question")
                    self.store.replace_current(CandidateSession())
                return True
        except CommandBusyError as e:
            return self._reject("start_new", e.message)

    async def clear_all_data(self) -> bool:
        try:
            with self.guard.acquire("clear_all_data"):
                self.timer.stop()
                self.store.clear()
                self.resume_offer = None
                logger.warning("All interview data cleared")
                self._emit(SessionEvent.DATA_CLEARED)
                return True
        except CommandBusyError as e:
            return self._reject("clear_all_data", e.message)

    # ------------------------------------------------------------------
    # Countdown
    # ------------------------------------------------------------------
    def _arm_timer(self) -> None:
        session = self.session
        if session.status != CandidateStatus.INTERVIEWING or session.time_remaining <= 0:
            return
        pending = session.pending_question()
        if pending is not None:
            self.timer.start(pending.question_id)

    async def _on_tick(self, question_id: int) -> Optional[int]:
        session = self.session
        if session.status != CandidateStatus.INTERVIEWING or self.guard.busy:
            return None
        pending = session.pending_question()
        if pending is None or pending.question_id != question_id:
            return None

        if session.time_remaining > 0:
            session.time_remaining -= 1
        self.store.persist()
        self._emit(SessionEvent.TIMER_TICK, question_id=question_id, time_remaining=session.time_remaining)
        return session.time_remaining

    async def _on_timeout(self, question_id: int) -> None:
        logger.info(f"Time is up for question {question_id} of {self.session.id}")
        self._emit(SessionEvent.QUESTION_TIMEOUT, question_id=question_id)
        try:
            await self._dispatch_submission(TIMEOUT_ANSWER, question_id, is_timeout=True)
        except CollaboratorError as e:
            # No caller awaits the countdown; report through listeners
            logger.error(f"Timeout submission for question {question_id} failed: {e}")
            self._emit(
                SessionEvent.TIMEOUT_SUBMISSION_FAILED,
                question_id=question_id,
                collaborator=e.collaborator,
                error=e.message
            )

    # ------------------------------------------------------------------
    def _reject(self, command: str, reason: str) -> bool:
        logger.warning(f"{command} ignored: {reason}")
        return False
