"""
Session orchestrator: owns the session state machine and sequences the stages.

CREATED -> QUESTIONING -> RECOMMENDED -> (REFINING during a call) -> RECOMMENDED,
with EXPIRED derived from the session deadline.

Every mutating operation loads the session, applies the change to a copy, and
writes it back once with compare-and-swap on Session.version. On a conflict the
whole mutation is re-run against the fresh record, up to max_write_attempts.
"""

import asyncio
import logging
import random
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Set, Tuple, TypeVar, Union

from .collaborators import (
    AnalyticsSink,
    EnrichmentService,
    MomentFeedbackStore,
    PreferenceTextService,
    QuestionCatalog,
    SessionStore,
    SimilarityIndex,
)
from .errors import (
    EngineError,
    InvalidFeedbackError,
    SessionConflictError,
    SessionExpiredError,
    SessionNotFoundError,
    SessionStateError,
    UnknownOptionError,
    UnknownQuestionError,
    ValidationStorageFailure,
)
from .models.config import EngineConfig, resolve_config
from .models.context import Context
from .models.filters import SearchFilters
from .models.profile import EmotionalProfile
from .models.question import Question
from .models.recommendation import Feedback, Reaction, Recommendation, parse_reaction
from .models.results import (
    AdjustmentInfo,
    AnswerResult,
    MomentAck,
    Progress,
    RecommendationResult,
    StartResult,
)
from .models.session import Answer, Session, SessionState, utcnow
from .stages.emotional_mapping import map_emotions
from .stages.enrichment import apply_details, fetch_details
from .stages.preference import baseline_text, compose
from .stages.refinement import QUICK_ADJUSTMENTS, parse_action, parse_quick_adjustment, select_strategy
from .stages.search import build_filters, search_candidates
from .stages.surprise import inject_surprises
from .stages.validation import needs_follow_up, persist_moment_feedback, validate_score
from .utils.tasks import fire_and_forget

logger = logging.getLogger(__name__)

T = TypeVar("T")

FOLLOW_UP_MESSAGE = "Sorry we missed. Tell us what felt off?"
THANKS_MESSAGE = "Thanks! Glad we read the moment right."


def default_rng(session: Session) -> random.Random:
    """Seeded from the session's identity and refinement position, so a replay is repeatable."""
    return random.Random(f"{session.session_id}:{session.refinement_count}:{session.last_adjustment}")


def adjustment_catalog() -> List[AdjustmentInfo]:
    return [
        AdjustmentInfo(name=p.name.value, label=p.label, icon=p.icon, description=p.description)
        for p in QUICK_ADJUSTMENTS.values()
    ]


class SessionOrchestrator:
    """Root of the engine. One instance is shared; it keeps no per-session state in memory."""

    def __init__(
        self,
        store: SessionStore,
        catalog: QuestionCatalog,
        index: SimilarityIndex,
        enrichment: Optional[EnrichmentService] = None,
        preference_service: Optional[PreferenceTextService] = None,
        analytics: Optional[AnalyticsSink] = None,
        moment_store: Optional[MomentFeedbackStore] = None,
        config: Optional[EngineConfig] = None,
        clock: Callable[[], datetime] = utcnow,
        rng_factory: Callable[[Session], random.Random] = default_rng,
    ):
        self.store = store
        self.catalog = catalog
        self.index = index
        self.enrichment = enrichment
        self.preference_service = preference_service
        self.analytics = analytics
        self.moment_store = moment_store
        self.config = resolve_config(config)
        self.clock = clock
        self.rng_factory = rng_factory

    # ------------------------------------------------------------------
    # Session plumbing
    # ------------------------------------------------------------------

    async def _load(self, session_id: str) -> Session:
        session = await self.store.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"Session {session_id} not found", session_id=session_id)
        if session.current_state(self.clock()) == SessionState.EXPIRED:
            raise SessionExpiredError(f"Session {session_id} expired", session_id=session_id)
        return session

    def _ttl(self, session: Session) -> int:
        """Seconds left until the session deadline (the deadline never moves)."""
        remaining = (session.expires_at - self.clock()).total_seconds()
        return max(1, int(remaining))

    async def _mutate(self, session_id: str, apply: Callable[[Session], Awaitable[T]]) -> T:
        """Load, apply to a copy, compare-and-swap write. Nothing is written if apply raises."""
        for attempt in range(1, self.config.max_write_attempts + 1):
            stored = await self._load(session_id)
            working = stored.model_copy(deep=True)
            result = await apply(working)
            try:
                await self.store.put(working, self._ttl(working), expected_version=stored.version)
                return result
            except SessionConflictError:
                logger.info("[session] WRITE_CONFLICT session=%s attempt=%d", session_id, attempt)
        raise SessionConflictError(
            f"Session {session_id} changed concurrently {self.config.max_write_attempts} times",
            session_id=session_id,
        )

    def _questions(self, session: Session) -> List[Question]:
        return self.catalog.questions_for_flow(session.flow, session.context)

    def _track(self, event: str, session_id: str, **fields: Any) -> None:
        if self.analytics is None:
            return
        payload = {
            "event": event,
            "session_id": session_id,
            "timestamp": self.clock().isoformat(),
            **fields,
        }
        fire_and_forget(self.analytics.record(payload), name=f"analytics:{event}")

    @staticmethod
    def _progress(session: Session) -> Progress:
        return Progress(**session.progress())

    # ------------------------------------------------------------------
    # Recommendation pipeline (search -> surprise, enrichment overlapped)
    # ------------------------------------------------------------------

    async def _recommend(
        self,
        session: Session,
        profile: EmotionalProfile,
        text: str,
        filters: SearchFilters,
        exclude_ids: Iterable[str] = (),
    ) -> Tuple[List[Recommendation], bool]:
        hits, degraded = await search_candidates(self.index, text, filters, self.config)
        excluded: Set[str] = set(exclude_ids)
        if excluded:
            hits = [h for h in hits if h.item_id not in excluded]
        safe_ids = [h.item_id for h in hits[: self.config.safe_count]]
        enrich_safe = asyncio.ensure_future(fetch_details(self.enrichment, safe_ids, self.config))
        try:
            recs = inject_surprises(hits, profile, self.config, self.rng_factory(session))
            details = dict(await enrich_safe)
        finally:
            if not enrich_safe.done():
                enrich_safe.cancel()
        surprise_ids = [r.item_id for r in recs if r.is_surprise]
        if surprise_ids:
            details.update(await fetch_details(self.enrichment, surprise_ids, self.config))
        return apply_details(recs, details), degraded

    def _degrade(self, profile: EmotionalProfile) -> EmotionalProfile:
        return profile.model_copy(update={
            "degraded": True,
            "confidence": min(profile.confidence, self.config.degraded_confidence),
        })

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def start_session(
        self,
        domain: str = "movies",
        flow: str = "standard",
        context: Optional[Context] = None,
    ) -> StartResult:
        """Create a session and return its first question."""
        context = context or Context.from_datetime(self.clock())
        if flow not in self.catalog.flows():
            logger.info("[session] UNKNOWN_FLOW %r, using standard", flow)
            flow = "standard"
        questions = self.catalog.questions_for_flow(flow, context)
        if not questions:
            raise UnknownQuestionError(f"Flow {flow!r} has no questions")
        session = Session.create(
            domain=domain,
            flow=flow,
            context=context,
            total_questions=len(questions),
            ttl_seconds=self.config.session_ttl_seconds,
            now=self.clock(),
        )
        session.state = SessionState.QUESTIONING
        await self.store.put(session, self.config.session_ttl_seconds)
        logger.info("[session] START session=%s flow=%s questions=%d", session.session_id, flow, len(questions))
        self._track("session_started", session.session_id, domain=domain, flow=flow, context=context.label())
        return StartResult(
            session_id=session.session_id,
            flow=flow,
            greeting=self.catalog.greeting(context),
            context_label=context.label(),
            first_question=questions[0],
            progress=self._progress(session),
        )

    async def submit_answer(self, session_id: str, question_id: str, option_id: str) -> AnswerResult:
        """
        Record (or replace) one answer. When every question in the flow has an
        answer, build the moment and the first recommendation list.
        """

        async def apply(session: Session) -> AnswerResult:
            if session.state != SessionState.QUESTIONING:
                raise SessionStateError(
                    f"Session {session_id} is {session.state.value}; answers are closed",
                    session_id=session_id,
                )
            questions = self._questions(session)
            question = next((q for q in questions if q.id == question_id), None)
            if question is None:
                raise UnknownQuestionError(
                    f"Question {question_id!r} is not part of flow {session.flow!r}", session_id=session_id
                )
            if question.option(option_id) is None:
                raise UnknownOptionError(
                    f"Option {option_id!r} is not offered by question {question_id!r}", session_id=session_id
                )
            session.answers[question_id] = Answer(
                question_id=question_id, option_id=option_id, answered_at=self.clock()
            )

            if session.answered_count < len(questions):
                upcoming = next(q for q in questions if q.id not in session.answers)
                return AnswerResult(
                    type="question",
                    session_id=session_id,
                    progress=self._progress(session),
                    next_question=upcoming,
                )
            return await self._complete(session, questions)

        result = await self._mutate(session_id, apply)
        self._track("question_answered", session_id, question_id=question_id, option_id=option_id)
        if result.type == "recommendations":
            self._track(
                "recommendations_generated",
                session_id,
                count=len(result.recommendations),
                confidence=result.moment.confidence if result.moment else None,
            )
        return result

    async def _complete(self, session: Session, questions: List[Question]) -> AnswerResult:
        """QUESTIONING -> RECOMMENDED. Runs once per session: later answers are rejected."""
        answers = session.answer_map()
        profile = map_emotions(answers, questions, session.context)
        filters = build_filters(answers, session.context)
        base_text = await baseline_text(answers, questions, session.domain, self.preference_service, self.config)
        text = compose(base_text, profile, self.config)
        recs, degraded = await self._recommend(session, profile, text, filters)
        if degraded:
            profile = self._degrade(profile)

        session.profile = profile
        session.active_profile = profile
        session.base_preference_text = base_text
        session.preference_text = text
        session.base_filters = filters
        session.filters = filters
        session.recommendations = recs
        session.state = SessionState.RECOMMENDED
        logger.info(
            "[session] RECOMMENDED session=%s items=%d surprises=%d degraded=%s",
            session.session_id, len(recs), sum(r.is_surprise for r in recs), degraded,
        )
        return AnswerResult(
            type="recommendations",
            session_id=session.session_id,
            progress=self._progress(session),
            recommendations=recs,
            moment=profile,
            preference_text=text,
        )

    def _require_recommended(self, session: Session) -> None:
        if session.state != SessionState.RECOMMENDED:
            raise SessionStateError(
                f"Session {session.session_id} is {session.state.value}; finish the questions first",
                session_id=session.session_id,
            )

    async def refine(
        self,
        session_id: str,
        feedback: List[Union[Feedback, Dict[str, Any]]],
        action: Optional[str] = None,
    ) -> RecommendationResult:
        """Pick one refinement strategy for a feedback batch and re-run synthesis, search and surprise."""
        batch = [_coerce_feedback(fb) for fb in feedback]
        refine_action = parse_action(action)

        async def apply(session: Session) -> RecommendationResult:
            self._require_recommended(session)
            session.state = SessionState.REFINING
            session.refinement_count += 1

            items = {r.item_id: r for r in session.recommendations}
            current = session.active_profile or session.profile
            plan = select_strategy(batch, items, current, self.config, refine_action)
            profile = current.with_delta(plan.delta)
            filters = session.filters.merged(plan.filters)
            text = compose(session.base_preference_text or "", profile, self.config, suffix=plan.explanation)
            disliked = [fb.item_id for fb in batch if fb.reaction == Reaction.DISLIKE]
            recs, degraded = await self._recommend(session, profile, text, filters, exclude_ids=disliked)
            if degraded:
                profile = self._degrade(profile)

            session.active_profile = profile
            session.filters = filters
            session.preference_text = text
            session.recommendations = recs
            session.feedback_history.extend(batch)
            session.last_strategy = plan.strategy.value
            session.state = SessionState.RECOMMENDED
            return RecommendationResult(
                session_id=session_id,
                recommendations=recs,
                moment=profile,
                preference_text=text,
                strategy=plan.strategy.value,
                explanation=plan.explanation,
                refinement_count=session.refinement_count,
                last_adjustment=session.last_adjustment,
                degraded=degraded,
            )

        result = await self._mutate(session_id, apply)
        self._track(
            "refined",
            session_id,
            strategy=result.strategy,
            feedback_count=len(batch),
            refinement_count=result.refinement_count,
        )
        return result

    async def quick_adjust(self, session_id: str, name: str) -> RecommendationResult:
        """
        Apply a named preset to the base profile and filters. The same preset on
        the same base answers always yields the same preference text.
        """
        adjustment = parse_quick_adjustment(name)
        preset = QUICK_ADJUSTMENTS[adjustment]

        async def apply(session: Session) -> RecommendationResult:
            self._require_recommended(session)
            session.state = SessionState.REFINING
            session.last_adjustment = adjustment.value

            profile = session.profile.with_delta(preset.delta)
            filters = session.base_filters.merged(preset.filters)
            text = compose(session.base_preference_text or "", profile, self.config, suffix=preset.description)
            recs, degraded = await self._recommend(session, profile, text, filters)
            if degraded:
                profile = self._degrade(profile)

            session.active_profile = profile
            session.filters = filters
            session.preference_text = text
            session.recommendations = recs
            session.state = SessionState.RECOMMENDED
            return RecommendationResult(
                session_id=session_id,
                recommendations=recs,
                moment=profile,
                preference_text=text,
                explanation=preset.description,
                refinement_count=session.refinement_count,
                last_adjustment=session.last_adjustment,
                degraded=degraded,
            )

        result = await self._mutate(session_id, apply)
        self._track("adjusted", session_id, adjustment=adjustment.value)
        return result

    async def record_moment_feedback(self, session_id: str, score: int, comment: Optional[str] = None) -> MomentAck:
        """Store the 1-5 score on the session; persist it to the feedback store best-effort."""
        score = validate_score(score)

        async def apply(session: Session) -> Session:
            session.moment_score = score
            return session

        session = await self._load(session_id)
        try:
            session = await self._mutate(session_id, apply)
        except EngineError:
            raise
        except Exception as e:
            err = ValidationStorageFailure(f"{type(e).__name__}: {e}", session_id=session_id)
            logger.warning("[moment] VALIDATION_STORAGE_FAILURE session=%s %s", session_id, err)
        follow_up = needs_follow_up(score, self.config)
        record = {
            "session_id": session_id,
            "score": score,
            "comment": comment,
            "needs_follow_up": follow_up,
            "moment": session.active_profile.description if session.active_profile else None,
            "created_at": self.clock().isoformat(),
        }
        fire_and_forget(persist_moment_feedback(self.moment_store, record, self.config), name="moment_feedback")
        self._track("moment_feedback", session_id, score=score, needs_follow_up=follow_up)
        return MomentAck(
            session_id=session_id,
            score=score,
            needs_follow_up=follow_up,
            message=FOLLOW_UP_MESSAGE if follow_up else THANKS_MESSAGE,
        )

    async def get_session(self, session_id: str) -> Session:
        return await self._load(session_id)

    async def reset_session(self, session_id: str) -> bool:
        """Delete a session. Missing sessions raise; expired ones are deleted too."""
        session = await self.store.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"Session {session_id} not found", session_id=session_id)
        return await self.store.delete(session_id)


def _coerce_feedback(fb: Union[Feedback, Dict[str, Any]]) -> Feedback:
    if isinstance(fb, Feedback):
        return fb
    try:
        return Feedback(item_id=str(fb["item_id"]), reaction=parse_reaction(str(fb["reaction"])))
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidFeedbackError(f"Invalid feedback entry {fb!r}") from e
