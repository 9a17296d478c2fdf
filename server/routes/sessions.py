"""Session endpoints: start, answer, refine, adjust, moment feedback, inspect, reset."""

from fastapi import APIRouter, Depends, HTTPException

from engine.errors import (
    EngineError,
    InvalidFeedbackError,
    SessionConflictError,
    SessionExpiredError,
    SessionNotFoundError,
    SessionStateError,
    UnknownOptionError,
    UnknownQuestionError,
)
from engine.models.results import AnswerResult, MomentAck, RecommendationResult, StartResult
from engine.orchestrator import SessionOrchestrator

from ..models import (
    AdjustRequest,
    AnswerRequest,
    ErrorDetail,
    MomentFeedbackRequest,
    RefineRequest,
    SessionResponse,
    StartSessionRequest,
)
from ..state import get_orchestrator

router = APIRouter()

# Most specific first: UnknownOptionError subclasses UnknownQuestionError
_ERROR_STATUS = [
    (SessionExpiredError, 401, "SESSION_EXPIRED"),
    (SessionNotFoundError, 404, "SESSION_NOT_FOUND"),
    (UnknownOptionError, 400, "UNKNOWN_OPTION"),
    (UnknownQuestionError, 400, "UNKNOWN_QUESTION"),
    (InvalidFeedbackError, 400, "INVALID_FEEDBACK"),
    (SessionStateError, 409, "INVALID_STATE"),
    (SessionConflictError, 409, "SESSION_CONFLICT"),
]


def _http_error(e: EngineError) -> HTTPException:
    for exc_type, status, code in _ERROR_STATUS:
        if isinstance(e, exc_type):
            return HTTPException(
                status_code=status,
                detail=ErrorDetail(code=code, message=str(e), session_id=e.session_id).model_dump(),
            )
    return HTTPException(
        status_code=500,
        detail=ErrorDetail(code="ENGINE_ERROR", message=str(e), session_id=e.session_id).model_dump(),
    )


def _log_sessions(msg: str) -> None:
    print(f"[sessions] {msg}", flush=True)


@router.post("/start", response_model=StartResult)
async def start_session(
    request: StartSessionRequest,
    orchestrator: SessionOrchestrator = Depends(get_orchestrator),
):
    """Create a session and return its greeting and first question."""
    try:
        result = await orchestrator.start_session(
            domain=request.domain, flow=request.flow, context=request.context
        )
    except EngineError as e:
        raise _http_error(e)
    _log_sessions(f"started {result.session_id} flow={result.flow}")
    return result


@router.post("/{session_id}/answer", response_model=AnswerResult)
async def submit_answer(
    session_id: str,
    request: AnswerRequest,
    orchestrator: SessionOrchestrator = Depends(get_orchestrator),
):
    """Record an answer. The final answer returns the moment and recommendations."""
    try:
        return await orchestrator.submit_answer(session_id, request.question_id, request.option_id)
    except EngineError as e:
        raise _http_error(e)


@router.post("/{session_id}/refine", response_model=RecommendationResult)
async def refine(
    session_id: str,
    request: RefineRequest,
    orchestrator: SessionOrchestrator = Depends(get_orchestrator),
):
    try:
        return await orchestrator.refine(
            session_id,
            [fb.model_dump() for fb in request.feedback],
            action=request.action,
        )
    except EngineError as e:
        raise _http_error(e)


@router.post("/{session_id}/adjust", response_model=RecommendationResult)
async def quick_adjust(
    session_id: str,
    request: AdjustRequest,
    orchestrator: SessionOrchestrator = Depends(get_orchestrator),
):
    try:
        return await orchestrator.quick_adjust(session_id, request.adjustment)
    except EngineError as e:
        raise _http_error(e)


@router.post("/{session_id}/moment-feedback", response_model=MomentAck)
async def moment_feedback(
    session_id: str,
    request: MomentFeedbackRequest,
    orchestrator: SessionOrchestrator = Depends(get_orchestrator),
):
    """Did we read the moment right? Score 1-5."""
    try:
        return await orchestrator.record_moment_feedback(session_id, request.score, request.comment)
    except EngineError as e:
        raise _http_error(e)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: str,
    orchestrator: SessionOrchestrator = Depends(get_orchestrator),
):
    try:
        session = await orchestrator.get_session(session_id)
    except EngineError as e:
        raise _http_error(e)
    return SessionResponse.from_session(session, orchestrator.clock())


@router.delete("/{session_id}")
async def reset_session(
    session_id: str,
    orchestrator: SessionOrchestrator = Depends(get_orchestrator),
):
    try:
        deleted = await orchestrator.reset_session(session_id)
    except EngineError as e:
        raise _http_error(e)
    _log_sessions(f"reset {session_id}")
    return {"session_id": session_id, "deleted": deleted}
