"""Pydantic request/response models for the API."""

from .common import ErrorDetail, ServiceStatus
from .sessions import (
    AdjustRequest,
    AnswerRequest,
    FeedbackItem,
    MomentFeedbackRequest,
    RefineRequest,
    SessionResponse,
    StartSessionRequest,
)

__all__ = [
    "ErrorDetail",
    "ServiceStatus",
    "StartSessionRequest",
    "AnswerRequest",
    "FeedbackItem",
    "RefineRequest",
    "AdjustRequest",
    "MomentFeedbackRequest",
    "SessionResponse",
]
