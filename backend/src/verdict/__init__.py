"""Declarative validation and error reporting for entity mutations."""

from verdict.errors import (
    ConflictError,
    ConstraintEvaluationFault,
    MetadataError,
    UnknownEntityError,
    VerdictError,
)
from verdict.outcome import Invalid, NotFound, Outcome, Success, classify
from verdict.response import (
    HTTP_STATUS,
    MutationResponse,
    ResponsePayloadBuilder,
    StatusCategory,
)

__version__ = "0.1.0"

__all__ = [
    "ConflictError",
    "ConstraintEvaluationFault",
    "HTTP_STATUS",
    "Invalid",
    "MetadataError",
    "MutationResponse",
    "NotFound",
    "Outcome",
    "ResponsePayloadBuilder",
    "StatusCategory",
    "Success",
    "UnknownEntityError",
    "VerdictError",
    "classify",
]
