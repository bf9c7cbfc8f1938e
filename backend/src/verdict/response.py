"""Rendering of outcomes into canonical payloads.

Payload shapes are a fixed contract:

    success:    <entity fields...>
    not found:  {"error": "<EntityType> not found"}
    invalid:    {"errors": {"<field>": ["<message>", ...], ...}}
"""

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from verdict.outcome import Invalid, NotFound, Outcome, Success


class StatusCategory(Enum):
    """Transport-neutral status of a rendered outcome."""

    CREATED = "created"
    OK = "ok"
    NOT_FOUND = "not_found"
    UNPROCESSABLE_ENTITY = "unprocessable_entity"


HTTP_STATUS: dict[StatusCategory, int] = {
    StatusCategory.CREATED: 201,
    StatusCategory.OK: 200,
    StatusCategory.NOT_FOUND: 404,
    StatusCategory.UNPROCESSABLE_ENTITY: 422,
}


@dataclass(frozen=True)
class MutationResponse:
    """A rendered payload and its status category."""

    payload: dict[str, Any]
    status: StatusCategory

    @property
    def status_code(self) -> int:
        return HTTP_STATUS[self.status]

    @property
    def ok(self) -> bool:
        return self.status in (StatusCategory.CREATED, StatusCategory.OK)


class ResponsePayloadBuilder:
    """Builds (payload, status) pairs from outcomes. Never touches I/O."""

    def build(
        self,
        outcome: Outcome,
        success: StatusCategory = StatusCategory.OK,
    ) -> tuple[dict[str, Any], StatusCategory]:
        """Render an outcome.

        Args:
            outcome: The classified outcome
            success: Status to report for Success (CREATED for creates,
                OK for updates); supplied by the caller

        Returns:
            (payload, status category)
        """
        if isinstance(outcome, Success):
            return serialize_entity(outcome.entity), success
        if isinstance(outcome, NotFound):
            return {"error": f"{outcome.entity_name} not found"}, StatusCategory.NOT_FOUND
        if isinstance(outcome, Invalid):
            return {"errors": outcome.result.to_dict()}, StatusCategory.UNPROCESSABLE_ENTITY
        raise TypeError(f"Unknown outcome: {outcome!r}")

    def response(
        self,
        outcome: Outcome,
        success: StatusCategory = StatusCategory.OK,
    ) -> MutationResponse:
        payload, status = self.build(outcome, success)
        return MutationResponse(payload=payload, status=status)


def serialize_entity(entity: Any) -> dict[str, Any]:
    """Return an entity's own serializable representation."""
    if entity is None:
        return {}
    if hasattr(entity, "to_dict"):
        return entity.to_dict()
    if dataclasses.is_dataclass(entity) and not isinstance(entity, type):
        return dataclasses.asdict(entity)
    if isinstance(entity, Mapping):
        return dict(entity)
    raise TypeError(f"Cannot serialize entity of type {type(entity).__name__}")
