"""Mutation lifecycle for create and update requests.

Lifecycle:
1. Resolve entity metadata and its RuleSet
2. (update only) Locate the target; a missing target ends here as NotFound
3. Whitelist input fields and build the candidate
4. Validate (all rules, concurrently)
5. Persist (only if valid)
6. Classify and render the payload
"""

import logging
from typing import Any

from verdict.errors import ConstraintEvaluationFault, UnknownEntityError
from verdict.integration import AdapterLookupService, permit, ruleset_from_entity
from verdict.metadata.loader import EntityModel, MetadataLoader
from verdict.outcome import classify
from verdict.persistence.adapter import PersistenceAdapter
from verdict.response import MutationResponse, ResponsePayloadBuilder, StatusCategory
from verdict.validation.ruleset import RuleSet
from verdict.validation.types import Candidate, Operation, ValidationResult
from verdict.validation.validator import Validator

logger = logging.getLogger(__name__)


class EntityMutationService:
    """Coordinates lookup, validation, persistence and rendering.

    Create and update share the same classification and rendering path;
    they differ only in whether a lookup precedes validation and in the
    status reported on success.
    """

    def __init__(
        self,
        adapter: PersistenceAdapter,
        metadata_loader: MetadataLoader,
        validator: Validator | None = None,
        builder: ResponsePayloadBuilder | None = None,
    ):
        self.adapter = adapter
        self.metadata_loader = metadata_loader
        self.validator = validator or Validator()
        self.builder = builder or ResponsePayloadBuilder()
        self.lookup = AdapterLookupService(adapter, metadata_loader)
        self._rulesets: dict[str, RuleSet] = {}

    def entity(self, name: str) -> EntityModel:
        entity_model = self.metadata_loader.get_entity(name)
        if entity_model is None:
            raise UnknownEntityError(name)
        return entity_model

    def ruleset(self, name: str) -> RuleSet:
        if name not in self._rulesets:
            self._rulesets[name] = ruleset_from_entity(self.entity(name))
        return self._rulesets[name]

    async def create(self, entity_name: str, data: dict[str, Any]) -> MutationResponse:
        """Validate and, if valid, store a new entity."""
        entity_model = self.entity(entity_name)
        candidate = Candidate(
            entity_name=entity_name,
            record=permit(data, entity_model),
            operation=Operation.CREATE,
        )
        return await self._mutate(entity_model, candidate, StatusCategory.CREATED)

    async def update(
        self, entity_name: str, id: Any, data: dict[str, Any]
    ) -> MutationResponse:
        """Validate and, if valid, store changes to an existing entity.

        A missing target yields NotFound without running validation.
        """
        entity_model = self.entity(entity_name)
        original = await self.lookup.find_by_id(entity_name, id)
        if original is None:
            return self._render(entity_model, Operation.UPDATE, found=False, result=None)

        candidate = Candidate(
            entity_name=entity_name,
            record={**original, **permit(data, entity_model)},
            operation=Operation.UPDATE,
            identity=id,
            original=original,
        )
        return await self._mutate(entity_model, candidate, StatusCategory.OK)

    async def show(self, entity_name: str, id: Any) -> MutationResponse:
        """Render a stored entity, or NotFound."""
        entity_model = self.entity(entity_name)
        record = await self.lookup.find_by_id(entity_name, id)
        outcome = classify(
            record is not None,
            ValidationResult(),
            entity_name=entity_name,
            entity=record,
        )
        return self.builder.response(outcome, StatusCategory.OK)

    async def _mutate(
        self,
        entity_model: EntityModel,
        candidate: Candidate,
        success: StatusCategory,
    ) -> MutationResponse:
        try:
            result = await self.validator.validate(
                self.ruleset(entity_model.name), candidate, self.lookup
            )
        except ConstraintEvaluationFault as e:
            logger.error(
                "%s %s aborted: %s", candidate.operation.value, entity_model.name, e
            )
            raise

        stored = None
        found = True
        if result.is_valid:
            if candidate.operation == Operation.CREATE:
                stored = self.adapter.create(entity_model, candidate.record)
            else:
                stored = self.adapter.update(entity_model, candidate.identity, candidate.record)
                # Deleted between lookup and write
                found = stored is not None

        return self._render(
            entity_model, candidate.operation, found=found, result=result, entity=stored,
            success=success,
        )

    def _render(
        self,
        entity_model: EntityModel,
        operation: Operation,
        *,
        found: bool,
        result: ValidationResult | None,
        entity: Any = None,
        success: StatusCategory = StatusCategory.OK,
    ) -> MutationResponse:
        outcome = classify(found, result, entity_name=entity_model.name, entity=entity)
        response = self.builder.response(outcome, success)
        logger.info(
            "%s %s -> %s", operation.value, entity_model.name, response.status.value
        )
        return response
