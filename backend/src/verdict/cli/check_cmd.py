"""Offline validation of a candidate record."""

import asyncio
import json
from pathlib import Path
from typing import Any

import click

from verdict.errors import ConflictError, ConstraintEvaluationFault, MetadataError
from verdict.cli.metadata_cmd import load_metadata
from verdict.integration import AdapterLookupService, permit, ruleset_from_entity
from verdict.metadata.loader import EntityModel, MetadataLoader
from verdict.outcome import classify
from verdict.persistence.memory import MemoryAdapter
from verdict.response import ResponsePayloadBuilder, StatusCategory
from verdict.validation import Candidate, Operation, ValidationResult, Validator


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text())
    except json.JSONDecodeError as e:
        click.echo(f"Error: {path} is not valid JSON: {e}", err=True)
        raise SystemExit(1)


async def _run_check(
    loader: MetadataLoader,
    entity_model: EntityModel,
    record: dict[str, Any],
    operation: Operation,
    stored: list[dict[str, Any]],
    identity: Any,
) -> tuple[bool, ValidationResult | None, dict[str, Any]]:
    """Validate against an in-memory store seeded with ``stored``.

    Returns:
        (found, result, candidate record). A missing update target is
        (False, None, {}) and is never validated.
    """
    adapter = MemoryAdapter()
    adapter.initialize_entity(entity_model)
    for row in stored:
        adapter.create(entity_model, row)

    original = None
    changes = permit(record, entity_model)
    if operation == Operation.UPDATE:
        original = adapter.get(entity_model, identity)
        if original is None:
            return False, None, {}
        changes = {**original, **changes}

    candidate = Candidate(
        entity_name=entity_model.name,
        record=changes,
        operation=operation,
        identity=identity,
        original=original,
    )
    lookup = AdapterLookupService(adapter, loader)
    result = await Validator().validate(ruleset_from_entity(entity_model), candidate, lookup)
    return True, result, candidate.record


@click.command()
@click.argument("entity")
@click.argument("record_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--operation",
    type=click.Choice(["create", "update"]),
    default="create",
    show_default=True,
    help="Which operation's rules to apply.",
)
@click.option(
    "--stored",
    "stored_file",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON array of already-stored records (for uniqueness checks).",
)
@click.option("--id", "identity", default=None, help="Identity of the record being updated.")
@click.option(
    "--path",
    "metadata_path",
    default=None,
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Metadata directory (default: ./metadata).",
)
def check(
    entity: str,
    record_file: Path,
    operation: str,
    stored_file: Path | None,
    identity: str | None,
    metadata_path: Path | None,
):
    """Validate the JSON record in RECORD_FILE as an ENTITY.

    Prints the response payload and status code. Exits 1 when the record
    is invalid or the update target does not exist, 2 on metadata errors.
    """
    op = Operation(operation)
    if op == Operation.UPDATE and identity is None:
        raise click.UsageError("--id is required with --operation update")

    loader = load_metadata(metadata_path, exit_code=2)
    entity_model = loader.get_entity(entity)
    if entity_model is None:
        click.echo(f"Error: Entity '{entity}' not found", err=True)
        raise SystemExit(1)

    record = _read_json(record_file)
    if not isinstance(record, dict):
        click.echo("Error: record file must contain a JSON object", err=True)
        raise SystemExit(1)

    stored = _read_json(stored_file) if stored_file else []
    if not isinstance(stored, list):
        click.echo("Error: stored file must contain a JSON array", err=True)
        raise SystemExit(1)

    if identity is not None and identity.isdigit():
        identity = int(identity)

    try:
        found, result, candidate_record = asyncio.run(
            _run_check(loader, entity_model, record, op, stored, identity)
        )
    except (MetadataError, ConflictError, ConstraintEvaluationFault) as e:
        click.echo(click.style(f"Error: {e}", fg="red"), err=True)
        raise SystemExit(2)

    outcome = classify(found, result, entity_name=entity_model.name, entity=candidate_record)
    success = StatusCategory.CREATED if op == Operation.CREATE else StatusCategory.OK
    response = ResponsePayloadBuilder().response(outcome, success)

    click.echo(json.dumps(response.payload, indent=2, default=str))
    colour = "green" if response.ok else "red"
    click.echo(click.style(f"status: {response.status_code}", fg=colour))

    if result is not None and not result.is_valid:
        for message in result.full_messages(
            {f.name: f.display_name for f in entity_model.fields}
        ):
            click.echo(f"  - {message}", err=True)
    if not response.ok:
        raise SystemExit(1)
