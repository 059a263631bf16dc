"""
Tracker Kernel - Schema Gate

Validates the inbound batch envelope and the outbound response envelope
against the versioned JSON Schema contracts under `schemas/`.
Validation is structural (well-formed?) not semantic (will it apply?).
The projector handles semantics.

Every contract file carries an `$id` under https://mission.schemas/v1/ and
refers to its siblings by relative `$ref`; all files are preloaded into one
registry so those refs never leave the process.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError, ValidationError
from referencing import Registry, Resource
from referencing.jsonschema import DRAFT202012

from tracker.kernel.types import ValidationIssue

SCHEMA_ROOT = Path(__file__).parent / "schemas"

REQUEST_SCHEMA = "ops/event-batch-request.json"
RESPONSE_SCHEMA = "ops/event-batch-response.json"


class SchemaLoadError(Exception):
    """A contract file is missing, unreadable, or not a valid schema."""
    pass


def list_schema_files(root: Path) -> list[Path]:
    return sorted(p for p in root.rglob("*.json") if p.is_file())


class SchemaGate:
    """
    Compiled request/response validators.

    Build once at startup and share; validators are read-only after
    construction and safe to call from any thread.
    """

    def __init__(self, root: Path | None = None) -> None:
        self.root = Path(root) if root is not None else SCHEMA_ROOT
        self._schemas: dict[str, dict[str, Any]] = {}
        registry: Registry = Registry()

        for path in list_schema_files(self.root):
            rel = path.relative_to(self.root).as_posix()
            try:
                schema = json.loads(path.read_text(encoding="utf-8"))
            except (OSError, json.JSONDecodeError) as exc:
                raise SchemaLoadError(f"Unreadable schema: {rel}") from exc
            uri = schema.get("$id") or path.resolve().as_uri()
            registry = registry.with_resource(
                uri,
                Resource.from_contents(schema, default_specification=DRAFT202012),
            )
            self._schemas[rel] = schema

        self._registry = registry.crawl()
        self._request = self._compile(REQUEST_SCHEMA)
        self._response = self._compile(RESPONSE_SCHEMA)

    # -- public API --

    def validate_request(self, envelope: Any) -> list[ValidationIssue]:
        """
        Check a batch envelope. Returns every issue found; empty list = valid.
        Must pass before any event in the batch is applied.
        """
        return _collect(self._request, envelope)

    def validate_response(self, envelope: Any) -> list[ValidationIssue]:
        """Check an assembled response. A non-empty result is a server bug."""
        return _collect(self._response, envelope)

    def check_all(self) -> dict[str, str | None]:
        """
        Meta-validate every loaded contract.
        Returns {relative_path: error message or None}.
        """
        report: dict[str, str | None] = {}
        for rel, schema in self._schemas.items():
            try:
                Draft202012Validator.check_schema(schema)
                report[rel] = None
            except SchemaError as exc:
                report[rel] = exc.message
        return report

    @property
    def schema_names(self) -> list[str]:
        return sorted(self._schemas)

    # -- internals --

    def _compile(self, name: str) -> Draft202012Validator:
        schema = self._schemas.get(name)
        if schema is None:
            raise SchemaLoadError(f"Missing schema: {name}")
        try:
            Draft202012Validator.check_schema(schema)
        except SchemaError as exc:
            raise SchemaLoadError(f"Could not compile: {name}") from exc
        return Draft202012Validator(
            schema,
            registry=self._registry,
            format_checker=Draft202012Validator.FORMAT_CHECKER,
        )


def _collect(validator: Draft202012Validator, instance: Any) -> list[ValidationIssue]:
    errors = sorted(validator.iter_errors(instance), key=_path_key)
    return [_to_issue(e) for e in errors]


def _path_key(error: ValidationError) -> list[tuple[bool, Any]]:
    # array indices stay ints so /events/2 sorts before /events/10
    return [(isinstance(p, str), p) for p in error.absolute_path]


def _to_issue(error: ValidationError) -> ValidationIssue:
    return ValidationIssue(
        instance_path=_pointer(error.absolute_path),
        schema_path=_pointer(error.absolute_schema_path),
        keyword=str(error.validator),
        message=error.message,
    )


def _pointer(parts) -> str:
    """Render a jsonschema path deque as a JSON pointer ("" for the root)."""
    return "".join(
        "/" + str(p).replace("~", "~0").replace("/", "~1") for p in parts
    )
