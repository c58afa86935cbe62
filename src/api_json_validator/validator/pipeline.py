"""Validation pipeline for api.json documents.

Stages:
1. Parse the text into a JSON object and build the intermediate form.
2. Check required top level fields. A document that fails here is rejected
   with that single message.
3. Run every rule and collect their messages.
4. If there are none, build the canonical Service and run the whole-service
   checks, whose messages are the final answer.
"""

import json
from functools import partial

import structlog
from pydantic import BaseModel, ConfigDict

from api_json_validator.config import ServiceConfiguration
from api_json_validator.importer import Importer
from api_json_validator.service import Service, build_service
from api_json_validator.spec.internal import InternalServiceForm
from api_json_validator.validator.rules import (
    Rule,
    validate_enums,
    validate_fields,
    validate_headers,
    validate_imports,
    validate_key,
    validate_operations,
    validate_parameter_bodies,
    validate_parameters,
    validate_path_parameters,
    validate_path_parameters_are_required,
    validate_required_fields,
    validate_responses,
    validate_unions,
)
from api_json_validator.validator.spec_validator import ServiceSpecValidator

logger = structlog.get_logger()


class ParsedDocument(BaseModel):
    model_config = ConfigDict(frozen=True)

    form: InternalServiceForm


class ParseFailure(BaseModel):
    model_config = ConfigDict(frozen=True)

    reason: str


class Continue(BaseModel):
    model_config = ConfigDict(frozen=True)


class ShortCircuit(BaseModel):
    model_config = ConfigDict(frozen=True)

    errors: tuple[str, ...]


class ValidationResult(BaseModel):
    """Either a Service or the messages explaining why none could be built."""

    errors: list[str] = []
    service: Service | None = None

    @property
    def valid(self) -> bool:
        return not self.errors


def parse_document(api_json: str) -> ParsedDocument | ParseFailure:
    if api_json.strip() == "":
        return ParseFailure(reason="No Data")
    try:
        document = json.loads(api_json)
    except json.JSONDecodeError as e:
        return ParseFailure(reason=str(e) or "Invalid JSON")
    except (ValueError, RecursionError):
        # Nesting deeper than the interpreter stack is reported like any other bad input
        return ParseFailure(reason="Invalid JSON")

    if not isinstance(document, dict):
        return ParseFailure(reason="Must upload a Json Object")
    return ParsedDocument(form=InternalServiceForm.from_json(document))


def check_required_fields(form: InternalServiceForm) -> Continue | ShortCircuit:
    errors = validate_required_fields(form)
    if errors:
        return ShortCircuit(errors=tuple(errors))
    return Continue()


class ServiceValidator:
    """Validates an api.json document and builds the Service it describes."""

    def __init__(
        self,
        config: ServiceConfiguration,
        api_json: str,
        importer: Importer | None = None,
    ):
        self.config = config
        self.api_json = api_json
        self.importer = importer or Importer()

    @property
    def rules(self) -> list[Rule]:
        return [
            validate_key,
            partial(validate_imports, importer=self.importer),
            validate_enums,
            validate_unions,
            validate_headers,
            validate_fields,
            validate_operations,
            validate_parameter_bodies,
            validate_parameters,
            validate_responses,
            validate_path_parameters,
            validate_path_parameters_are_required,
        ]

    def validate(self) -> ValidationResult:
        parsed = parse_document(self.api_json)
        if isinstance(parsed, ParseFailure):
            logger.debug("Document could not be parsed", reason=parsed.reason)
            return ValidationResult(errors=[parsed.reason])

        form = parsed.form
        gate = check_required_fields(form)
        if isinstance(gate, ShortCircuit):
            return ValidationResult(errors=list(gate.errors))

        errors = []
        for rule in self.rules:
            errors.extend(rule(form))
        if errors:
            logger.debug("Rule validation failed", service=form.name, error_count=len(errors))
            return ValidationResult(errors=errors)

        service = build_service(self.config, form)
        spec_errors = ServiceSpecValidator(service).errors
        if spec_errors:
            logger.debug("Service validation failed", service=service.name, error_count=len(spec_errors))
            return ValidationResult(errors=spec_errors)

        logger.debug("Service is valid", service=service.name)
        return ValidationResult(service=service)


def validate_api_json(
    api_json: str,
    config: ServiceConfiguration | None = None,
    importer: Importer | None = None,
) -> ValidationResult:
    """Validate api.json text, returning the built Service or all errors found."""
    return ServiceValidator(config or ServiceConfiguration(), api_json, importer).validate()
