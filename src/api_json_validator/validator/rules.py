"""Validation rules over the intermediate form.

Each rule reads the form and returns a list of human readable messages; an
empty list means the rule passed. Rules do not depend on each other and all of
them run, so a caller sees every problem in a single pass. Resources and
operations are always traversed in document order.
"""

import re
from collections.abc import Callable

from api_json_validator.importer import Importer
from api_json_validator.spec import url_key
from api_json_validator.spec.datatype import Datatype, Kind, ListOf, MapOf, RawDatatype, Scalar, TypeRef
from api_json_validator.spec.internal import (
    InternalOperationForm,
    InternalResourceForm,
    InternalServiceForm,
)
from api_json_validator.spec.primitives import VALID_IN_PATH, Method, Primitive, valid_in_path
from api_json_validator.spec.uri import validate_uri

REQUIRED_FIELDS = ("name",)

RESERVED_CODES = (404,)  # and anything >= 500
CODES_REQUIRING_UNIT = (204, 304)

Rule = Callable[[InternalServiceForm], list[str]]


def validate_required_fields(service: InternalServiceForm) -> list[str]:
    missing = [f for f in REQUIRED_FIELDS if getattr(service, f) is None]
    if not missing:
        return []
    return ["Missing: " + ", ".join(missing)]


def validate_key(service: InternalServiceForm) -> list[str]:
    if service.key is None:
        return []
    generated = url_key.generate(service.key)
    if generated == service.key:
        return []
    return [f"Invalid url key. A valid key would be {generated}"]


def validate_imports(service: InternalServiceForm, importer: Importer) -> list[str]:
    errors = []
    for imp in service.imports:
        if imp.uri is None:
            errors.append("imports.uri is required")
            continue
        uri_errors = validate_uri(imp.uri)
        if uri_errors:
            errors.extend(uri_errors)
        else:
            errors.extend(importer.validate(imp.uri))
    return errors


def validate_enums(service: InternalServiceForm) -> list[str]:
    return [
        f"Enum[{enum.name}] - all values must have a name"
        for enum in service.enums
        for value in enum.values
        if value.name is None
    ]


def validate_unions(service: InternalServiceForm) -> list[str]:
    return [
        f"Union[{union.name}] all types must have a name"
        for union in service.unions
        if any(t.datatype is None for t in union.types)
    ]


def validate_headers(service: InternalServiceForm) -> list[str]:
    errors = []
    if any(h.name is None for h in service.headers):
        errors.append("All headers must have a name")
    if any(h.datatype is None for h in service.headers):
        errors.append("All headers must have a type")
    return errors


def validate_fields(service: InternalServiceForm) -> list[str]:
    resolver = service.type_resolver
    missing_types = []
    missing_names = []
    warnings = []

    for model in service.models:
        for f in model.fields:
            if f.name is None:
                missing_names.append(f"Model[{model.name}] field must have a name")
                continue
            if f.datatype is None:
                missing_types.append(f"Model[{model.name}] field[{f.name}] must have a type")
            elif resolver.parse(f.datatype) is None:
                missing_types.append(
                    f"Model[{model.name}] field[{f.name}] has an invalid type[{f.datatype.name}]"
                )
            if f.warnings:
                warnings.append(f"Model[{model.name}] field[{f.name}]: " + ", ".join(f.warnings))

    return missing_types + missing_names + warnings


def _op_label(resource: InternalResourceForm, op: InternalOperationForm) -> str:
    return f"Resource[{resource.datatype.label}] {op.method or ''} {op.path}"


def validate_operations(service: InternalServiceForm) -> list[str]:
    return [
        f"{_op_label(resource, op)}: " + ", ".join(op.warnings)
        for resource in service.resources
        for op in resource.operations
        if op.warnings
    ]


def validate_parameter_bodies(service: InternalServiceForm) -> list[str]:
    resolver = service.type_resolver
    errors = []
    for resource in service.resources:
        for op in resource.operations:
            if op.body is None:
                continue
            if op.body.datatype is None:
                errors.append(f"{_op_label(resource, op)}: Body missing type")
            elif resolver.parse(op.body.datatype) is None:
                errors.append(
                    f"{_op_label(resource, op)}: Body has an invalid type[{op.body.datatype.name}]"
                )
    return errors


def _has_query_parameters(op: InternalOperationForm) -> bool:
    """GET operations and operations with a body take their parameters from the query."""
    if op.method is None:
        return False
    return op.body is not None or Method.from_string(op.method) == Method.GET


def _query_type_error(datatype: Datatype, raw: RawDatatype) -> str | None:
    if isinstance(datatype, MapOf):
        return f"has an invalid type[{raw.label}]. Maps are not supported as query parameters."
    if datatype.type.kind in (Kind.MODEL, Kind.UNION):
        return (
            f"has an invalid type[{raw.name}]. "
            "Model and union types are not supported as query parameters."
        )
    return None


def validate_parameters(service: InternalServiceForm) -> list[str]:
    resolver = service.type_resolver
    missing = []
    invalid_types = []

    for resource in service.resources:
        for op in resource.operations:
            label = _op_label(resource, op)
            for p in op.parameters:
                if p.name is None:
                    missing.append(f"{label}: Missing name")
                elif p.datatype is None:
                    missing.append(f"{label}: Parameter[{p.name}] is missing a type")

            in_query = _has_query_parameters(op)
            for p in op.named_parameters():
                datatype = resolver.parse(p.datatype)
                if datatype is None:
                    invalid_types.append(f"{label}: Parameter[{p.name}] has an invalid type: {p.datatype.label}")
                    continue
                # Query parameters are limited to primitives and enums, or lists of either
                error = _query_type_error(datatype, p.datatype) if in_query else None
                if error:
                    invalid_types.append(f"{label}: Parameter[{p.name}] {error}")

    return missing + invalid_types


def _parse_code(code: str) -> int | None:
    # int() is more lenient, e.g. it accepts a leading '+'
    if not re.fullmatch(r"-?\d+", code):
        return None
    return int(code)


def validate_responses(service: InternalServiceForm) -> list[str]:
    resolver = service.type_resolver

    invalid_methods = []
    for resource in service.resources:
        for op in resource.operations:
            if op.method is None:
                invalid_methods.append(
                    f"Resource[{resource.datatype.label}] {op.path} Missing HTTP method"
                )
            elif Method.from_string(op.method) is None:
                invalid_methods.append(
                    f"Resource[{resource.datatype.label}] {op.path} Invalid HTTP method[{op.method}]. "
                    "Must be one of: " + ", ".join(Method.all_names())
                )

    invalid_codes = [
        f"Resource[{resource.datatype.label}] {op.label}: Response code is not an integer[{r.code}]"
        for resource in service.resources
        for op in resource.operations
        for r in op.responses
        if _parse_code(r.code) is None
    ]

    missing_or_invalid_types = []
    for resource in service.resources:
        for op in resource.operations:
            for r in op.responses:
                if r.datatype is None:
                    missing_or_invalid_types.append(
                        f"Resource[{resource.datatype.label}] {op.label} with response code[{r.code}]: Missing type"
                    )
                elif resolver.parse(r.datatype) is None:
                    missing_or_invalid_types.append(
                        f"Resource[{resource.datatype.label}] {op.label} with response code[{r.code}] "
                        f"has an invalid type[{r.datatype.name}]."
                    )

    # Code dependent checks would only produce noise once any code is unreadable
    code_errors = []
    if not invalid_codes:
        code_errors = _validate_response_codes(service)

    warnings = [
        f"Resource[{resource.datatype.label}] {op.method or ''} {r.code}: " + ", ".join(r.warnings)
        for resource in service.resources
        for op in resource.operations
        for r in op.responses
        if r.warnings
    ]

    return invalid_methods + invalid_codes + missing_or_invalid_types + code_errors + warnings


def _validate_response_codes(service: InternalServiceForm) -> list[str]:
    mixed_2xx = []
    reserved = []
    requiring_unit = []

    for resource in service.resources:
        for op in resource.operations:
            types = []
            for r in op.responses:
                code = int(r.code)
                if 200 <= code < 300 and r.datatype_label is not None and r.datatype_label not in types:
                    types.append(r.datatype_label)
            if len(types) > 1:
                mixed_2xx.append(
                    f"Resource[{resource.datatype.label}] cannot have varying response types "
                    f"for 2xx response codes: {', '.join(sorted(types))}"
                )

            # Only the first reserved code of an operation is reported
            first_reserved = next(
                (r for r in op.responses if int(r.code) in RESERVED_CODES or int(r.code) >= 500),
                None,
            )
            if first_reserved is not None:
                reserved.append(
                    f"Resource[{resource.datatype.label}] {op.label} has a response with "
                    f"code[{first_reserved.code}] - this code cannot be explicitly specified"
                )

            for r in op.responses:
                code = int(r.code)
                if (
                    code in CODES_REQUIRING_UNIT
                    and r.datatype is not None
                    and r.datatype.name != Primitive.UNIT.value
                ):
                    requiring_unit.append(
                        f"Resource[{resource.datatype.label}] {op.label} Responses w/ code[{r.code}] "
                        f"must return unit and not[{r.datatype.label}]"
                    )

    return mixed_2xx + reserved + requiring_unit


def _path_parameter_types(
    service: InternalServiceForm, resource: InternalResourceForm, op: InternalOperationForm
) -> dict[str, tuple[RawDatatype, bool]]:
    """Datatype and required flag for each path placeholder of an operation.

    An explicit parameter wins over a field of the resource's model; a
    placeholder matching neither is a required string.
    """
    model = service.find_model(resource.datatype.label)
    fields = {f.name: (f.datatype, f.required) for f in model.named_fields()} if model else {}
    params = {p.name: (p.datatype, p.required) for p in op.named_parameters()}
    default = (RawDatatype.parse(Primitive.STRING.value), True)

    return {
        name: params.get(name) or fields.get(name) or default
        for name in op.named_path_parameters
    }


def _is_type_valid_in_path(type_ref: TypeRef) -> bool:
    if type_ref.kind == Kind.PRIMITIVE:
        return valid_in_path(type_ref.name)
    # Enums serialize as strings
    return type_ref.kind == Kind.ENUM


def validate_path_parameters(service: InternalServiceForm) -> list[str]:
    resolver = service.type_resolver
    errors = []

    for resource in service.resources:
        for op in resource.operations:
            for name, (raw, _) in _path_parameter_types(service, resource, op).items():
                datatype = resolver.parse(raw)
                if datatype is None:
                    found = raw.label
                elif isinstance(datatype, ListOf):
                    found = "list"
                elif isinstance(datatype, MapOf):
                    found = "map"
                elif isinstance(datatype, Scalar) and not _is_type_valid_in_path(datatype.type):
                    found = datatype.type.name
                else:
                    continue
                errors.append(
                    f"Resource[{resource.datatype.label}] {op.method or ''} path parameter[{name}] "
                    f"has an invalid type[{found}]. Valid types for path parameters are: "
                    + ", ".join(VALID_IN_PATH)
                )

    return errors


def validate_path_parameters_are_required(service: InternalServiceForm) -> list[str]:
    return [
        f"Resource[{resource.datatype.label}] {op.method or ''} path parameter[{name}] "
        "is specified as optional. All path parameters are required"
        for resource in service.resources
        for op in resource.operations
        for name, (_, required) in _path_parameter_types(service, resource, op).items()
        if not required
    ]
