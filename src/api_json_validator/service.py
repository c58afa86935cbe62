"""Canonical service model and the builder that produces it.

A ``Service`` is only ever built from an intermediate form that passed every
validation rule, so the builder can rely on names and types being present.
All models are frozen.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict

from api_json_validator.config import ServiceConfiguration
from api_json_validator.spec import url_key
from api_json_validator.spec.internal import (
    InternalOperationForm,
    InternalParameterForm,
    InternalResourceForm,
    InternalServiceForm,
)
from api_json_validator.spec.primitives import Method


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class ParameterLocation(str, Enum):
    PATH = "Path"
    QUERY = "Query"
    FORM = "Form"


class Import(_Frozen):
    uri: str


class Header(_Frozen):
    name: str
    type: str
    required: bool = True
    default: str | None = None
    description: str | None = None


class EnumValue(_Frozen):
    name: str
    description: str | None = None


class EnumType(_Frozen):
    name: str
    plural: str
    description: str | None = None
    values: tuple[EnumValue, ...] = ()


class UnionType(_Frozen):
    type: str
    description: str | None = None


class Union(_Frozen):
    name: str
    plural: str
    description: str | None = None
    types: tuple[UnionType, ...] = ()


class Field(_Frozen):
    name: str
    type: str
    required: bool = True
    default: str | None = None
    description: str | None = None
    example: str | None = None
    minimum: float | None = None
    maximum: float | None = None


class Model(_Frozen):
    name: str
    plural: str
    description: str | None = None
    fields: tuple[Field, ...] = ()


class Parameter(_Frozen):
    name: str
    type: str
    location: ParameterLocation
    required: bool = True
    default: str | None = None
    description: str | None = None
    minimum: float | None = None
    maximum: float | None = None


class Body(_Frozen):
    type: str
    description: str | None = None


class Response(_Frozen):
    code: int
    type: str
    description: str | None = None


class Operation(_Frozen):
    method: Method
    path: str
    description: str | None = None
    body: Body | None = None
    parameters: tuple[Parameter, ...] = ()
    responses: tuple[Response, ...] = ()


class Resource(_Frozen):
    type: str
    plural: str
    path: str
    description: str | None = None
    operations: tuple[Operation, ...] = ()


class Service(_Frozen):
    name: str
    key: str
    namespace: str
    organization: str
    version: str
    description: str | None = None
    base_url: str | None = None
    imports: tuple[Import, ...] = ()
    headers: tuple[Header, ...] = ()
    enums: tuple[EnumType, ...] = ()
    unions: tuple[Union, ...] = ()
    models: tuple[Model, ...] = ()
    resources: tuple[Resource, ...] = ()


def _parameter_location(op: InternalOperationForm, param: InternalParameterForm) -> ParameterLocation:
    if param.name in op.named_path_parameters:
        return ParameterLocation.PATH
    if op.body is not None or Method.from_string(op.method) == Method.GET:
        return ParameterLocation.QUERY
    return ParameterLocation.FORM


def _operation(op: InternalOperationForm) -> Operation:
    body = None
    if op.body is not None:
        body = Body(type=op.body.datatype.label, description=op.body.description)

    return Operation(
        method=Method.from_string(op.method),
        path=op.path,
        description=op.description,
        body=body,
        parameters=tuple(
            Parameter(
                name=p.name,
                type=p.datatype.label,
                location=_parameter_location(op, p),
                required=p.required,
                default=p.default,
                description=p.description,
                minimum=p.minimum,
                maximum=p.maximum,
            )
            for p in op.parameters
        ),
        responses=tuple(
            Response(code=int(r.code), type=r.datatype.label, description=r.description)
            for r in op.responses
        ),
    )


def _resource(resource: InternalResourceForm) -> Resource:
    return Resource(
        type=resource.datatype.label,
        plural=url_key.pluralize(resource.datatype.label),
        path=resource.path,
        description=resource.description,
        operations=tuple(_operation(op) for op in resource.operations),
    )


def build_service(config: ServiceConfiguration, form: InternalServiceForm) -> Service:
    """Transform a validated intermediate form into the canonical Service."""
    key = form.key or url_key.generate(form.name)

    return Service(
        name=form.name,
        key=key,
        namespace=form.namespace or config.application_namespace(key),
        organization=config.org_key,
        version=config.version,
        description=form.description,
        base_url=form.base_url,
        imports=tuple(Import(uri=i.uri) for i in form.imports),
        headers=tuple(
            Header(
                name=h.name,
                type=h.datatype.label,
                required=h.required,
                default=h.default,
                description=h.description,
            )
            for h in form.headers
        ),
        enums=tuple(
            EnumType(
                name=e.name,
                plural=url_key.pluralize(e.name),
                description=e.description,
                values=tuple(EnumValue(name=v.name, description=v.description) for v in e.values),
            )
            for e in form.enums
        ),
        unions=tuple(
            Union(
                name=u.name,
                plural=url_key.pluralize(u.name),
                description=u.description,
                types=tuple(UnionType(type=t.datatype.label, description=t.description) for t in u.types),
            )
            for u in form.unions
        ),
        models=tuple(
            Model(
                name=m.name,
                plural=url_key.pluralize(m.name),
                description=m.description,
                fields=tuple(
                    Field(
                        name=f.name,
                        type=f.datatype.label,
                        required=f.required,
                        default=f.default,
                        description=f.description,
                        example=f.example,
                        minimum=f.minimum,
                        maximum=f.maximum,
                    )
                    for f in m.fields
                ),
            )
            for m in form.models
        ),
        resources=tuple(_resource(r) for r in form.resources),
    )
