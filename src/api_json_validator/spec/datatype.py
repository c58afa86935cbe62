"""Datatype labels and their resolution against a service's declared types.

A label as written in api.json (``"string"``, ``"[user]"``, ``"map[long]"``)
is first parsed into a RawDatatype, which only knows the container shape and
the inner type name. A TypeResolver then looks the inner name up against the
primitive table and the service's own enums, models and unions to produce a
fully resolved Datatype.
"""

import re
from enum import Enum
from typing import Iterable

from pydantic import BaseModel, ConfigDict

from .primitives import Primitive, is_primitive

MAP_PATTERN = re.compile(r"map\[(.*)\]")

DEPRECATED_MAP_WARNING = "type[map] is deprecated. Use map[string]"


class Kind(str, Enum):
    PRIMITIVE = "primitive"
    ENUM = "enum"
    MODEL = "model"
    UNION = "union"


class Container(str, Enum):
    SINGLETON = "singleton"
    LIST = "list"
    MAP = "map"


class RawDatatype(BaseModel):
    """An unresolved type label plus any warnings raised while reading it."""

    model_config = ConfigDict(frozen=True)

    label: str
    name: str
    container: Container
    warnings: tuple[str, ...] = ()

    @classmethod
    def parse(cls, label: str) -> "RawDatatype":
        value = label.strip()

        if value.startswith("[") and value.endswith("]"):
            return cls(label=value, name=value[1:-1].strip(), container=Container.LIST)

        if value == "map":
            return cls(
                label=value,
                name=Primitive.STRING.value,
                container=Container.MAP,
                warnings=(DEPRECATED_MAP_WARNING,),
            )

        match = MAP_PATTERN.fullmatch(value)
        if match:
            return cls(label=value, name=match.group(1).strip(), container=Container.MAP)

        return cls(label=value, name=value, container=Container.SINGLETON)


class TypeRef(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Kind
    name: str


class Datatype(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: TypeRef

    @property
    def label(self) -> str:
        raise NotImplementedError


class Scalar(Datatype):
    @property
    def label(self) -> str:
        return self.type.name


class ListOf(Datatype):
    @property
    def label(self) -> str:
        return f"[{self.type.name}]"


class MapOf(Datatype):
    """A map with string keys; ``type`` is the value type."""

    @property
    def label(self) -> str:
        return f"map[{self.type.name}]"


_CONTAINERS: dict[Container, type[Datatype]] = {
    Container.SINGLETON: Scalar,
    Container.LIST: ListOf,
    Container.MAP: MapOf,
}


class TypeResolver:
    """Resolves type names against the primitive table and declared types.

    Lookup order is fixed: primitives, then enums, then models, then unions.
    The first table containing the name decides its Kind.
    """

    def __init__(
        self,
        enums: Iterable[str] = (),
        models: Iterable[str] = (),
        unions: Iterable[str] = (),
    ):
        self.enums = frozenset(enums)
        self.models = frozenset(models)
        self.unions = frozenset(unions)

    def to_type(self, name: str) -> TypeRef | None:
        if is_primitive(name):
            return TypeRef(kind=Kind.PRIMITIVE, name=name)
        if name in self.enums:
            return TypeRef(kind=Kind.ENUM, name=name)
        if name in self.models:
            return TypeRef(kind=Kind.MODEL, name=name)
        if name in self.unions:
            return TypeRef(kind=Kind.UNION, name=name)
        return None

    def parse(self, raw: RawDatatype) -> Datatype | None:
        type_ref = self.to_type(raw.name)
        if type_ref is None:
            return None
        return _CONTAINERS[raw.container](type=type_ref)

    def resolve(self, label: str) -> Datatype | None:
        return self.parse(RawDatatype.parse(label))


def resolve(
    label: str,
    enums: Iterable[str] = (),
    models: Iterable[str] = (),
    unions: Iterable[str] = (),
) -> Datatype | None:
    """Resolve a raw label, returning None when the inner name is unknown."""
    return TypeResolver(enums=enums, models=models, unions=unions).resolve(label)
