"""Invariants that can only be checked once the canonical Service exists."""

from collections import Counter

from api_json_validator.service import Service
from api_json_validator.spec.datatype import TypeResolver


def _duplicates(names: list[str]) -> list[str]:
    counts = Counter(names)
    return sorted(name for name, count in counts.items() if count > 1)


class ServiceSpecValidator:
    """Runs whole-service checks against a built Service."""

    def __init__(self, service: Service):
        self.service = service
        self.resolver = TypeResolver(
            enums=[e.name for e in service.enums],
            models=[m.name for m in service.models],
            unions=[u.name for u in service.unions],
        )

    @property
    def errors(self) -> list[str]:
        return (
            self._validate_type_names()
            + self._validate_enums()
            + self._validate_models()
            + self._validate_unions()
            + self._validate_headers()
            + self._validate_resources()
        )

    def _validate_type_names(self) -> list[str]:
        kinds: dict[str, list[str]] = {}
        for kind, names in (
            ("enum", [e.name for e in self.service.enums]),
            ("model", [m.name for m in self.service.models]),
            ("union", [u.name for u in self.service.unions]),
        ):
            for name in names:
                kinds.setdefault(name, []).append(kind)

        return [
            f"Name[{name}] cannot be used as the name of more than one type: {', '.join(found)}"
            for name, found in kinds.items()
            if len(found) > 1
        ]

    def _validate_enums(self) -> list[str]:
        errors = []
        for enum in self.service.enums:
            if not enum.values:
                errors.append(f"Enum[{enum.name}] must have at least one value")
            for name in _duplicates([v.name for v in enum.values]):
                errors.append(f"Enum[{enum.name}] value[{name}] appears more than once")
        return errors

    def _validate_models(self) -> list[str]:
        return [
            f"Model[{model.name}] field[{name}] appears more than once"
            for model in self.service.models
            for name in _duplicates([f.name for f in model.fields])
        ]

    def _validate_unions(self) -> list[str]:
        errors = []
        for union in self.service.unions:
            if not union.types:
                errors.append(f"Union[{union.name}] must have at least one type")
            for t in union.types:
                if self.resolver.resolve(t.type) is None:
                    errors.append(f"Union[{union.name}] type[{t.type}] not found")
        return errors

    def _validate_headers(self) -> list[str]:
        errors = [
            f"Header[{h.name}] type[{h.type}] is invalid"
            for h in self.service.headers
            if self.resolver.resolve(h.type) is None
        ]
        errors.extend(
            f"Header[{name}] appears more than once"
            for name in _duplicates([h.name for h in self.service.headers])
        )
        return errors

    def _validate_resources(self) -> list[str]:
        declared = self.resolver.enums | self.resolver.models | self.resolver.unions
        errors = []
        for resource in self.service.resources:
            if resource.type not in declared:
                errors.append(
                    f"Resource[{resource.type}] type not found. "
                    "Resources must refer to a declared enum, model or union"
                )
            for label in _duplicates([f"{op.method.value} {op.path}" for op in resource.operations]):
                errors.append(f"Resource[{resource.type}] operation[{label}] appears more than once")
        return errors
