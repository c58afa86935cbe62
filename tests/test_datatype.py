from api_json_validator.spec.datatype import (
    DEPRECATED_MAP_WARNING,
    Container,
    Kind,
    ListOf,
    MapOf,
    RawDatatype,
    Scalar,
    TypeRef,
    TypeResolver,
    resolve,
)


class TestRawDatatype:
    def test_scalar(self):
        raw = RawDatatype.parse("string")
        assert raw.container == Container.SINGLETON
        assert raw.name == "string"
        assert raw.warnings == ()

    def test_list(self):
        raw = RawDatatype.parse("[user]")
        assert raw.container == Container.LIST
        assert raw.name == "user"
        assert raw.label == "[user]"

    def test_map_with_value_type(self):
        raw = RawDatatype.parse("map[long]")
        assert raw.container == Container.MAP
        assert raw.name == "long"

    def test_bare_map_defaults_to_string_with_warning(self):
        raw = RawDatatype.parse("map")
        assert raw.container == Container.MAP
        assert raw.name == "string"
        assert raw.warnings == (DEPRECATED_MAP_WARNING,)

    def test_label_is_stripped(self):
        raw = RawDatatype.parse("  uuid ")
        assert raw.label == "uuid"
        assert raw.name == "uuid"


class TestTypeResolver:
    def test_primitive(self):
        assert resolve("long") == Scalar(type=TypeRef(kind=Kind.PRIMITIVE, name="long"))

    def test_list_of_model(self):
        datatype = resolve("[user]", models=["user"])
        assert isinstance(datatype, ListOf)
        assert datatype.type == TypeRef(kind=Kind.MODEL, name="user")
        assert datatype.label == "[user]"

    def test_map_of_enum(self):
        datatype = resolve("map[status]", enums=["status"])
        assert isinstance(datatype, MapOf)
        assert datatype.type.kind == Kind.ENUM
        assert datatype.label == "map[status]"

    def test_union(self):
        datatype = resolve("payment", unions=["payment"])
        assert datatype.type.kind == Kind.UNION

    def test_unknown_name_is_unresolved(self):
        assert resolve("nope", models=["user"]) is None

    def test_empty_and_nested_labels_are_unresolved(self):
        assert resolve("[]") is None
        assert resolve("[[string]]") is None
        assert resolve("map[]") is None

    def test_lookup_order_for_colliding_names(self):
        everywhere = TypeResolver(enums=["thing"], models=["thing"], unions=["thing"])
        assert everywhere.to_type("thing").kind == Kind.ENUM

        model_and_union = TypeResolver(models=["thing"], unions=["thing"])
        assert model_and_union.to_type("thing").kind == Kind.MODEL

        shadowing_primitive = TypeResolver(enums=["string"], models=["string"])
        assert shadowing_primitive.to_type("string").kind == Kind.PRIMITIVE

    def test_resolution_is_deterministic(self):
        resolver = TypeResolver(enums=["status"], models=["user"])
        results = {resolver.resolve("[user]") for _ in range(3)}
        assert len(results) == 1
