import pytest
from pydantic import ValidationError

from assertkit.assertions.schema import ValidationResult, coerce_schema, validate_schema
from assertkit.config import SchemaNode


USER_SCHEMA = {
    "type": "object",
    "required": ["id", "name"],
    "properties": {
        "id": {"type": "number", "minimum": 1},
        "name": {"type": "string", "minLength": 3},
        "active": {"type": "boolean"},
        "tags": {"type": "array", "items": {"type": "string"}},
        "address": {
            "type": "object",
            "required": ["zipCode"],
            "properties": {"zipCode": {"type": "string", "pattern": r"^\d{5}$"}},
        },
    },
}


# --- end to end ---


def test_short_name_reports_path_qualified_length_error():
    schema = {
        "type": "object",
        "required": ["name"],
        "properties": {"name": {"type": "string", "minLength": 3}},
    }
    result = validate_schema({"name": "ab"}, schema)
    assert result == ValidationResult(
        is_valid=False, errors=["name: String length 2 is less than minimum 3"]
    )


def test_valid_document_has_no_errors():
    data = {
        "id": 7,
        "name": "Ada",
        "active": True,
        "tags": ["a", "b"],
        "address": {"zipCode": "12345"},
    }
    result = validate_schema(data, USER_SCHEMA)
    assert result.is_valid
    assert result.errors == []


# --- object ---


@pytest.mark.parametrize("missing", ["id", "name"])
def test_missing_required_property(missing):
    data = {"id": 1, "name": "Ada"}
    del data[missing]
    result = validate_schema(data, USER_SCHEMA)
    assert not result.is_valid
    assert f"Missing required property: {missing}" in result.errors


def test_missing_optional_property_is_fine():
    result = validate_schema({"id": 1, "name": "Ada"}, USER_SCHEMA)
    assert result.is_valid


def test_missing_required_field_is_not_validated_further():
    result = validate_schema({"id": 1}, USER_SCHEMA)
    assert result.errors == ["Missing required property: name"]


def test_extra_properties_are_ignored():
    result = validate_schema({"id": 1, "name": "Ada", "nickname": 42}, USER_SCHEMA)
    assert result.is_valid


def test_nested_object_errors_are_prefixed():
    data = {"id": 1, "name": "Ada", "address": {"zipCode": "1234"}}
    result = validate_schema(data, USER_SCHEMA)
    assert result.errors == [r"address.zipCode: String does not match pattern: ^\d{5}$"]


def test_nested_required_reports_under_parent():
    data = {"id": 1, "name": "Ada", "address": {}}
    result = validate_schema(data, USER_SCHEMA)
    assert result.errors == ["address: Missing required property: zipCode"]


def test_object_against_non_mapping():
    result = validate_schema(["not", "an", "object"], USER_SCHEMA)
    assert result.errors == ["Expected object type"]


def test_all_sibling_errors_are_collected():
    data = {"id": 0, "name": 5, "active": "yes"}
    result = validate_schema(data, USER_SCHEMA)
    assert result.errors == [
        "id: Number 0 is less than minimum 1",
        "name: Expected string type",
        "active: Expected boolean type",
    ]


# --- array ---


def test_array_item_errors_carry_index():
    data = {"id": 1, "name": "Ada", "tags": ["ok", 3, "fine", None]}
    result = validate_schema(data, USER_SCHEMA)
    assert result.errors == [
        "tags.[1]: Expected string type",
        "tags.[3]: Expected string type",
    ]


def test_array_against_non_sequence():
    result = validate_schema("abc", {"type": "array", "items": {"type": "string"}})
    assert result.errors == ["Expected array type"]


def test_array_without_items_accepts_any_elements():
    result = validate_schema([1, "two", None], {"type": "array"})
    assert result.is_valid


def test_array_of_objects():
    schema = {
        "type": "array",
        "items": {
            "type": "object",
            "required": ["id"],
            "properties": {"id": {"type": "number"}},
        },
    }
    result = validate_schema([{"id": 1}, {}, {"id": "x"}], schema)
    assert result.errors == [
        "[1]: Missing required property: id",
        "[2].id: Expected number type",
    ]


# --- primitives ---


def test_number_bounds():
    schema = {"type": "number", "minimum": 0, "maximum": 10}
    over = validate_schema(11, schema)
    assert over.errors == ["Number 11 is greater than maximum 10"]

    inside = validate_schema(5, schema)
    assert inside == ValidationResult(is_valid=True, errors=[])


def test_float_bounds_keep_fraction():
    result = validate_schema(0.1, {"type": "number", "minimum": 0.5})
    assert result.errors == ["Number 0.1 is less than minimum 0.5"]


def test_bool_is_not_a_number():
    result = validate_schema(True, {"type": "number"})
    assert result.errors == ["Expected number type"]


def test_wrong_type_skips_constraints():
    schema = {"type": "string", "minLength": 3, "pattern": "^a", "enum": ["abc"]}
    result = validate_schema(12, schema)
    assert result.errors == ["Expected string type"]


def test_multiple_string_constraints_all_surface():
    schema = {"type": "string", "maxLength": 2, "pattern": "^a", "enum": ["ab", "ac"]}
    result = validate_schema("bcd", schema)
    assert result.errors == [
        "String length 3 is greater than maximum 2",
        "String does not match pattern: ^a",
        'String value "bcd" is not in enum: [ab, ac]',
    ]


def test_pattern_is_a_search_not_a_full_match():
    result = validate_schema("order-123", {"type": "string", "pattern": r"\d+"})
    assert result.is_valid


def test_boolean_type():
    assert validate_schema(False, {"type": "boolean"}).is_valid
    assert validate_schema(0, {"type": "boolean"}).errors == ["Expected boolean type"]


# --- schema input ---


def test_validation_is_idempotent():
    data = {"id": "x", "tags": [1]}
    first = validate_schema(data, USER_SCHEMA)
    second = validate_schema(data, USER_SCHEMA)
    assert first == second


def test_accepts_schema_node_instances():
    node = SchemaNode(type="string", min_length=2)
    assert validate_schema("a", node).errors == ["String length 1 is less than minimum 2"]


def test_coerce_schema_passes_nodes_through():
    node = SchemaNode(type="boolean")
    assert coerce_schema(node) is node


def test_schema_without_type_is_rejected():
    with pytest.raises(ValidationError):
        validate_schema({}, {"properties": {}})


def test_unknown_schema_type_is_rejected():
    with pytest.raises(ValidationError):
        validate_schema(1, {"type": "integer"})


def test_invalid_pattern_is_rejected():
    with pytest.raises(ValidationError, match="Invalid pattern"):
        validate_schema("abc", {"type": "string", "pattern": "(unclosed"})


def test_invalid_nested_pattern_is_rejected():
    schema = {"type": "object", "properties": {"zip": {"type": "string", "pattern": "[0-9"}}}
    with pytest.raises(ValidationError):
        SchemaNode.model_validate(schema)
