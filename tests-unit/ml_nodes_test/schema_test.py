import pytest

from comfy_ml.schema import SchemaColumn, SchemaColumnNotFound, ValueKind, find_column


def test_value_kind_from_type_name():
    assert ValueKind.from_type_name("String") == ValueKind.TEXT
    assert ValueKind.from_type_name("Single") == ValueKind.FLOAT32
    assert ValueKind.from_type_name("Vector<Single, 4>") == ValueKind.VECTOR_FLOAT32
    assert ValueKind.from_type_name("Single[]") == ValueKind.VECTOR_FLOAT32
    assert ValueKind.from_type_name("Boolean") == ValueKind.OTHER
    assert ValueKind.from_type_name("") == ValueKind.OTHER


def test_find_column_returns_first_match():
    schema = (SchemaColumn("Input", "String"), SchemaColumn("Input", "Single"))
    assert find_column(schema, "Input").type_name == "String"


def test_find_column_names_missing_column():
    with pytest.raises(SchemaColumnNotFound) as excinfo:
        find_column((SchemaColumn("Text", "String"),), "Input")
    assert excinfo.value.column_name == "Input"
    assert "Input" in str(excinfo.value)
