import pytest

from conftest import Color, Paint, Plain, Point, Report
from imagination_tools import SchemaValidationError, UnnamedSchemaError
from imagination_tools.schemas import parse_avro_schema, schema_name, validate_against_schema


def test_schema_name_drops_namespace():
    assert schema_name(Report) == "Report"
    assert schema_name(Report(id="r", score=1)) == "Report"


def test_schema_name_from_json_string():
    assert schema_name(Point) == "Point"


def test_primitive_schema_has_no_name():
    with pytest.raises(UnnamedSchemaError):
        schema_name(Plain)


def test_type_without_schema():
    with pytest.raises(UnnamedSchemaError, match="does not provide an avro schema"):
        schema_name(dict)


def test_validate_against_schema():
    validate_against_schema(Report(id="r", score=1, tags=["x"]))

    with pytest.raises(SchemaValidationError):
        validate_against_schema(Report(id="r", score=2 ** 31))


def test_broken_schema_is_a_validation_error():
    with pytest.raises(SchemaValidationError, match="parsing avro schema"):
        parse_avro_schema({"type": "record", "name": "Bad", "fields": [{"name": "a", "type": "nope"}]})


def test_enum_members_validate_against_avro_enum():
    validate_against_schema(Paint(color=Color.BLUE, shades=[Color.RED]))
