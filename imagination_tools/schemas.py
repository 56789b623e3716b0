"""
Avro схемы: имя схемы и валидация объекта по своей схеме
"""

import dataclasses
import json
import logging
from enum import Enum
from typing import Any, Dict, Mapping, Union

from fastavro import parse_schema
from fastavro.schema import SchemaParseException, UnknownType
from fastavro.validation import ValidationError, validate
from pydantic import BaseModel
from pydantic_core import to_jsonable_python

from .interfaces import SchemaProvider, SchemaValidationError, UnnamedSchemaError


logger = logging.getLogger(__name__)

# Только у этих типов Avro есть имя
NAMED_TYPES = ("record", "enum", "fixed")


def parse_avro_schema(schema: Union[Dict[str, Any], str]) -> Any:
    """
    Распарсить Avro схему (dict или JSON строка)

    Raises:
        SchemaValidationError: Если схема некорректна
    """
    try:
        if isinstance(schema, str) and schema.lstrip().startswith(("{", "[")):
            schema = json.loads(schema)
        return parse_schema(schema)
    except (SchemaParseException, UnknownType, ValueError, TypeError) as e:
        raise SchemaValidationError(f"parsing avro schema: {e}") from e


def schema_name(provider: Any) -> str:
    """
    Имя схемы объекта или типа без namespace

    Схема без имени не поддерживается: по имени тегируется объект в storage.
    Тег совместим с объектами, которые записывают другие клиенты:
    в schema_ref хранится короткое имя, например "Report".

    Args:
        provider: Экземпляр или класс, реализующий SchemaProvider

    Raises:
        UnnamedSchemaError: Если схема не record/enum/fixed или без имени
    """
    if not isinstance(provider, SchemaProvider):
        raise UnnamedSchemaError(
            f"{_type_name(provider)} does not provide an avro schema"
        )

    parsed = parse_avro_schema(provider.avro_schema())
    if isinstance(parsed, dict) and parsed.get("type") in NAMED_TYPES and parsed.get("name"):
        # parse_schema возвращает полное имя, namespace отбрасывается
        return parsed["name"].rsplit(".", 1)[-1]

    raise UnnamedSchemaError(
        f"schema of {_type_name(provider)} has no name, only named types "
        f"({', '.join(NAMED_TYPES)}) can be stored with a schema reference"
    )


def validate_against_schema(obj: Any) -> None:
    """
    Проверить объект по его собственной Avro схеме

    Raises:
        SchemaValidationError: Если объект не соответствует схеме
    """
    if not isinstance(obj, SchemaProvider):
        raise SchemaValidationError(f"{_type_name(obj)} does not provide an avro schema")

    parsed = parse_avro_schema(obj.avro_schema())
    record = _to_record(obj)

    try:
        validate(record, parsed, raise_errors=True)
    except ValidationError as e:
        logger.debug(
            f"Schema validation failed: {e}",
            extra={"component": "schemas", "type": _type_name(obj)}
        )
        raise SchemaValidationError(str(e)) from e


def _to_record(obj: Any) -> Any:
    """Привести объект к структуре, которую понимает fastavro"""
    if isinstance(obj, BaseModel):
        return _enum_values(obj.model_dump())
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return _enum_values(dataclasses.asdict(obj))
    if isinstance(obj, Mapping):
        return _enum_values(dict(obj))
    return to_jsonable_python(obj)


def _enum_values(value: Any) -> Any:
    """Заменить члены Enum их значениями, как они попадут в JSON"""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: _enum_values(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_enum_values(item) for item in value]
    return value


def _type_name(obj: Any) -> str:
    return obj.__name__ if isinstance(obj, type) else type(obj).__name__
