"""
JSON кодирование через pydantic-core
"""

from functools import lru_cache
from typing import Any, Type, TypeVar, Union

from pydantic import TypeAdapter
from pydantic_core import PydanticSerializationError, from_json, to_json

from .interfaces import SerializationError


T = TypeVar("T")


def dump_json(obj: Any) -> bytes:
    """
    Сериализовать объект в JSON

    Поддерживаются pydantic модели, dataclasses и встроенные типы.
    NaN и Infinity не кодируются: в JSON таких значений нет.

    Raises:
        SerializationError: Если объект не сериализуется
    """
    try:
        data = to_json(obj)
    except (PydanticSerializationError, TypeError, ValueError) as e:
        raise SerializationError(str(e)) from e

    # to_json пишет NaN/Infinity как есть, строгий парсер их не примет
    try:
        from_json(data, allow_inf_nan=False)
    except ValueError as e:
        raise SerializationError(f"unsupported value: {e}") from e

    return data


def load_json(data: Union[bytes, str], target_type: Type[T]) -> T:
    """
    Декодировать JSON в экземпляр target_type

    Raises:
        pydantic.ValidationError: Если JSON некорректен или не подходит под тип
    """
    return json_adapter(target_type).validate_json(data)


@lru_cache(maxsize=128)
def json_adapter(target_type: Any) -> TypeAdapter:
    return TypeAdapter(target_type)


__all__ = ["dump_json", "load_json", "json_adapter"]
