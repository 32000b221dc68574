from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Type, get_args

from pydantic import BaseModel, Field
from pydantic.fields import FieldInfo

DEFAULT_ONLY_KEY = "csv_default_only"

FieldPairs = List[Tuple[str, str]]


@dataclass(frozen=True)
class RecordMapping:
    """
    How one record type maps to and from csv rows.

    - field_names: header columns, in output order
    - from_fields: column name -> cell text, returns a record or raises
    - to_fields: record -> ordered (column name, cell text) pairs
    """

    field_names: Tuple[str, ...]
    from_fields: Callable[[Mapping[str, str]], Any]
    to_fields: Callable[[Any], FieldPairs]


class DecodeReport(BaseModel):
    encoding: str
    bom: bool = False
    detected: Optional[str] = Field(default=None, examples=[None])
    replacements: int = 0


def default_only(default: Any = ..., *, default_factory: Optional[Callable[[], Any]] = None, **kwargs: Any) -> Any:
    """
    Declare a field that is never read from input.

    On load the field always gets its default, whatever the matching column
    holds. On save it is written like any other field.
    """
    if default is ... and default_factory is None:
        raise TypeError("default_only() needs a default or a default_factory")
    extra = dict(kwargs.pop("json_schema_extra", None) or {})
    extra[DEFAULT_ONLY_KEY] = True
    if default_factory is not None:
        return Field(default_factory=default_factory, json_schema_extra=extra, **kwargs)
    return Field(default=default, json_schema_extra=extra, **kwargs)


def is_default_only(info: FieldInfo) -> bool:
    extra = info.json_schema_extra
    return isinstance(extra, dict) and bool(extra.get(DEFAULT_ONLY_KEY))


def _allows_none(info: FieldInfo) -> bool:
    return info.annotation is Any or type(None) in get_args(info.annotation)


def render_cell(value: Any) -> str:
    """Canonical text for one cell."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return repr(value)
    if isinstance(value, (dt.date, dt.datetime, dt.time)):
        return value.isoformat()
    if isinstance(value, Enum):
        return render_cell(value.value)
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


def model_field_names(model: Type[BaseModel]) -> Tuple[str, ...]:
    return tuple(name for name, info in model.model_fields.items() if not info.exclude)


def model_from_fields(model: Type[BaseModel], mapping: Mapping[str, str]) -> BaseModel:
    data: Dict[str, Any] = {}
    for name, info in model.model_fields.items():
        if is_default_only(info) or name not in mapping:
            continue
        value = mapping[name]
        if value == "" and _allows_none(info):
            value = None
        data[name] = value
    return model.model_validate(data)


def model_to_fields(record: BaseModel) -> FieldPairs:
    return [(name, render_cell(getattr(record, name))) for name in model_field_names(type(record))]


class CsvRecord(BaseModel):
    """
    Base class for record types stored as csv rows.

    Columns are the declared fields, in declaration order. Cell text is
    coerced with pydantic's lax validation, so "6048.6" loads into a float
    field and "2022-06-06" into a date field.
    """

    @classmethod
    def field_names(cls) -> Tuple[str, ...]:
        return model_field_names(cls)

    @classmethod
    def from_fields(cls, mapping: Mapping[str, str]) -> "CsvRecord":
        return model_from_fields(cls, mapping)

    def to_fields(self) -> FieldPairs:
        return model_to_fields(self)


def record_mapping_for(record_type: Any) -> RecordMapping:
    """Resolve a record type, a pydantic model or an explicit mapping to a RecordMapping."""
    if isinstance(record_type, RecordMapping):
        return record_type

    if all(hasattr(record_type, attr) for attr in ("field_names", "from_fields", "to_fields")):
        names = record_type.field_names
        if callable(names):
            names = names()
        return RecordMapping(
            field_names=tuple(names),
            from_fields=record_type.from_fields,
            to_fields=record_type.to_fields,
        )

    if isinstance(record_type, type) and issubclass(record_type, BaseModel):
        model = record_type
        return RecordMapping(
            field_names=model_field_names(model),
            from_fields=lambda mapping: model_from_fields(model, mapping),
            to_fields=model_to_fields,
        )

    raise TypeError(f"cannot map {record_type!r} to csv rows")
