"""
Structural matching, encoding and decoding of wire values.

`decode` resolves a wire value matching more than one union alternative to the
first matching alternative in declared order and logs a warning. `matches` and
`decode(..., exact=True)` treat such a value as not matching at all.
"""
from __future__ import annotations

import enum
from typing import Any

from pydantic import BaseModel, ValidationError

from .core import get_logger
from .exceptions import ShapeDefinitionError, ShapeError
from .shapes import (
    EnumShape,
    NullableShape,
    OpaqueShape,
    PrimitiveKind,
    PrimitiveShape,
    RecordShape,
    SequenceShape,
    Shape,
    UnionShape,
)

logger = get_logger(__name__)


def _is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _check_json(value: Any, shape: Shape) -> None:
    if value is None or isinstance(value, (str, bool, int, float)):
        return
    if isinstance(value, list):
        for i, item in enumerate(value):
            try:
                _check_json(item, shape)
            except ShapeError as e:
                raise e.prefixed(i) from None
        return
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise ShapeError(shape, value, f"non-string object key {key!r}")
            try:
                _check_json(item, shape)
            except ShapeError as e:
                raise e.prefixed(key) from None
        return
    raise ShapeError(shape, value, f"{type(value).__name__} is not a JSON value")


def _check_primitive(value: Any, shape: PrimitiveShape) -> Any:
    kind = shape.primitive
    if kind == PrimitiveKind.NULL:
        if value is None:
            return None
    elif kind == PrimitiveKind.STRING:
        if isinstance(value, str):
            return str(value)
    elif kind == PrimitiveKind.BOOLEAN:
        if isinstance(value, bool):
            return value
    elif kind == PrimitiveKind.INTEGER:
        if _is_integer(value):
            if shape.minimum is not None and value < shape.minimum:
                raise ShapeError(shape, value, "integer below minimum")
            if shape.maximum is not None and value > shape.maximum:
                raise ShapeError(shape, value, "integer above maximum")
            return int(value)
    elif kind == PrimitiveKind.FLOAT:
        if _is_integer(value) or isinstance(value, float):
            return float(value)
    raise ShapeError(shape, value, f"expected {kind.value}")


def _check_enum(value: Any, shape: EnumShape) -> Any:
    if shape.value_kind == PrimitiveKind.STRING:
        valid_kind = isinstance(value, str)
    else:
        valid_kind = _is_integer(value)
    if not valid_kind:
        raise ShapeError(shape, value, f"expected {shape.value_kind.value} code")
    if value not in shape.values:
        raise ShapeError(shape, value, "value outside of the enumeration")
    return value


def _validation_reason(error: ValidationError) -> str:
    return "; ".join(e["msg"] for e in error.errors())


def _decode_union(wire: Any, shape: UnionShape, exact: bool) -> Any:
    matched = []
    failures = []
    for alternative in shape.alternatives:
        try:
            matched.append((alternative, _decode(wire, alternative, exact)))
        except ShapeError as e:
            failures.append(f"{alternative.describe()}: {e.reason}")

    if len(matched) == 0:
        raise ShapeError(
            shape, wire, "no union alternative matches (" + "; ".join(failures) + ")"
        )
    if len(matched) > 1:
        names = ", ".join(a.describe() for a, _ in matched)
        if exact:
            raise ShapeError(shape, wire, f"ambiguous value matches {names}")
        logger.warning(
            f"Value matches multiple alternatives ({names}), using {matched[0][0].describe()}"
        )
    return matched[0][1]


def _decode_record(wire: Any, shape: RecordShape, exact: bool) -> Any:
    if not isinstance(wire, dict):
        raise ShapeError(shape, wire, "expected an object")

    values = {}
    for f in shape.fields:
        if f.wire_name not in wire:
            if f.optional:
                continue
            raise ShapeError(shape, wire, f"missing required field '{f.wire_name}'")

        item = wire[f.wire_name]
        if item is None and not f.nullable:
            if f.optional:
                continue
            raise ShapeError(
                f.shape, item, "null in a non-nullable field", (f.wire_name,)
            )

        try:
            values[f.name] = _decode(item, f.shape, exact)
        except ShapeError as e:
            raise e.prefixed(f.wire_name) from None

    try:
        return shape.model.model_validate(values)
    except ValidationError as e:
        raise ShapeError(shape, wire, _validation_reason(e)) from e


def _decode(wire: Any, shape: Shape, exact: bool) -> Any:
    if isinstance(shape, PrimitiveShape):
        return _check_primitive(wire, shape)
    elif isinstance(shape, EnumShape):
        value = _check_enum(wire, shape)
        return shape.enum_type(value) if shape.enum_type is not None else value
    elif isinstance(shape, NullableShape):
        if wire is None:
            return None
        return _decode(wire, shape.inner, exact)
    elif isinstance(shape, SequenceShape):
        if not isinstance(wire, list):
            raise ShapeError(shape, wire, "expected an array")
        result = []
        for i, item in enumerate(wire):
            try:
                result.append(_decode(item, shape.element, exact))
            except ShapeError as e:
                raise e.prefixed(i) from None
        return result
    elif isinstance(shape, UnionShape):
        return _decode_union(wire, shape, exact)
    elif isinstance(shape, RecordShape):
        return _decode_record(wire, shape, exact)
    elif isinstance(shape, OpaqueShape):
        _check_json(wire, shape)
        return wire
    raise ShapeDefinitionError(f"Unknown shape {shape!r}")


def decode(wire: Any, shape: Shape, *, exact: bool = False) -> Any:
    """
    Decode a JSON-compatible wire value into its typed representation.

    Raises:
        ShapeError: if the wire value does not conform to `shape`.
    """
    return _decode(wire, shape, exact)


def matches(wire: Any, shape: Shape) -> bool:
    """
    Structural-match predicate. A union matches only if exactly one of its alternatives does.
    """
    try:
        _decode(wire, shape, True)
    except ShapeError:
        return False
    return True


def _encode_record(value: Any, shape: RecordShape) -> dict:
    if not isinstance(value, BaseModel):
        raise ShapeError(shape, value, f"expected {shape.name} instance")

    fields_set = value.model_fields_set
    result = {}
    for f in shape.fields:
        present = f.name in fields_set
        if not present and f.optional:
            continue
        if f.name not in type(value).model_fields:
            raise ShapeError(shape, value, f"missing required field '{f.wire_name}'")

        item = getattr(value, f.name)
        if item is None:
            if f.nullable:
                result[f.wire_name] = None
            elif not f.optional:
                raise ShapeError(
                    f.shape, item, "null in a non-nullable field", (f.wire_name,)
                )
            continue

        try:
            result[f.wire_name] = encode(item, f.shape)
        except ShapeError as e:
            raise e.prefixed(f.wire_name) from None

    # values built with `model_construct` or `model_copy(update=...)` skipped the record validators
    try:
        shape.model.model_validate(result)
    except ValidationError as e:
        raise ShapeError(shape, value, _validation_reason(e)) from e
    return result


def encode(value: Any, shape: Shape) -> Any:
    """
    Encode a typed value into its JSON-compatible wire representation.
    Unset optional fields are omitted, explicitly set nullable fields are emitted as null.

    Raises:
        ShapeError: if the value does not conform to `shape`.
    """
    if isinstance(shape, PrimitiveShape):
        if isinstance(value, enum.Enum):
            value = value.value
        return _check_primitive(value, shape)
    elif isinstance(shape, EnumShape):
        if isinstance(value, enum.Enum):
            value = value.value
        return _check_enum(value, shape)
    elif isinstance(shape, NullableShape):
        if value is None:
            return None
        return encode(value, shape.inner)
    elif isinstance(shape, SequenceShape):
        if not isinstance(value, (list, tuple)):
            raise ShapeError(shape, value, "expected a sequence")
        result = []
        for i, item in enumerate(value):
            try:
                result.append(encode(item, shape.element))
            except ShapeError as e:
                raise e.prefixed(i) from None
        return result
    elif isinstance(shape, UnionShape):
        failures = []
        for alternative in shape.alternatives:
            try:
                return encode(value, alternative)
            except ShapeError as e:
                failures.append(f"{alternative.describe()}: {e.reason}")
        raise ShapeError(
            shape, value, "no union alternative matches (" + "; ".join(failures) + ")"
        )
    elif isinstance(shape, RecordShape):
        return _encode_record(value, shape)
    elif isinstance(shape, OpaqueShape):
        if isinstance(value, BaseModel):
            return value.model_dump(mode="json", by_alias=True, exclude_unset=True)
        _check_json(value, shape)
        return value
    raise ShapeDefinitionError(f"Unknown shape {shape!r}")
