"""
Wire shape descriptors.

Every message payload of a catalog is described by an immutable, hashable
`Shape`. Shapes are derived from the typed catalog (pydantic models and typing
annotations) with `shape_for`, so the catalog stays the single source of truth
and the resulting shapes can be enumerated and inspected at runtime.

Field conventions understood by the derivation:

* a field with a default is optional, `None` then stands for an absent field;
* a required field annotated `Optional[X]` is nullable;
* an optional field annotated `Nullable[X]` is both optional and nullable.
"""
from __future__ import annotations

import enum
import sys
from dataclasses import dataclass, field
from typing import (
    Any,
    ClassVar,
    Dict,
    FrozenSet,
    Iterator,
    List,
    Literal,
    Optional,
    Sequence,
    Set,
    Tuple,
    Type,
    Union,
    get_args,
    get_origin,
)

from pydantic import BaseModel
from typing_extensions import Annotated

from .exceptions import ShapeDefinitionError
from .lsp_data_model import NULLABLE
from .utils.enums import StrEnum

if sys.version_info >= (3, 10):
    import types

    _UNION_ORIGINS = (Union, types.UnionType)
else:
    _UNION_ORIGINS = (Union,)

_NONE_TYPE = type(None)


class ShapeKind(StrEnum):
    PRIMITIVE = "primitive"
    ENUM = "enum"
    RECORD = "record"
    UNION = "union"
    SEQUENCE = "sequence"
    NULLABLE = "nullable"
    OPAQUE = "opaque"


class PrimitiveKind(StrEnum):
    STRING = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    FLOAT = "float"
    NULL = "null"


class Shape:
    kind: ClassVar[ShapeKind]

    def describe(self) -> str:
        raise NotImplementedError()


@dataclass(frozen=True)
class PrimitiveShape(Shape):
    primitive: PrimitiveKind
    minimum: Optional[int] = None
    maximum: Optional[int] = None

    kind: ClassVar[ShapeKind] = ShapeKind.PRIMITIVE

    def describe(self) -> str:
        if self.minimum is None and self.maximum is None:
            return self.primitive.value
        low = "-inf" if self.minimum is None else str(self.minimum)
        high = "inf" if self.maximum is None else str(self.maximum)
        return f"{self.primitive.value} in [{low}, {high}]"


@dataclass(frozen=True)
class EnumShape(Shape):
    name: str
    values: Tuple[Union[int, str], ...]
    enum_type: Optional[Type[enum.Enum]] = field(default=None, compare=False)

    kind: ClassVar[ShapeKind] = ShapeKind.ENUM

    def __post_init__(self):
        if len(self.values) == 0:
            raise ShapeDefinitionError(f"Enumeration {self.name} has no values")
        if all(isinstance(v, str) for v in self.values):
            return
        if all(isinstance(v, int) and not isinstance(v, bool) for v in self.values):
            return
        raise ShapeDefinitionError(
            f"Enumeration {self.name} must hold only integer or only string codes"
        )

    @property
    def value_kind(self) -> PrimitiveKind:
        if isinstance(self.values[0], str):
            return PrimitiveKind.STRING
        return PrimitiveKind.INTEGER

    def describe(self) -> str:
        return f"{self.name}({', '.join(repr(v) for v in self.values)})"


@dataclass(frozen=True)
class FieldShape:
    name: str
    """
    Python attribute name of the field.
    """
    wire_name: str
    """
    Key of the field in the wire object.
    """
    shape: Shape
    optional: bool

    @property
    def nullable(self) -> bool:
        return isinstance(self.shape, NullableShape)


@dataclass(frozen=True)
class RecordShape(Shape):
    model: Type[BaseModel]

    kind: ClassVar[ShapeKind] = ShapeKind.RECORD

    @property
    def name(self) -> str:
        return self.model.__name__

    @property
    def fields(self) -> Tuple[FieldShape, ...]:
        return record_fields(self.model)

    def field(self, wire_name: str) -> Optional[FieldShape]:
        for f in self.fields:
            if f.wire_name == wire_name:
                return f
        return None

    def describe(self) -> str:
        return self.name


@dataclass(frozen=True)
class UnionShape(Shape):
    alternatives: Tuple[Shape, ...]

    kind: ClassVar[ShapeKind] = ShapeKind.UNION

    def __post_init__(self):
        if len(self.alternatives) < 2:
            raise ShapeDefinitionError("A union needs at least two alternatives")

    def describe(self) -> str:
        return " | ".join(a.describe() for a in self.alternatives)


@dataclass(frozen=True)
class SequenceShape(Shape):
    element: Shape

    kind: ClassVar[ShapeKind] = ShapeKind.SEQUENCE

    def describe(self) -> str:
        if isinstance(self.element, (UnionShape, NullableShape)):
            return f"({self.element.describe()})[]"
        return f"{self.element.describe()}[]"


@dataclass(frozen=True)
class NullableShape(Shape):
    inner: Shape

    kind: ClassVar[ShapeKind] = ShapeKind.NULLABLE

    def describe(self) -> str:
        return f"{self.inner.describe()} | null"


@dataclass(frozen=True)
class OpaqueShape(Shape):
    kind: ClassVar[ShapeKind] = ShapeKind.OPAQUE

    def describe(self) -> str:
        return "any"


OPAQUE = OpaqueShape()
NULL = PrimitiveShape(PrimitiveKind.NULL)
STRING = PrimitiveShape(PrimitiveKind.STRING)
INTEGER = PrimitiveShape(PrimitiveKind.INTEGER)
BOOLEAN = PrimitiveShape(PrimitiveKind.BOOLEAN)
FLOAT = PrimitiveShape(PrimitiveKind.FLOAT)


_record_fields_cache: Dict[Type[BaseModel], Tuple[FieldShape, ...]] = {}


def _bounds(metadata: Sequence[Any]) -> Tuple[Optional[int], Optional[int]]:
    minimum = None
    maximum = None
    for m in metadata:
        if getattr(m, "ge", None) is not None:
            minimum = m.ge
        if getattr(m, "gt", None) is not None:
            minimum = m.gt + 1
        if getattr(m, "le", None) is not None:
            maximum = m.le
        if getattr(m, "lt", None) is not None:
            maximum = m.lt - 1
    return minimum, maximum


def shape_for(annotation: Any, metadata: Sequence[Any] = ()) -> Shape:
    """
    Derive the wire shape of a catalog type annotation.
    """
    if isinstance(annotation, Shape):
        return annotation

    if get_origin(annotation) is Annotated:
        inner, *extra = get_args(annotation)
        return shape_for(inner, tuple(extra) + tuple(metadata))

    if annotation is Any:
        return OPAQUE
    if annotation is None or annotation is _NONE_TYPE:
        return NULL

    origin = get_origin(annotation)
    if origin in _UNION_ORIGINS:
        args = get_args(annotation)
        alternatives = [a for a in args if a is not _NONE_TYPE]
        if len(alternatives) == 1:
            inner = shape_for(alternatives[0], metadata)
        else:
            inner = UnionShape(tuple(shape_for(a) for a in alternatives))
        if len(alternatives) < len(args):
            return NullableShape(inner)
        return inner
    if origin is Literal:
        values = get_args(annotation)
        return EnumShape(
            "Literal", tuple(v.value if isinstance(v, enum.Enum) else v for v in values)
        )
    if origin is list:
        args = get_args(annotation)
        return SequenceShape(shape_for(args[0]) if len(args) > 0 else OPAQUE)

    # typing.NewType
    supertype = getattr(annotation, "__supertype__", None)
    if supertype is not None:
        return shape_for(supertype, metadata)

    if isinstance(annotation, type):
        if issubclass(annotation, enum.Enum):
            return EnumShape(
                annotation.__name__,
                tuple(member.value for member in annotation),
                annotation,
            )
        if issubclass(annotation, BaseModel):
            return RecordShape(annotation)
        if issubclass(annotation, bool):
            return BOOLEAN
        if issubclass(annotation, int):
            minimum, maximum = _bounds(metadata)
            return PrimitiveShape(PrimitiveKind.INTEGER, minimum, maximum)
        if issubclass(annotation, float):
            return FLOAT
        if issubclass(annotation, str):
            return STRING
        if annotation is list:
            return SequenceShape(OPAQUE)

    raise ShapeDefinitionError(f"Cannot derive a wire shape from {annotation!r}")


def record_fields(model: Type[BaseModel]) -> Tuple[FieldShape, ...]:
    try:
        return _record_fields_cache[model]
    except KeyError:
        pass

    alias_generator = model.model_config.get("alias_generator")
    fields: List[FieldShape] = []
    for name, info in model.model_fields.items():
        optional = not info.is_required()
        shape = shape_for(info.annotation, info.metadata)
        if (
            isinstance(shape, NullableShape)
            and optional
            and not any(m is NULLABLE for m in info.metadata)
        ):
            # None only marks the absence of an optional field
            shape = shape.inner

        if info.alias is not None:
            wire_name = info.alias
        elif callable(alias_generator):
            wire_name = alias_generator(name)
        else:
            wire_name = name
        fields.append(FieldShape(name, wire_name, shape, optional))

    result = tuple(fields)
    _record_fields_cache[model] = result
    return result


def iter_shapes(shape: Shape) -> Iterator[Shape]:
    """
    Yield `shape` and every shape reachable from it, each record only once.
    """
    seen: Set[Shape] = set()
    stack = [shape]
    while stack:
        current = stack.pop()
        if current in seen:
            continue
        seen.add(current)
        yield current

        if isinstance(current, RecordShape):
            stack.extend(reversed([f.shape for f in current.fields]))
        elif isinstance(current, UnionShape):
            stack.extend(reversed(current.alternatives))
        elif isinstance(current, SequenceShape):
            stack.append(current.element)
        elif isinstance(current, NullableShape):
            stack.append(current.inner)


def _is_finite(shape: Shape, visiting: Set[RecordShape]) -> bool:
    if isinstance(shape, UnionShape):
        return any(_is_finite(a, visiting) for a in shape.alternatives)
    if not isinstance(shape, RecordShape):
        # null, the empty array and scalars all terminate a value
        return True
    if shape in visiting:
        return False

    visiting.add(shape)
    try:
        return all(
            _is_finite(f.shape, visiting) for f in shape.fields if not f.optional
        )
    finally:
        visiting.remove(shape)


def check_acyclic(shape: Shape) -> None:
    """
    Raise `ShapeDefinitionError` if some record reachable from `shape` can only be represented by an infinite value.
    """
    for s in iter_shapes(shape):
        if isinstance(s, RecordShape) and not _is_finite(s, set()):
            raise ShapeDefinitionError(
                f"Record {s.name} requires itself through a non-sequence field"
            )


def _compatible_primitives(a: PrimitiveKind, b: PrimitiveKind) -> bool:
    if a == b:
        return True
    return {a, b} == {PrimitiveKind.INTEGER, PrimitiveKind.FLOAT}


def _within_bounds(value: Any, shape: PrimitiveShape) -> bool:
    if shape.minimum is not None and value < shape.minimum:
        return False
    if shape.maximum is not None and value > shape.maximum:
        return False
    return True


def _scalar_overlap(
    a: Union[PrimitiveShape, EnumShape], b: Union[PrimitiveShape, EnumShape]
) -> bool:
    if isinstance(a, EnumShape) and isinstance(b, EnumShape):
        return len(set(a.values) & set(b.values)) > 0
    if isinstance(a, EnumShape):
        a, b = b, a
    if isinstance(b, EnumShape):
        assert isinstance(a, PrimitiveShape)
        if not _compatible_primitives(a.primitive, b.value_kind):
            return False
        if b.value_kind == PrimitiveKind.STRING:
            return True
        return any(_within_bounds(v, a) for v in b.values)
    return _compatible_primitives(a.primitive, b.primitive)


def _distinguishing_fields(
    a: RecordShape, b: RecordShape, seen: FrozenSet[Tuple[Shape, Shape]]
) -> Tuple[bool, bool]:
    """
    Returns (disjoint, exclusive) where `disjoint` means no wire value can match both records
    and `exclusive` means `a` requires a field `b` does not declare.
    """
    exclusive = False
    for f in a.fields:
        other = b.field(f.wire_name)
        if other is None:
            if not f.optional:
                exclusive = True
            continue
        if (not f.optional or not other.optional) and not _overlap(
            f.shape, other.shape, seen
        ):
            return True, exclusive
    return False, exclusive


def _overlap(a: Shape, b: Shape, seen: FrozenSet[Tuple[Shape, Shape]]) -> bool:
    if (a, b) in seen:
        return True
    seen = seen | {(a, b)}

    if isinstance(a, OpaqueShape) or isinstance(b, OpaqueShape):
        return True
    if isinstance(a, NullableShape) and isinstance(b, NullableShape):
        return True
    if isinstance(b, NullableShape):
        a, b = b, a
    if isinstance(a, NullableShape):
        return b == NULL or _overlap(a.inner, b, seen)
    if isinstance(b, UnionShape):
        a, b = b, a
    if isinstance(a, UnionShape):
        return any(_overlap(alt, b, seen) for alt in a.alternatives)
    if isinstance(a, SequenceShape) and isinstance(b, SequenceShape):
        # the empty array matches both
        return True
    if isinstance(a, RecordShape) and isinstance(b, RecordShape):
        if a == b:
            return True
        disjoint_ab, exclusive_ab = _distinguishing_fields(a, b, seen)
        disjoint_ba, exclusive_ba = _distinguishing_fields(b, a, seen)
        if disjoint_ab or disjoint_ba:
            return False
        return not (exclusive_ab and exclusive_ba)
    if isinstance(a, (PrimitiveShape, EnumShape)) and isinstance(
        b, (PrimitiveShape, EnumShape)
    ):
        return _scalar_overlap(a, b)
    return False


def may_overlap(a: Shape, b: Shape) -> bool:
    """
    Whether some well-formed wire value (one carrying only declared record fields) may match both shapes.
    """
    return _overlap(a, b, frozenset())


def find_ambiguous_unions(shape: Shape) -> List[UnionShape]:
    """
    Unions reachable from `shape` whose alternatives may overlap, see `may_overlap`.

    Records are open, undeclared fields are ignored when decoding. A value carrying the declared
    fields of two record alternatives at once (e.g. `{language, kind, value}` for hover contents)
    still matches both, an empty result only rules out values made of declared fields.
    Such values are resolved by the first-match tie-break of `decode`.
    """
    ambiguous = []
    for s in iter_shapes(shape):
        if not isinstance(s, UnionShape):
            continue
        alternatives = s.alternatives
        if any(
            may_overlap(alternatives[i], alternatives[j])
            for i in range(len(alternatives))
            for j in range(i + 1, len(alternatives))
        ):
            ambiguous.append(s)
    return ambiguous
