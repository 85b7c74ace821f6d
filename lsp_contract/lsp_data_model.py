from typing import Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from typing_extensions import Annotated

T = TypeVar("T")


def _to_camel(s: str) -> str:
    split = s.split("_")
    return split[0].lower() + "".join([w.capitalize() for w in split[1:]])


class LspModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=_to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class _NullableMarker:
    def __repr__(self) -> str:
        return "NULLABLE"


NULLABLE = _NullableMarker()
"""
Marks an optional field whose explicit `null` is meaningful and must be kept
distinct from the field being absent.
"""

Nullable = Annotated[Optional[T], NULLABLE]
