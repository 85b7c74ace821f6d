from .enums import StrEnum
from .position import (
    from_utf16_character,
    position_within_range,
    to_utf16_character,
    utf16_length,
)
