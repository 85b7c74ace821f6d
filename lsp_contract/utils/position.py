from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..common_structures import Position, Range


def utf16_length(text: str) -> int:
    """
    Length of `text` in UTF-16 code units, the unit of `Position.character`.
    """
    return len(text.encode("utf-16-le")) // 2


def to_utf16_character(line: str, index: int) -> int:
    """
    Convert a code point index into `line` to a UTF-16 character offset.
    """
    if index < 0 or index > len(line):
        raise ValueError(f"Index {index} out of bounds for line of length {len(line)}")
    return utf16_length(line[:index])


def from_utf16_character(line: str, character: int) -> int:
    """
    Convert a UTF-16 character offset into a code point index into `line`.
    Offsets pointing into the middle of a surrogate pair are rejected.
    """
    if character < 0:
        raise ValueError(f"Negative character offset {character}")

    units = 0
    for index, char in enumerate(line):
        if units == character:
            return index
        units += 2 if ord(char) > 0xFFFF else 1
        if units > character:
            raise ValueError(
                f"Character offset {character} splits a surrogate pair in line"
            )
    if units == character:
        return len(line)
    raise ValueError(
        f"Character offset {character} out of bounds for line of {units} UTF-16 code units"
    )


def position_within_range(pos: Position, range: Range) -> bool:
    if pos.line < range.start.line:
        return False
    if pos.line == range.start.line and pos.character < range.start.character:
        return False
    if pos.line > range.end.line:
        return False
    if pos.line == range.end.line and pos.character > range.end.character:
        return False
    return True
