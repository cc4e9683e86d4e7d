"""Character-grid primitive backing every zmonitor screen.

A ``ScreenBuffer`` is a fixed-size grid of ``(char, Attr)`` cells with
0-based (x, y) addressing from the top-left corner. Writes that fall
outside the grid are dropped, never wrapped.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

# ── Attributes ─────────────────────────────────────────────────────────────

ANSI_COLOR_INDEX: dict[str, int] = {
    "black": 0,
    "red": 1,
    "green": 2,
    "yellow": 3,
    "blue": 4,
    "magenta": 5,
    "violet": 5,
    "cyan": 6,
    "white": 7,
    "grey": 8,
    "gray": 8,
    "brightBlack": 8,
    "brightRed": 9,
    "brightGreen": 10,
    "brightYellow": 11,
    "brightBlue": 12,
    "brightMagenta": 13,
    "brightViolet": 13,
    "brightCyan": 14,
    "brightWhite": 15,
}


@dataclass(frozen=True)
class Attr:
    """Opaque display attribute: ANSI foreground/background indices."""

    fg: int = 7
    bg: int = 0


# Both foreground and background black: renders as solid blank
BLACK = Attr(fg=0, bg=0)
WHITE = Attr(fg=ANSI_COLOR_INDEX["white"])
GREEN = Attr(fg=ANSI_COLOR_INDEX["green"])
BRIGHT_YELLOW = Attr(fg=ANSI_COLOR_INDEX["brightYellow"])

BLANK = " "


def attr_from_name(name: str, bg: str = "black") -> Attr:
    """Build an attribute from colour names, e.g. ``attr_from_name("green")``."""
    return Attr(fg=ANSI_COLOR_INDEX[name], bg=ANSI_COLOR_INDEX[bg])


# ── Grid ───────────────────────────────────────────────────────────────────


class ScreenBuffer:
    """Fixed-size grid of cells."""

    def __init__(self, width: int, height: int) -> None:
        if width < 1 or height < 1:
            raise ValueError(f"invalid buffer size {width}x{height}")
        self.width = width
        self.height = height
        self._chars: list[list[str]] = [[BLANK] * width for _ in range(height)]
        self._attrs: list[list[Attr]] = [[BLACK] * width for _ in range(height)]

    def __repr__(self) -> str:
        return f"ScreenBuffer({self.width}x{self.height})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ScreenBuffer):
            return NotImplemented
        return (
            self.width == other.width
            and self.height == other.height
            and self._chars == other._chars
            and self._attrs == other._attrs
        )

    def _inside(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def fill(self, char: str = BLANK, attr: Attr = BLACK) -> None:
        for y in range(self.height):
            self._chars[y] = [char] * self.width
            self._attrs[y] = [attr] * self.width

    def put(
        self,
        x: int,
        y: int,
        text: str,
        attr: Attr,
        dx: int = 1,
        dy: int = 0,
    ) -> tuple[int, int]:
        """Write *text* from (x, y), moving by (dx, dy) after each char.

        Returns the position following the last written char.
        """
        for ch in text:
            if self._inside(x, y):
                self._chars[y][x] = ch
                self._attrs[y][x] = attr
            x += dx
            y += dy
        return x, y

    def blit(self, dest: ScreenBuffer, x: int = 0, y: int = 0) -> None:
        """Overwrite the region of *dest* at offset (x, y) with this grid."""
        for row in range(self.height):
            dy = y + row
            if not 0 <= dy < dest.height:
                continue
            for col in range(self.width):
                dx = x + col
                if 0 <= dx < dest.width:
                    dest._chars[dy][dx] = self._chars[row][col]
                    dest._attrs[dy][dx] = self._attrs[row][col]

    # ── Read-back ──────────────────────────────────────────────────────────

    def char_at(self, x: int, y: int) -> str:
        return self._chars[y][x]

    def attr_at(self, x: int, y: int) -> Attr:
        return self._attrs[y][x]

    def text_at(self, x: int, y: int, length: int) -> str:
        return "".join(self._chars[y][x : x + length])

    def row_text(self, y: int) -> str:
        return "".join(self._chars[y])

    def rows(self) -> Iterator[list[tuple[str, Attr]]]:
        """Yield each row as a list of ``(char, attr)`` cells."""
        for chars, attrs in zip(self._chars, self._attrs):
            yield list(zip(chars, attrs))
