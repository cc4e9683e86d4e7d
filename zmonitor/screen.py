"""Screen compositing and layout engine.

A ``Screen`` owns a character grid plus its border/table layout and a
cursor state. Root screens flush to a terminal; child screens composite
onto their parent's grid at an offset::

    root = Screen(terminal, terminal.width, terminal.height)
    root.draw_table(7, has_border=True, has_header=True)
    root.put_in_header(1, ["JOBID", "JOBNAME"])
    root.put_in_cell(1, 1, "JOB00123")
    with Screen(root, root.width, 3) as banner:
        banner.draw_border(border_chars="-:")
        banner.put_in("hello")
        banner.draw(x=0, y=root.height - 3)
    root.draw()

Out-of-range layout and write calls are silent no-ops so a frame always
renders, even on a terminal that is too small for it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol, Sequence

from zmonitor.buffer import BLACK, BLANK, WHITE, Attr, ScreenBuffer

logger = logging.getLogger(__name__)

H_LINE = "="
V_LINE = "|"


class Terminal(Protocol):
    """Device a root screen flushes to."""

    @property
    def width(self) -> int: ...

    @property
    def height(self) -> int: ...

    def draw(self, buffer: ScreenBuffer) -> None: ...


@dataclass
class Cursor:
    """Write position, attribute and per-char step vector."""

    x: int = 0
    y: int = 0
    attr: Attr = WHITE
    dx: int = 1
    dy: int = 0


class Screen:
    """Character grid with table layout and a cursor, drawn to a parent or terminal."""

    def __init__(self, dest: Screen | Terminal, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self._dest: Screen | Terminal | None = dest
        self._buffer: ScreenBuffer | None = ScreenBuffer(width, height)
        self._buffer.fill(BLANK, BLACK)

        self.cursor = Cursor()
        # Single slot: a nested save overwrites the previous snapshot
        self.saved_cursor = Cursor()

        self._reset_layout()

    def __enter__(self) -> Screen:
        return self

    def __exit__(self, *exc: object) -> None:
        self.release()

    def __repr__(self) -> str:
        kind = "child" if isinstance(self._dest, Screen) else "root"
        return f"<Screen {kind} {self.width}x{self.height}>"

    @property
    def buffer(self) -> ScreenBuffer:
        if self._buffer is None:
            raise RuntimeError("screen has been released")
        return self._buffer

    @property
    def has_border(self) -> bool:
        return self._has_border

    @property
    def has_header(self) -> bool:
        return self._has_header

    @property
    def num_cols(self) -> int:
        return self._num_cols

    @property
    def col_width(self) -> int:
        return self._col_width

    def _reset_layout(self) -> None:
        self._has_border = False
        self._has_header = False
        self._num_cols = 1
        self._col_width = self.width

    def _compute_col_width(self) -> None:
        border_cells = 2 if self._has_border else 0
        self._col_width = (self.width - self._num_cols - border_cells) // self._num_cols

    # ── Lifecycle ──────────────────────────────────────────────────────────

    def resize(self, width: int, height: int) -> None:
        """Reallocate the grid at a new size. Content is not migrated."""
        if width == self.width and height == self.height:
            return
        buffer = ScreenBuffer(width, height)
        buffer.fill(BLANK, BLACK)
        logger.debug("resize %dx%d -> %dx%d", self.width, self.height, width, height)
        self.width = width
        self.height = height
        self._buffer = buffer
        self.cursor = Cursor()
        self.saved_cursor = Cursor()
        self._reset_layout()

    def clear(self) -> None:
        self.buffer.fill(BLANK, BLACK)
        self._reset_layout()

    def release(self) -> None:
        """Drop the grid and the destination reference."""
        self._buffer = None
        self._dest = None

    # ── Lines, borders, tables ─────────────────────────────────────────────

    def draw_horizontal_line(
        self,
        row: int,
        title: str | None = None,
        line_char: str | None = None,
    ) -> None:
        if row < 0 or row >= self.height:
            return
        ch = line_char[0] if line_char else H_LINE

        line = ch * self.width
        if title:
            label = f"[ {title} ]"
            title_pos = self.width // 2 - len(label) // 2 - 2
            line = ch * title_pos + label
            line += ch * (self.width - len(line))
        self.put(line, x=0, y=row)

    def draw_vertical_line(self, col: int, line_char: str | None = None) -> None:
        if col < 0 or col >= self.width:
            return
        ch = line_char[0] if line_char else V_LINE
        self.put(ch * self.height, x=col, y=0, dx=0, dy=1)

    def draw_border(
        self,
        title: str | None = None,
        border_chars: str | None = None,
    ) -> None:
        """Frame the screen. *border_chars* is ``"<horizontal><vertical>"``."""
        h_char = v_char = None
        if border_chars:
            h_char = border_chars[0]
            v_char = border_chars[1:2] or None

        self.draw_vertical_line(0, v_char)
        self.draw_vertical_line(self.width - 1, v_char)
        self.draw_horizontal_line(0, title, h_char)
        self.draw_horizontal_line(self.height - 1, None, h_char)

        self._has_border = True
        self._compute_col_width()

    def draw_table(
        self,
        num_cols: int,
        has_border: bool = True,
        has_header: bool = False,
    ) -> None:
        self._num_cols = num_cols
        self._has_border = has_border
        self._has_header = has_header
        self._compute_col_width()

        offset = 1 if has_border else 0
        for i in range(1, num_cols):
            self.draw_vertical_line(offset + i * (self._col_width + 1) - 1)

        if has_border:
            self.draw_vertical_line(0)
            self.draw_vertical_line(self.width - 1)
            self.draw_horizontal_line(0)
            self.draw_horizontal_line(self.height - 1)
            if has_header:
                self.draw_horizontal_line(2)
        elif has_header:
            self.draw_horizontal_line(1)

    def get_table_cols_num(self) -> int:
        return self._num_cols

    # ── Content ────────────────────────────────────────────────────────────

    def _cell_x(self, col: int) -> int:
        return (col - 1) * (self._col_width + 1) + (1 if self._has_border else 0)

    def put_in_cell(
        self, col: int, row: int, text: str, attr: Attr | None = None
    ) -> None:
        """Write *text* into table cell (col, row), both 1-indexed."""
        if col < 1 or col > self._num_cols:
            return
        if row < 1 or row >= self.height:
            return
        # Last two rows are reserved below a table with a header
        if self._has_header and row >= self.height - 2:
            return

        cell_y = row - 1
        if self._has_border:
            cell_y += 1
        if self._has_header:
            cell_y += 2

        self.put(
            text[: self._col_width],
            x=self._cell_x(col),
            y=cell_y,
            attr=attr or self.cursor.attr,
        )

    def put_in_header(
        self,
        col: int,
        text: str | Sequence[str],
        attr: Attr | None = None,
    ) -> None:
        """Write a header label, or successive labels starting at *col*."""
        if not self._has_header or col > self._num_cols:
            return

        cell_x = self._cell_x(col)
        cell_y = 1 if self._has_border else 0
        attr = attr or self.cursor.attr

        if isinstance(text, str):
            self.put(text[: self._col_width], x=cell_x, y=cell_y, attr=attr)
            return
        for label in text:
            self.put(label[: self._col_width], x=cell_x, y=cell_y, attr=attr)
            cell_x += self._col_width + 1
            if cell_x >= self.width:
                break

    def put_in(self, text: str, attr: Attr | None = None) -> None:
        """Write at the content origin of a single-region screen."""
        origin = 1 if self._has_border else 0
        self.put(
            text[: self._col_width],
            x=origin,
            y=origin,
            attr=attr or self.cursor.attr,
        )

    def put(
        self,
        text: str,
        x: int | None = None,
        y: int | None = None,
        attr: Attr | None = None,
        dx: int | None = None,
        dy: int | None = None,
    ) -> None:
        """Write at the cursor.

        Without overrides the cursor advances past the written text. Any
        override applies to this call only; the cursor is restored after.
        """
        if x is None and y is None and attr is None and dx is None and dy is None:
            c = self.cursor
            c.x, c.y = self.buffer.put(c.x, c.y, text, c.attr, c.dx, c.dy)
            return

        self.save_cursor()
        self.set_cursor(x=x, y=y, attr=attr, dx=dx, dy=dy)
        c = self.cursor
        self.buffer.put(c.x, c.y, text, c.attr, c.dx, c.dy)
        self.restore_cursor()

    # ── Cursor state ───────────────────────────────────────────────────────

    def set_cursor(
        self,
        x: int | None = None,
        y: int | None = None,
        attr: Attr | None = None,
        dx: int | None = None,
        dy: int | None = None,
    ) -> None:
        c = self.cursor
        if x is not None:
            c.x = x
        if y is not None:
            c.y = y
        if attr is not None:
            c.attr = attr
        if dx is not None:
            c.dx = dx
        if dy is not None:
            c.dy = dy

    def set_color(self, attr: Attr) -> None:
        self.set_cursor(attr=attr)

    def save_cursor(self, attr_only: bool = False) -> None:
        src, dst = self.cursor, self.saved_cursor
        if not attr_only:
            dst.x, dst.y, dst.dx, dst.dy = src.x, src.y, src.dx, src.dy
        dst.attr = src.attr

    def restore_cursor(self, attr_only: bool = False) -> None:
        src, dst = self.saved_cursor, self.cursor
        if not attr_only:
            dst.x, dst.y, dst.dx, dst.dy = src.x, src.y, src.dx, src.dy
        dst.attr = src.attr

    # ── Compositing ────────────────────────────────────────────────────────

    def draw(self, x: int = 0, y: int = 0) -> None:
        """Composite onto the parent at (x, y), or flush a root to its terminal."""
        if self._dest is None:
            raise RuntimeError("screen has been released")
        if isinstance(self._dest, Screen):
            # Parent grid is looked up now: it may have been resized since
            self.buffer.blit(self._dest.buffer, x, y)
        else:
            self._dest.draw(self.buffer)
