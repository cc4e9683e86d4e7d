"""curses-backed terminal device for root screens."""

from __future__ import annotations

import curses
import logging
from typing import Any

from zmonitor.buffer import Attr, ScreenBuffer

logger = logging.getLogger(__name__)


def _safe(win: curses.window, *args: Any) -> None:
    """addstr wrapper that swallows out-of-bounds errors."""
    try:
        win.addstr(*args)
    except curses.error:
        pass


class CursesTerminal:
    """Flushes screen buffers to a curses window.

    Colour pairs are allocated on first use of each attribute. Terminals
    with fewer than 16 colours render bright foregrounds as the base
    colour in bold.
    """

    def __init__(self, stdscr: curses.window) -> None:
        self.stdscr = stdscr
        self._pairs: dict[Attr, int] = {}
        self._colors = 0
        if curses.has_colors():
            curses.start_color()
            self._colors = curses.COLORS
        self.update_size()

    def update_size(self) -> tuple[int, int]:
        """Re-query the window size, e.g. after ``KEY_RESIZE``."""
        self._height, self._width = self.stdscr.getmaxyx()
        return self._width, self._height

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    def clear(self) -> None:
        """Force a full repaint on the next refresh."""
        self.stdscr.clear()

    def hide_cursor(self) -> None:
        try:
            curses.curs_set(0)
        except curses.error:
            pass

    def show_cursor(self) -> None:
        try:
            curses.curs_set(1)
        except curses.error:
            pass

    def curses_attr(self, attr: Attr) -> int:
        """Translate an attribute to a curses attribute value."""
        if not self._colors:
            return curses.A_NORMAL
        extra = curses.A_NORMAL
        fg, bg = attr.fg, attr.bg
        if self._colors < 16:
            if fg >= 8:
                fg -= 8
                extra = curses.A_BOLD
            bg %= 8
        pair = self._pairs.get(attr)
        if pair is None:
            pair = len(self._pairs) + 1
            if pair >= curses.COLOR_PAIRS:
                logger.warning("out of colour pairs, %s rendered plain", attr)
                pair = 0
            else:
                curses.init_pair(pair, fg, bg)
            self._pairs[attr] = pair
        return curses.color_pair(pair) | extra

    def draw(self, buffer: ScreenBuffer) -> None:
        """Write the buffer row by row as runs of equal attribute."""
        rows = min(buffer.height, self._height)
        cols = min(buffer.width, self._width)
        for y, row in enumerate(buffer.rows()):
            if y >= rows:
                break
            run_x = 0
            run: list[str] = []
            run_attr: Attr | None = None
            for x, (ch, attr) in enumerate(row[:cols]):
                if attr != run_attr and run:
                    _safe(self.stdscr, y, run_x, "".join(run), self.curses_attr(run_attr))
                    run_x, run = x, []
                run_attr = attr
                run.append(ch)
            if run and run_attr is not None:
                # Bottom-right cell raises after writing; _safe absorbs it
                _safe(self.stdscr, y, run_x, "".join(run), self.curses_attr(run_attr))
        self.stdscr.refresh()
