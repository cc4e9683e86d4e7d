"""Interactive terminal dashboard: zmonitor's job table and syslog viewer.

Renders a full-screen table of job records (or the tail of the system
log) through the zmonitor screen engine, refreshing on a timer.

Keys:
    q, Ctrl-C   quit
    Ctrl-R      redraw and re-query the terminal size
    l, Tab      switch between the job table and the syslog pane

Usage:
    uv run zmonitor
    uv run zmonitor --interval 5 --view log --config path/to/config.toml
"""

from __future__ import annotations

import argparse
import curses
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from zmonitor.buffer import BRIGHT_YELLOW, GREEN, WHITE, Attr, attr_from_name
from zmonitor.config import SOURCES, VIEWS, dump_default_config, load_config
from zmonitor.jobs import Job, collect_process_jobs, fetch_syslog, generate_random_jobs
from zmonitor.screen import Screen
from zmonitor.terminal import CursesTerminal

logger = logging.getLogger(__name__)

# ── Constants ──────────────────────────────────────────────────────────────

TITLE = "zMonitor"
LOG_TITLE = "syslog"
HEADER = [" JOBID", " JOBNAME", " OWNER", " STATUS", " TYPE", " CLASS", " RETCODE"]
STATUS_COL = 4
BANNER_HEIGHT = 3
UNPRINTABLE = "?"

KEY_CTRL_C = 3
KEY_TAB = 9
KEY_CTRL_R = 18
QUIT_KEYS = (ord("q"), ord("Q"), KEY_CTRL_C)
TOGGLE_KEYS = (ord("l"), ord("L"), KEY_TAB)

# Key handler results
CONTINUE = "continue"
REFETCH = "refetch"
QUIT = "quit"


# ── Render context ─────────────────────────────────────────────────────────


@dataclass
class RenderContext:
    """Everything a frame needs besides the screen itself."""

    view: str = "jobs"
    jobs: list[Job] = field(default_factory=lambda: list[Job]())
    log_lines: list[str] = field(default_factory=lambda: list[str]())
    border: Attr = GREEN
    header: Attr = GREEN
    text: Attr = WHITE
    active: Attr = BRIGHT_YELLOW
    message: Attr = BRIGHT_YELLOW

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> RenderContext:
        colors: dict[str, str] = config.get("colors", {})
        ctx = cls(view=config.get("view", "jobs"))
        for name in ("border", "header", "text", "active", "message"):
            if name in colors:
                try:
                    setattr(ctx, name, attr_from_name(colors[name]))
                except KeyError:
                    logger.warning("unknown colour %r for %s", colors[name], name)
        return ctx

    def toggle_view(self) -> None:
        self.view = "log" if self.view == "jobs" else "jobs"


# ── Frames ─────────────────────────────────────────────────────────────────


def draw_message(screen: Screen, message: str, attr: Attr) -> None:
    """Composite a bordered one-line banner over the bottom of *screen*."""
    if screen.height < BANNER_HEIGHT:
        return
    with Screen(screen, screen.width, BANNER_HEIGHT) as banner:
        banner.draw_border(border_chars="-:")
        banner.put_in(message, attr)
        banner.draw(x=0, y=screen.height - BANNER_HEIGHT)


def fill_screen_with_jobs(
    screen: Screen,
    jobs: list[Job],
    ctx: RenderContext,
    message: str | None = None,
) -> None:
    screen.clear()

    screen.set_color(ctx.border)
    screen.draw_table(len(HEADER), has_border=True, has_header=True)
    screen.draw_border(TITLE)

    screen.set_color(ctx.header)
    screen.put_in_header(1, HEADER)

    screen.set_color(ctx.text)
    for row, job in enumerate(jobs, start=1):
        for col, value in enumerate(job.columns(), start=1):
            attr = ctx.active if col == STATUS_COL and value == "ACTIVE" else None
            screen.put_in_cell(col, row, value, attr)
    ctx.jobs = jobs

    if message:
        draw_message(screen, message, ctx.message)


def _printable(line: str) -> str:
    """One grid cell per char: tabs expanded, control chars shown as ``?``."""
    return "".join(
        ch if ch.isprintable() else UNPRINTABLE for ch in line.expandtabs()
    )


def fill_screen_with_log(
    screen: Screen,
    lines: list[str],
    ctx: RenderContext,
    message: str | None = None,
) -> None:
    """Bordered pane with as much of the tail of *lines* as fits."""
    screen.clear()

    screen.set_color(ctx.border)
    screen.draw_border(LOG_TITLE)

    rows = max(0, screen.height - 2)
    width = max(0, screen.width - 2)
    visible = lines[-rows:] if rows else []
    for i, line in enumerate(visible):
        screen.put(_printable(line)[:width], x=1, y=1 + i, attr=ctx.text)
    ctx.log_lines = lines

    if message:
        draw_message(screen, message, ctx.message)


def render(screen: Screen, ctx: RenderContext, message: str | None = None) -> None:
    """Redraw the current view from the data already held in *ctx*."""
    if ctx.view == "log":
        fill_screen_with_log(screen, ctx.log_lines, ctx, message)
    else:
        fill_screen_with_jobs(screen, ctx.jobs, ctx, message)


def fetch_and_render(screen: Screen, ctx: RenderContext, config: dict[str, Any]) -> None:
    """Pull fresh data for the current view and redraw."""
    if ctx.view == "log":
        log_cfg: dict[str, Any] = config.get("log", {})
        lines = fetch_syslog(
            str(log_cfg.get("command", "")),
            int(log_cfg.get("lines", 200)),
            float(log_cfg.get("timeout", 5.0)),
        )
        fill_screen_with_log(screen, lines, ctx)
        return

    if config.get("source") == "processes":
        jobs = collect_process_jobs(int(config.get("max_jobs", 20)))
    else:
        jobs = generate_random_jobs()
    fill_screen_with_jobs(screen, jobs, ctx)


# ── Input ──────────────────────────────────────────────────────────────────


def handle_key(
    key: int,
    screen: Screen,
    terminal: CursesTerminal,
    ctx: RenderContext,
) -> str:
    """React to one key press. Returns CONTINUE, REFETCH or QUIT."""
    if key in QUIT_KEYS:
        render(screen, ctx, "CTRL-C received...")
        screen.draw()
        return QUIT

    if key == KEY_CTRL_R:
        render(screen, ctx, "CTRL-R received... asking terminal some information...")
        width, height = terminal.update_size()
        logger.info("terminal reports %dx%d", width, height)
        screen.draw()
        return CONTINUE

    if key in TOGGLE_KEYS:
        ctx.toggle_view()
        logger.info("switched to %s view", ctx.view)
        return REFETCH

    if key == curses.KEY_RESIZE:
        width, height = terminal.update_size()
        logger.info("resize to %dx%d", width, height)
        terminal.clear()
        screen.resize(width, height)
        render(screen, ctx, f"resize with new w/h: {width}/{height}")
        screen.draw()
        return CONTINUE

    return CONTINUE


# ── Main loop ──────────────────────────────────────────────────────────────


def _dashboard_loop(
    stdscr: curses.window,
    config: dict[str, Any],
    ctx: RenderContext,
) -> None:
    curses.raw()
    terminal = CursesTerminal(stdscr)
    terminal.hide_cursor()

    interval = float(config.get("interval", 2.0))
    screen = Screen(terminal, terminal.width, terminal.height)

    fetch_and_render(screen, ctx, config)
    screen.draw()
    next_refresh = time.monotonic() + interval

    while True:
        remaining = next_refresh - time.monotonic()
        stdscr.timeout(max(0, int(remaining * 1000)))
        key = stdscr.getch()

        action = CONTINUE
        if key != -1:
            action = handle_key(key, screen, terminal, ctx)
            if action == QUIT:
                time.sleep(float(config.get("shutdown_delay", 0.5)))
                return

        if action == REFETCH or time.monotonic() >= next_refresh:
            fetch_and_render(screen, ctx, config)
            screen.draw()
            next_refresh = time.monotonic() + interval


# ── CLI entry point ────────────────────────────────────────────────────────


def _setup_logging(log_file: Path | None, verbose: bool) -> None:
    # curses owns the screen: records only ever go to a file
    if log_file is None:
        logging.getLogger("zmonitor").addHandler(logging.NullHandler())
        return
    logging.basicConfig(
        filename=log_file,
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Live terminal dashboard of job records or the system log.",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Seconds between refreshes (default: 2.0)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        metavar="PATH",
        help="Path to TOML config file",
    )
    parser.add_argument("--view", choices=VIEWS, default=None, help="Initial view")
    parser.add_argument(
        "--source",
        choices=SOURCES,
        default=None,
        help="Where job records come from (default: random)",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        metavar="PATH",
        help="Write diagnostics to this file",
    )
    parser.add_argument("--verbose", action="store_true", help="Debug-level logging")
    parser.add_argument(
        "--dump-config",
        action="store_true",
        help="Print the default configuration as TOML and exit",
    )
    args = parser.parse_args()

    if args.dump_config:
        print(dump_default_config(), end="")
        return

    _setup_logging(args.log_file, args.verbose)
    config = load_config(args.config)
    for key in ("interval", "view", "source"):
        value = getattr(args, key)
        if value is not None:
            config[key] = value

    ctx = RenderContext.from_config(config)
    logger.info(
        "starting: view=%s source=%s interval=%.1fs",
        ctx.view,
        config.get("source"),
        float(config.get("interval", 2.0)),
    )
    try:
        curses.wrapper(_dashboard_loop, config, ctx)
    except KeyboardInterrupt:
        pass
    logger.info("stopped")


if __name__ == "__main__":
    main()
