"""Data sources for the dashboard: job records and syslog text."""

from __future__ import annotations

import logging
import random
import shlex
import subprocess
from dataclasses import dataclass

import psutil

logger = logging.getLogger(__name__)

JOB_STATUSES = ("OUTPUT", "INPUT", "ACTIVE")
RETURN_CODES = ("0000", "0004", "0008", "0012")

# psutil status -> job status
_PROC_STATUS: dict[str, str] = {
    psutil.STATUS_RUNNING: "ACTIVE",
    psutil.STATUS_SLEEPING: "INPUT",
    psutil.STATUS_IDLE: "INPUT",
    psutil.STATUS_DISK_SLEEP: "INPUT",
}


@dataclass
class Job:
    """One row of the job table."""

    jobid: str
    jobname: str
    owner: str
    status: str
    type: str = "JOB"
    job_class: str = "A"
    retcode: str = "CC 0000"

    def columns(self) -> list[str]:
        return [
            self.jobid,
            self.jobname,
            self.owner,
            self.status,
            self.type,
            self.job_class,
            self.retcode,
        ]


# ── Random jobs ────────────────────────────────────────────────────────────


def generate_random_jobs(rng: random.Random | None = None) -> list[Job]:
    """Between 2 and 11 made-up batch jobs."""
    rng = rng or random.Random()
    jobs: list[Job] = []
    for _ in range(rng.randint(2, 11)):
        n = rng.randint(100, 998)
        jobs.append(
            Job(
                jobid=f"JOB00{n}",
                jobname=f"TSJOB{n}",
                owner="IBMUSER",
                status=rng.choice(JOB_STATUSES),
                retcode=f"CC {rng.choice(RETURN_CODES)}",
            )
        )
    return jobs


# ── Process table ──────────────────────────────────────────────────────────


def collect_process_jobs(limit: int = 20) -> list[Job]:
    """Present the local process table as job records, lowest PID first."""
    jobs: list[Job] = []
    for proc in psutil.process_iter(["pid", "name", "username", "status"]):
        try:
            info = proc.info
            pid: int = info["pid"]
            jobs.append(
                Job(
                    jobid=f"PID{pid}",
                    jobname=(info.get("name") or "?").upper(),
                    owner=(info.get("username") or "?").upper(),
                    status=_PROC_STATUS.get(info.get("status") or "", "OUTPUT"),
                    type="STC" if pid < 1000 else "JOB",
                )
            )
        except (psutil.NoSuchProcess, psutil.AccessDenied, KeyError):
            continue
        if len(jobs) >= limit:
            break
    return jobs


# ── Syslog ─────────────────────────────────────────────────────────────────


def fetch_syslog(command: str, lines: int = 200, timeout: float = 5.0) -> list[str]:
    """Run *command* and return its output lines.

    ``{lines}`` in the command is replaced by *lines*; other braces are
    left alone. Failures come back as a single explanatory line rather
    than an exception, so the pane always has something to show.
    """
    try:
        argv = shlex.split(command.replace("{lines}", str(lines)))
    except ValueError as e:
        logger.warning("cannot parse syslog command %r: %s", command, e)
        return [f"invalid command: {e}"]
    if not argv:
        logger.warning("no syslog command configured")
        return ["no log command configured"]

    try:
        result = subprocess.run(
            argv,
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout,
        )
    except FileNotFoundError:
        logger.warning("syslog command not found: %s", argv[0])
        return [f"command not found: {argv[0]}"]
    except subprocess.TimeoutExpired:
        logger.warning("syslog command timed out after %.1fs", timeout)
        return [f"timed out after {timeout:.1f}s: {command}"]
    except OSError as e:
        logger.warning("cannot run syslog command %s: %s", argv[0], e)
        return [f"cannot run {argv[0]}: {e.strerror or e}"]

    if result.returncode != 0:
        err = result.stderr.strip().splitlines()
        logger.warning("syslog command exited %d", result.returncode)
        reason = err[-1] if err else f"exit status {result.returncode}"
        return [f"{argv[0]} failed: {reason}"]
    return result.stdout.splitlines()[-lines:]
