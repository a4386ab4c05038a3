"""Keep the local EIPs/ERCs checkouts up to date with git."""

from __future__ import annotations

import logging
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from eipbrowser.errors import StorageError, SyncError
from eipbrowser.storage import LAST_UPDATE_KEY, Storage, load_last_update

logger = logging.getLogger(__name__)

REPOSITORIES: tuple[str, ...] = ("EIPs", "ERCs")
REMOTE_URL = "https://github.com/ethereum/{name}.git"
SYNC_INTERVAL_MS = 86_400_000  # one day
GIT_TIMEOUT_S = 300


@dataclass
class SyncResult:
    repository: str
    action: str  # "pull" or "clone"
    ok: bool
    message: str = ""


def now_ms() -> int:
    return int(time.time() * 1000)


def needs_sync(last_update_ms: int, current_ms: int | None = None) -> bool:
    """True when the last sync is older than SYNC_INTERVAL_MS."""
    current = now_ms() if current_ms is None else current_ms
    return current - last_update_ms > SYNC_INTERVAL_MS


def _git(args: list[str], run: Callable = subprocess.run, cwd: Path | None = None) -> str:
    cmd = ["git", *args]
    logger.debug("Running %s", " ".join(cmd))
    try:
        result = run(cmd, capture_output=True, text=True, cwd=cwd, timeout=GIT_TIMEOUT_S)
    except subprocess.TimeoutExpired as exc:
        raise SyncError(f"`{' '.join(cmd)}` timed out after {GIT_TIMEOUT_S}s") from exc
    except OSError as exc:
        raise SyncError(f"could not run git: {exc}") from exc

    if result.returncode != 0:
        detail = (result.stderr or result.stdout or "").strip().splitlines()
        raise SyncError(detail[-1] if detail else f"git exited with {result.returncode}")
    return result.stdout or ""


def sync_repository(base_path: str | Path, name: str, run: Callable = subprocess.run) -> SyncResult:
    """Pull an existing checkout or clone a fresh one. Never raises."""
    base = Path(base_path).expanduser()
    dest = base / name

    if (dest / ".git").exists():
        action = "pull"
        args = ["-C", str(dest), "pull", "--ff-only"]
    else:
        action = "clone"
        args = ["clone", "--depth", "1", REMOTE_URL.format(name=name), str(dest)]

    try:
        base.mkdir(parents=True, exist_ok=True)
        output = _git(args, run=run)
    except (SyncError, OSError) as exc:
        logger.warning("Sync of %s failed: %s", name, exc)
        return SyncResult(name, action, ok=False, message=str(exc))

    lines = output.strip().splitlines()
    return SyncResult(name, action, ok=True, message=lines[-1] if lines else "")


def sync_all(
    base_path: str | Path,
    repositories: tuple[str, ...] = REPOSITORIES,
    run: Callable = subprocess.run,
) -> list[SyncResult]:
    return [sync_repository(base_path, name, run=run) for name in repositories]


def sync_if_stale(
    storage: Storage,
    base_path: str | Path,
    current_ms: int | None = None,
    force: bool = False,
    run: Callable = subprocess.run,
) -> list[SyncResult]:
    """Sync every repository when the last sync is a day old (or force).

    The timestamp is recorded after the attempt whether or not it succeeded,
    so a failing network is retried on the next day rather than every run.
    Returns an empty list when nothing was due.
    """
    current = now_ms() if current_ms is None else current_ms
    if not force and not needs_sync(load_last_update(storage), current):
        return []

    results = sync_all(base_path, run=run)
    try:
        storage.set(LAST_UPDATE_KEY, current)
    except StorageError as exc:
        logger.warning("Last update time not saved: %s", exc)
    return results
