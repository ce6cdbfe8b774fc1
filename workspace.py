"""workspace.py — Per-request scratch directories and the background reaper that sweeps leaks."""

import shutil
import tempfile
import threading
import time
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path

from models import WorkspaceHandle

DEFAULT_TTL_S = 60 * 60           # directories older than an hour are leaks
DEFAULT_REAP_INTERVAL_S = 30 * 60
WORKSPACE_PREFIX = "issue-"


def default_root() -> Path:
    return Path(tempfile.gettempdir()) / "issuebind"


class WorkspaceManager:
    """
    Hands out one directory per assembly request under a shared root.

    Each request closes its own directory on exit via scoped(); the reaper
    thread is a second line of defence for processes that died mid-request.
    """

    def __init__(self, root: Path | None = None, ttl_s: float = DEFAULT_TTL_S):
        self.root = Path(root) if root else default_root()
        self.ttl_s = ttl_s
        self._stop = threading.Event()
        self._reaper: threading.Thread | None = None

    def open(self) -> WorkspaceHandle:
        self.root.mkdir(parents=True, exist_ok=True)
        ws_id = uuid.uuid4().hex
        path = self.root / f"{WORKSPACE_PREFIX}{ws_id}"
        path.mkdir()
        return WorkspaceHandle(id=ws_id, created_at=datetime.now(timezone.utc), root=path)

    def close(self, handle: WorkspaceHandle) -> None:
        """Remove the workspace tree. Safe to call more than once."""
        shutil.rmtree(handle.root, ignore_errors=True)

    @contextmanager
    def scoped(self):
        handle = self.open()
        try:
            yield handle
        finally:
            self.close(handle)

    def reap(self, max_age_s: float | None = None) -> list[Path]:
        """Delete workspace directories whose mtime is older than max_age_s. Returns what was removed."""
        max_age_s = self.ttl_s if max_age_s is None else max_age_s
        if not self.root.exists():
            return []
        cutoff = time.time() - max_age_s
        removed = []
        for entry in self.root.iterdir():
            if not entry.is_dir() or not entry.name.startswith(WORKSPACE_PREFIX):
                continue
            try:
                if entry.stat().st_mtime >= cutoff:
                    continue
            except FileNotFoundError:
                continue    # closed by its owner while we were looking
            shutil.rmtree(entry, ignore_errors=True)
            removed.append(entry)
        return removed

    def start_reaper(self, interval_s: float = DEFAULT_REAP_INTERVAL_S) -> None:
        if self._reaper and self._reaper.is_alive():
            return
        self._stop.clear()

        def _loop():
            while not self._stop.wait(interval_s):
                try:
                    removed = self.reap()
                except OSError as e:
                    print(f"  Workspace cleanup error: {e}")
                    continue
                for path in removed:
                    print(f"  Cleaned up stale workspace: {path}")

        self._reaper = threading.Thread(target=_loop, name="workspace-reaper", daemon=True)
        self._reaper.start()

    def stop_reaper(self, timeout_s: float = 5) -> None:
        self._stop.set()
        if self._reaper:
            self._reaper.join(timeout_s)
            self._reaper = None
