"""Exclusive run lock for destination tables.

This module guards a destination table against two reconcile runs
writing to it at the same time.
"""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from types import TracebackType

from core.errors import RollcallStoreError


class RunLock:
    """Lock file held for the duration of one reconcile run."""

    def __init__(self, lock_path: Path) -> None:
        self._lock_path = lock_path
        self._held = False

    def acquire(self) -> None:
        """Create the lock file or fail if another run holds it.

        Raises:
            RollcallStoreError: If the lock file already exists.
        """
        try:
            descriptor = os.open(self._lock_path, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
        except FileExistsError as error:
            raise RollcallStoreError(
                f"Destination is locked by another run at {self._lock_path}. "
                "Wait for that run to finish, or delete the lock file if it was interrupted."
            ) from error
        with os.fdopen(descriptor, "w", encoding="utf-8") as lock_file:
            acquired_at = datetime.now(timezone.utc).isoformat()
            lock_file.write(f"pid={os.getpid()} acquired_at={acquired_at}\n")
        self._held = True

    def release(self) -> None:
        """Remove the lock file if this instance holds it."""
        if not self._held:
            return
        self._lock_path.unlink(missing_ok=True)
        self._held = False

    @property
    def held(self) -> bool:
        return self._held

    def __enter__(self) -> "RunLock":
        self.acquire()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.release()
