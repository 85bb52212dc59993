"""
Shell command adapter — run an argv command and capture its result.

This is the most fundamental adapter: package managers, sudo and
paccache all go through it. No timeout is imposed; a hung package
manager hangs the run, exactly as it would in a terminal.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import time

from dotsync.adapters.base import Adapter, ExecutionContext
from dotsync.core.models.action import Receipt

logger = logging.getLogger(__name__)


def run_process(adapter: str, context: ExecutionContext, argv: list[str]) -> Receipt:
    """Spawn ``argv`` for ``context.action`` and wrap the outcome in a Receipt.

    With ``action.capture`` False, stdout/stderr go straight to the
    terminal so long upgrades show their own progress.
    """
    action = context.action
    env = {**os.environ, **context.env} if context.env else None
    cwd = str(context.cwd) if context.cwd else None

    logger.debug("Executing: %s (cwd=%s)", " ".join(argv), cwd or ".")
    start = time.monotonic()

    try:
        result = subprocess.run(
            argv,
            cwd=cwd,
            env=env,
            capture_output=action.capture,
            text=True,
        )
    except FileNotFoundError:
        return Receipt.failure(
            adapter=adapter,
            action_id=action.id,
            error=f"Command not found: {argv[0]}",
            return_code=127,
        )
    except OSError as e:
        return Receipt.failure(
            adapter=adapter,
            action_id=action.id,
            error=f"Command execution error: {e}",
        )

    elapsed_ms = int((time.monotonic() - start) * 1000)
    stdout = (result.stdout or "").strip()
    stderr = (result.stderr or "").strip()

    if result.returncode == 0:
        return Receipt.success(
            adapter=adapter,
            action_id=action.id,
            output=stdout,
            duration_ms=elapsed_ms,
            return_code=0,
            metadata={"command": " ".join(argv), "stderr": stderr},
        )

    logger.debug("%s exited %d: %s", argv[0], result.returncode, stderr)
    return Receipt.failure(
        adapter=adapter,
        action_id=action.id,
        error=stderr or f"Command exited with code {result.returncode}",
        output=stdout,
        duration_ms=elapsed_ms,
        return_code=result.returncode,
        metadata={"command": " ".join(argv)},
    )


class ShellCommandAdapter(Adapter):
    """Execute ``action.argv`` directly (no shell interpolation)."""

    @property
    def name(self) -> str:
        return "shell"

    def is_available(self) -> bool:
        return shutil.which("sh") is not None

    def execute(self, context: ExecutionContext) -> Receipt:
        return run_process(self.name, context, list(context.action.argv))
