"""
Shell function adapter — call a function defined by a sourced script.

zinit (and nvm, see ``dotsync.adapters.languages.node``) are shell
functions, not executables. Each action starts a fresh shell, sources
the defining script, runs ``argv`` and then waits for any background
children the function detached, so output ordering is preserved.

Action params:
    source (str): Script to source before running argv.
    quiet_source (bool): Discard the script's own output (default True).
"""

from __future__ import annotations

import shutil
from pathlib import Path

from dotsync.adapters.base import Adapter, ExecutionContext
from dotsync.adapters.shell.command import run_process
from dotsync.core.models.action import Receipt

# $1 = script to source, remaining args = the command line
_SCRIPT = (
    'src="$1"; shift; '
    '{source_line} || exit 127; '
    '"$@"; rc=$?; wait; exit $rc'
)


class ShellFunctionAdapter(Adapter):
    """Run a shell function from a sourced script in ``shell``."""

    def __init__(self, shell: str = "zsh", adapter_name: str = "zsh-function"):
        self._shell = shell
        self._name = adapter_name

    @property
    def name(self) -> str:
        return self._name

    def is_available(self) -> bool:
        return shutil.which(self._shell) is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        ok, msg = super().validate(context)
        if not ok:
            return ok, msg
        source = context.action.params.get("source")
        if not source:
            return False, "Missing required param: 'source'"
        if not Path(source).is_file():
            return False, f"Script not found: {source}"
        return True, ""

    def build_script(self, context: ExecutionContext) -> str:
        """The ``-c`` program; subclasses prepend environment setup."""
        quiet = context.action.params.get("quiet_source", True)
        source_line = '. "$src" >/dev/null 2>&1' if quiet else '. "$src"'
        return _SCRIPT.format(source_line=source_line)

    def execute(self, context: ExecutionContext) -> Receipt:
        source = str(context.action.params["source"])
        argv = [
            self._shell,
            "-c",
            self.build_script(context),
            self._name,             # $0
            source,
            *context.action.argv,
        ]
        return run_process(self.name, context, argv)
