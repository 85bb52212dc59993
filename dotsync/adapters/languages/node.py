"""
Node.js adapter — npm and ncu commands under an nvm-selected runtime.

nvm only exists inside a shell that sourced ``nvm.sh``, and
``nvm use`` only affects that shell. Every action therefore runs in a
fresh bash that sources nvm, switches to the requested runtime and then
runs the command, so two actions never share hidden state.

Action params:
    source (str): Path to nvm.sh.
    version (str): Runtime to activate first ('18.17.0', 'system').
        Omitted = whatever nvm.sh activates by default.
"""

from __future__ import annotations

from dotsync.adapters.base import ExecutionContext
from dotsync.adapters.shell.functions import ShellFunctionAdapter
from dotsync.core.models.action import Receipt

# Exit code when `nvm use` itself fails
NVM_USE_FAILED = 3

_SCRIPT = (
    'src="$1"; shift; '
    '. "$src" >/dev/null 2>&1 || exit 127; '
    'if [ -n "$DOTSYNC_NODE_VERSION" ]; then '
    f'nvm use --silent "$DOTSYNC_NODE_VERSION" >/dev/null 2>&1 || exit {NVM_USE_FAILED}; '
    'fi; '
    '"$@"; rc=$?; wait; exit $rc'
)


class NvmAdapter(ShellFunctionAdapter):
    """Run commands inside an nvm-managed Node runtime."""

    def __init__(self) -> None:
        super().__init__(shell="bash", adapter_name="nvm")

    def build_script(self, context: ExecutionContext) -> str:
        return _SCRIPT

    def execute(self, context: ExecutionContext) -> Receipt:
        version = context.action.params.get("version") or ""
        context = context.model_copy(
            update={"env": {**context.env, "DOTSYNC_NODE_VERSION": str(version)}},
        )
        receipt = super().execute(context)
        if receipt.return_code == NVM_USE_FAILED:
            receipt.error = f"nvm use {version} failed"
        return receipt
