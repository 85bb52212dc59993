"""Language toolchain adapters — node (nvm/npm)."""

from dotsync.adapters.languages.node import NvmAdapter

__all__ = ["NvmAdapter"]
