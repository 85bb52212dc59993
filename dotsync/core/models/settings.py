"""
Settings model — host paths the commands operate on.

Defaults mirror a stock dotfiles setup (``~/dotfiles``, ``~/.nvm``,
zinit under ``$XDG_DATA_HOME``). A config.yml may override any field.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, Field, model_validator


def _home() -> Path:
    return Path(os.environ.get("HOME") or Path.home())


def _default_dotfiles_dir() -> Path:
    env = os.environ.get("DOTSYNC_DOTFILES_DIR")
    return Path(env).expanduser() if env else _home() / "dotfiles"


def _default_nvm_dir() -> Path:
    env = os.environ.get("NVM_DIR")
    return Path(env).expanduser() if env else _home() / ".nvm"


def _default_zinit_home() -> Path:
    data_home = os.environ.get("XDG_DATA_HOME")
    base = Path(data_home).expanduser() if data_home else _home() / ".local" / "share"
    return base / "zinit" / "zinit.git"


class Settings(BaseModel):
    """Resolved configuration for a dotsync run."""

    dotfiles_dir: Path = Field(default_factory=_default_dotfiles_dir)
    nvm_dir: Path = Field(default_factory=_default_nvm_dir)
    default_packages_file: Path | None = None
    zinit_home: Path = Field(default_factory=_default_zinit_home)
    shell_rc: Path = Field(default_factory=lambda: _home() / ".zshrc")
    pacman_cache_keep: int = Field(default=3, ge=0)

    @model_validator(mode="after")
    def _expand_paths(self) -> Settings:
        self.dotfiles_dir = self.dotfiles_dir.expanduser()
        self.nvm_dir = self.nvm_dir.expanduser()
        self.zinit_home = self.zinit_home.expanduser()
        self.shell_rc = self.shell_rc.expanduser()
        if self.default_packages_file is not None:
            self.default_packages_file = self.default_packages_file.expanduser()
        return self

    @property
    def nvm_script(self) -> Path:
        return self.nvm_dir / "nvm.sh"

    @property
    def zinit_script(self) -> Path:
        return self.zinit_home / "zinit.zsh"

    @property
    def default_packages_path(self) -> Path:
        """The nvm default-packages list (one package per line)."""
        return self.default_packages_file or self.nvm_dir / "default-packages"
