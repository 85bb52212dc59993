"""dotsync — dotfiles maintenance tooling (update-all, merge-main, rebase-main)."""

__version__ = "0.1.0"
