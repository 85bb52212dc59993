"""Package-manager stages, in run order."""

from dotsync.core.services.stages.apt import AptStage
from dotsync.core.services.stages.base import (
    NOT_REQUESTED,
    SHORT_FLAGS,
    Stage,
    StageContext,
    StageSelection,
)
from dotsync.core.services.stages.homebrew import HomebrewStage
from dotsync.core.services.stages.npm import NpmStage
from dotsync.core.services.stages.pacman import PacmanStage
from dotsync.core.services.stages.yay import YayStage
from dotsync.core.services.stages.zinit import ZinitStage


def default_stages() -> list[Stage]:
    """Fresh stage instances in execution order."""
    return [ZinitStage(), HomebrewStage(), AptStage(), PacmanStage(), YayStage(), NpmStage()]


__all__ = [
    "NOT_REQUESTED",
    "SHORT_FLAGS",
    "AptStage",
    "HomebrewStage",
    "NpmStage",
    "PacmanStage",
    "Stage",
    "StageContext",
    "StageSelection",
    "YayStage",
    "ZinitStage",
    "default_stages",
]
