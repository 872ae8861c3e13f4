"""
State lift
==========

StateT[S, A] - state-passing computation над базовым F,
и StateTSync - Sync для StateT, выведенный из Sync базового F.
"""

from .monad import StateT
from .sync import StateTSync, state_sync

__all__ = (
    "StateT",
    "StateTSync",
    "state_sync",
)
