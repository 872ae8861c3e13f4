"""
Effect suspension for synchronous computations.

Capabilities for deferring side effects inside a computation type, with
two realizations:
- Lazy: lazily evaluated values (Now / Later / Always / Defer)
- StateT: state-passing computations over any base with the capability

Architecture:
- MonadError: pure / flat_map / raise_error / handle_error_with / tail_rec_m
- Sync: MonadError + suspend / delay
- Capabilities are passed explicitly (lazy_sync, state_sync(lazy_sync, int))
"""

# Core types
from ._types import Recovery, StateFn, Thunk

# Capabilities
from .capability import MonadError, Sync

# Loop steps
from .step import Continue, Done, Step

# Configuration
from .policy import EvalPolicy

# Lazy values
from . import lazy
from .lazy import Always, Defer, Later, Lazy, LazySync, Now, lazy_sync

# State lift
from . import state
from .state import StateT, StateTSync, state_sync

# Laws
from .laws import IsEq, SyncLaws

# Errors
from ._errors import ErrorValueError, InvalidStepError, LoopLimitExceededError, ReentrantForceError

__all__ = (
    # Types
    "Recovery",
    "StateFn",
    "Thunk",
    # Capabilities
    "MonadError",
    "Sync",
    # Steps
    "Continue",
    "Done",
    "Step",
    # Configuration
    "EvalPolicy",
    # Lazy
    "lazy",
    "Lazy",
    "Now",
    "Later",
    "Always",
    "Defer",
    "LazySync",
    "lazy_sync",
    # State
    "state",
    "StateT",
    "StateTSync",
    "state_sync",
    # Laws
    "IsEq",
    "SyncLaws",
    # Errors
    "ErrorValueError",
    "InvalidStepError",
    "LoopLimitExceededError",
    "ReentrantForceError",
)
