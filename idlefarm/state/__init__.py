"""Simulation state: the aggregate, its derived fields and the store."""

from idlefarm.state.model import GameState, create_initial_state
from idlefarm.state.store import ResourceChange, ResourceUpdate, StateStore, Transaction

__all__ = [
    "GameState",
    "ResourceChange",
    "ResourceUpdate",
    "StateStore",
    "Transaction",
    "create_initial_state",
]
