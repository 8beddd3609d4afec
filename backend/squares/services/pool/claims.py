"""Claiming and releasing squares.

Ownership is first-writer-wins. Every check runs against a fresh read of the
store, so writes from other processes are seen. The store has no
compare-and-swap, so two callers claiming the same free square at the same
instant can both pass the check; whichever write lands last owns the square.
"""
from flask import current_app

from squares.exceptions import CellAlreadyOwned, CellNotOwned, GameLocked, NotSignedIn
from squares.identity import ANONYMOUS
from squares.store import SERVER_TIMESTAMP
from .grid import Claim, cell_key

SQUARES_COLLECTION = 'squares'


class ClaimEngine:
    def __init__(self, store, state):
        self.store = store
        self.state = state

    def claim(self, row: int, col: int, caller) -> Claim:
        key = cell_key(row, col)
        self.state.refresh()
        if self.state.config.locked:
            raise GameLocked()
        if key in self.state.grid:
            raise CellAlreadyOwned()
        if caller is ANONYMOUS:
            raise NotSignedIn('Sign in to select a square')

        self.store.put(SQUARES_COLLECTION, key, {
            'owner_id': caller.id,
            'owner_display_name': caller.display_name,
            'row': row,
            'col': col,
            'claimed_at': SERVER_TIMESTAMP,
        })
        current_app.logger.info(f"[claim] cell={key} owner={caller.id}")
        return self.state.grid.get(key) or Claim(caller.id, caller.display_name, row, col)

    def unclaim(self, row: int, col: int, caller) -> None:
        key = cell_key(row, col)
        self.state.refresh()
        if self.state.config.locked:
            raise GameLocked()
        if caller is ANONYMOUS:
            raise NotSignedIn()
        claim = self.state.grid.get(key)
        if claim is None or claim.owner_id != caller.id:
            raise CellNotOwned()

        self.store.delete(SQUARES_COLLECTION, key)
        current_app.logger.info(f"[unclaim] cell={key} owner={caller.id}")
