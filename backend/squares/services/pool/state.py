"""Cached pool state and the per-app ``Pool`` container.

``PoolState`` mirrors the store: it subscribes to the ``squares`` collection
and the ``config/game`` document and replaces its grid and configuration
wholesale on every notification. Derived views (winners, tally) are computed
from it on demand.
"""
from typing import Callable, List

from flask import current_app

from squares.store import DocumentStore
from .claims import ClaimEngine, SQUARES_COLLECTION
from .game_config import CONFIG_COLLECTION, CONFIG_DOC_ID, GameConfiguration, Teams
from .grid import GridState, player_tally
from .lifecycle import GameLifecycle
from .winners import quarter_results


class PoolState:
    def __init__(self, store: DocumentStore, teams: Teams):
        self.store = store
        self.teams = teams
        self._grid = GridState()
        self._config = GameConfiguration(teams)
        self._listeners: List[Callable] = []
        self._unsubscribe_squares = None
        self._unsubscribe_config = None

    # Subscriptions start on first read; the tables may not exist at app creation
    def _ensure_subscribed(self) -> None:
        if self._unsubscribe_squares is None:
            self._unsubscribe_squares = self.store.subscribe_collection(SQUARES_COLLECTION, self._on_squares)
        if self._unsubscribe_config is None:
            self._unsubscribe_config = self.store.subscribe_document(CONFIG_COLLECTION, CONFIG_DOC_ID, self._on_config)

    @property
    def grid(self) -> GridState:
        self._ensure_subscribed()
        return self._grid

    @property
    def config(self) -> GameConfiguration:
        self._ensure_subscribed()
        return self._config

    def refresh(self) -> None:
        """Re-read both snapshots in full.

        The change feed only covers writes made by this process, so this is
        how writes from other workers reach the cache. Listeners hear about
        it only when something actually moved.
        """
        self._ensure_subscribed()
        grid = self._grid_from(self.store.get_all(SQUARES_COLLECTION))
        config = GameConfiguration.from_document(self.store.get(CONFIG_COLLECTION, CONFIG_DOC_ID), self.teams)
        if grid == self._grid and config == self._config:
            return
        self._grid, self._config = grid, config
        self._changed()

    def close(self) -> None:
        for unsubscribe in (self._unsubscribe_squares, self._unsubscribe_config):
            if unsubscribe is not None:
                unsubscribe()
        self._unsubscribe_squares = self._unsubscribe_config = None

    def on_change(self, listener: Callable[['PoolState'], None]) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener) if listener in self._listeners else None

    @staticmethod
    def _grid_from(documents) -> GridState:
        grid = GridState.from_documents(documents)
        skipped = sorted(set(documents) - set(grid))
        if skipped:
            current_app.logger.warning(f"[pool-state] ignoring malformed squares {skipped}")
        return grid

    def _on_squares(self, documents) -> None:
        self._grid = self._grid_from(documents)
        self._changed()

    def _on_config(self, document) -> None:
        self._config = GameConfiguration.from_document(document, self.teams)
        self._changed()

    def _changed(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def snapshot(self):
        self.refresh()
        return self.to_dict()

    def to_dict(self):
        grid, config = self._grid, self._config
        return {
            'grid': grid.to_dict(),
            'filled': grid.filled,
            'locked': config.locked,
            'config': config.to_dict(),
            'results': quarter_results(config, grid),
            'players': player_tally(grid),
        }


class Pool:
    def __init__(self, store, state, claims, lifecycle, is_administrator):
        self.store = store
        self.state = state
        self.claims = claims
        self.lifecycle = lifecycle
        self.is_administrator = is_administrator

    @classmethod
    def from_config(cls, config, is_administrator) -> 'Pool':
        from squares import db
        teams = Teams(row_team=config['ROW_TEAM'], col_team=config['COL_TEAM'])
        store = DocumentStore(db)
        state = PoolState(store, teams)
        return cls(
            store=store,
            state=state,
            claims=ClaimEngine(store, state),
            lifecycle=GameLifecycle(store, state, teams, is_administrator),
            is_administrator=is_administrator,
        )


def current_pool() -> Pool:
    return current_app.extensions['squares_pool']
