"""Administrator-only game lifecycle: start, payouts, scores, restart."""
import random
from decimal import Decimal, InvalidOperation
from typing import Mapping

from flask import current_app

from squares.exceptions import (
    ConfirmationRequired,
    GameLocked,
    GridIncomplete,
    InvalidRequestBody,
    NotAdministrator,
    NotSignedIn,
    PayoutSumInvalid,
    StoreUnavailable,
    UnknownQuarter,
)
from squares.identity import ANONYMOUS
from .axes import generate_axis
from .claims import SQUARES_COLLECTION
from .game_config import CONFIG_COLLECTION, CONFIG_DOC_ID, QUARTERS
from .grid import TOTAL_SQUARES

PAYOUT_TOTAL = Decimal(100)


def _payout_amount(value) -> Decimal:
    # Blank inputs count as zero
    if value is None or (isinstance(value, str) and not value.strip()):
        return Decimal(0)
    if isinstance(value, bool):
        raise PayoutSumInvalid()
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise PayoutSumInvalid(f"Payout {value!r} is not a number")
    if not amount.is_finite() or amount < 0:
        raise PayoutSumInvalid(f"Payout {value!r} must be a non-negative amount")
    return amount


def _as_number(amount: Decimal):
    return int(amount) if amount == amount.to_integral_value() else float(amount)


def _as_table(table) -> Mapping:
    if table is None:
        return {}
    if not isinstance(table, Mapping):
        raise InvalidRequestBody("Expected an object keyed by quarter")
    return table


class GameLifecycle:
    def __init__(self, store, state, teams, is_administrator, rng=random):
        self.store = store
        self.state = state
        self.teams = teams
        self.is_administrator = is_administrator
        self.rng = rng

    def _require_administrator(self, caller) -> None:
        if caller is ANONYMOUS:
            raise NotSignedIn()
        if not self.is_administrator(caller):
            raise NotAdministrator()

    def start_game(self, caller) -> dict:
        """Lock the grid by assigning a random digit order to each team's axis."""
        self._require_administrator(caller)
        self.state.refresh()
        if self.state.config.locked:
            raise GameLocked("Game already started; restart it to draw new axes")
        filled = self.state.grid.filled
        if filled < TOTAL_SQUARES:
            raise GridIncomplete(filled)

        axes = {
            self.teams.row_team: generate_axis(self.rng),
            self.teams.col_team: generate_axis(self.rng),
        }
        self.store.put(CONFIG_COLLECTION, CONFIG_DOC_ID, {'axes': axes}, merge=True)
        current_app.logger.info(f"[start] axes assigned {axes}")
        return axes

    def save_payouts(self, caller, table: Mapping) -> dict:
        self._require_administrator(caller)
        table = _as_table(table)
        amounts = {q: _payout_amount(table.get(q)) for q in QUARTERS}
        total = sum(amounts.values())
        if total != PAYOUT_TOTAL:
            raise PayoutSumInvalid(f"Payout sum invalid: total is {_as_number(total)}, must equal 100")

        payouts = {q: _as_number(a) for q, a in amounts.items()}
        self.store.put(CONFIG_COLLECTION, CONFIG_DOC_ID, {'payouts': payouts}, merge=True)
        current_app.logger.info(f"[payouts] saved {payouts}")
        return payouts

    def save_scores(self, caller, table: Mapping) -> dict:
        """Store entered scores as typed; blank or partial quarters are fine."""
        self._require_administrator(caller)
        scores = {}
        for quarter, entry in _as_table(table).items():
            if quarter not in QUARTERS:
                raise UnknownQuarter(quarter)
            entry = entry if isinstance(entry, Mapping) else {}
            scores[quarter] = {team: entry[team] for team in self.teams if team in entry}
        self.store.put(CONFIG_COLLECTION, CONFIG_DOC_ID, {'scores': scores}, merge=True)
        current_app.logger.info(f"[scores] saved {scores}")
        return scores

    def restart_game(self, caller, confirm: bool = False) -> dict:
        """Clear every square, then replace the config document with an empty one.

        Square deletions are independent: a failed one is logged and reported,
        and the config is still cleared.
        """
        self._require_administrator(caller)
        if not confirm:
            raise ConfirmationRequired()

        deleted, failed = [], []
        # Subscribers see the cleared pool once, not once per square
        with self.store.batched():
            for key in self.store.get_all(SQUARES_COLLECTION):
                try:
                    self.store.delete(SQUARES_COLLECTION, key)
                    deleted.append(key)
                except StoreUnavailable:
                    failed.append(key)
            if failed:
                current_app.logger.warning(f"[restart] {len(failed)} squares not cleared: {failed}")

            self.store.put(CONFIG_COLLECTION, CONFIG_DOC_ID, {}, merge=False)
        current_app.logger.info(f"[restart] cleared {len(deleted)} squares and the game config")
        return {'deleted': len(deleted), 'failed': failed}
