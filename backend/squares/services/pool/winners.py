"""Quarter winners, derived on demand from the axes, the scores and the grid.

Nothing here is stored: results are recomputed from the current state every
time they are needed.
"""
from dataclasses import dataclass
from typing import List, Optional

from .game_config import GameConfiguration, QUARTERS
from .grid import GRID_SIZE, Claim, GridState, cell_key

UNDETERMINED = 'undetermined'
NO_CLAIM = 'no_claim'
WON = 'won'


@dataclass(frozen=True)
class QuarterResult:
    quarter: str
    status: str
    row: Optional[int] = None
    col: Optional[int] = None
    claim: Optional[Claim] = None

    def to_dict(self):
        return {
            'quarter': self.quarter,
            'status': self.status,
            'row': self.row,
            'col': self.col,
            'winner': self.claim.to_dict() if self.claim else None,
        }


def parse_score(value) -> Optional[int]:
    """Entered score as a non-negative int, or None when it is not one yet."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        score = value
    else:
        text = str(value).strip()
        try:
            score = int(text)
        except ValueError:
            # 24.0 from a JSON number counts; 2.5 does not
            try:
                number = float(text)
            except ValueError:
                return None
            if not number.is_integer():
                return None
            score = int(number)
    return score if score >= 0 else None


def _index_of(axis, digit) -> Optional[int]:
    try:
        index = list(axis).index(digit)
    except (TypeError, ValueError):
        return None
    return index if index < GRID_SIZE else None


def winner_for_quarter(quarter: str, config: GameConfiguration, grid: GridState) -> QuarterResult:
    if config.axes is None:
        return QuarterResult(quarter, UNDETERMINED)
    entry = config.score_entry(quarter)
    if entry is None:
        return QuarterResult(quarter, UNDETERMINED)
    row_score, col_score = (parse_score(v) for v in entry)
    if row_score is None or col_score is None:
        return QuarterResult(quarter, UNDETERMINED)

    row = _index_of(config.axes.row_axis, row_score % 10)
    col = _index_of(config.axes.col_axis, col_score % 10)
    if row is None or col is None:
        return QuarterResult(quarter, UNDETERMINED)

    claim = grid.get(cell_key(row, col))
    if claim is None:
        return QuarterResult(quarter, NO_CLAIM, row=row, col=col)
    return QuarterResult(quarter, WON, row=row, col=col, claim=claim)


def quarter_results(config: GameConfiguration, grid: GridState) -> List[dict]:
    results = []
    for quarter in QUARTERS:
        result = winner_for_quarter(quarter, config, grid).to_dict()
        result['payout'] = config.payouts.get(quarter)
        results.append(result)
    return results
