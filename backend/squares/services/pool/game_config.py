"""The single ``config/game`` document: axes, payouts and scores.

Stored values are trusted as-is on read; validation happens when the
administrator writes them.
"""
from dataclasses import dataclass, field
from typing import Mapping, NamedTuple, Optional, Tuple

CONFIG_COLLECTION = 'config'
CONFIG_DOC_ID = 'game'
QUARTERS = ('Q1', 'Q2', 'Q3', 'Q4')


class Teams(NamedTuple):
    row_team: str
    col_team: str


def _axis_from(value) -> Optional[Tuple]:
    if isinstance(value, (list, tuple)):
        return tuple(value)
    return None


@dataclass(frozen=True)
class AxisAssignment:
    row_axis: Optional[Tuple]
    col_axis: Optional[Tuple]

    @classmethod
    def from_document(cls, axes, teams: Teams) -> 'AxisAssignment':
        if not isinstance(axes, Mapping):
            return cls(row_axis=None, col_axis=None)
        return cls(
            row_axis=_axis_from(axes.get(teams.row_team)),
            col_axis=_axis_from(axes.get(teams.col_team)),
        )

    def to_document(self, teams: Teams) -> dict:
        return {
            teams.row_team: list(self.row_axis) if self.row_axis is not None else None,
            teams.col_team: list(self.col_axis) if self.col_axis is not None else None,
        }


@dataclass(frozen=True)
class GameConfiguration:
    teams: Teams
    axes: Optional[AxisAssignment] = None
    payouts: dict = field(default_factory=dict)
    scores: dict = field(default_factory=dict)

    @classmethod
    def from_document(cls, doc: Optional[Mapping], teams: Teams) -> 'GameConfiguration':
        doc = doc or {}
        axes = doc.get('axes')
        payouts = doc.get('payouts')
        scores = doc.get('scores')
        return cls(
            teams=teams,
            axes=AxisAssignment.from_document(axes, teams) if axes is not None else None,
            payouts=dict(payouts) if isinstance(payouts, Mapping) else {},
            scores=dict(scores) if isinstance(scores, Mapping) else {},
        )

    @property
    def locked(self) -> bool:
        return self.axes is not None

    def score_entry(self, quarter: str) -> Optional[Tuple]:
        """``(row team score, column team score)`` as entered, or None."""
        entry = self.scores.get(quarter)
        if not isinstance(entry, Mapping):
            return None
        return entry.get(self.teams.row_team), entry.get(self.teams.col_team)

    def to_dict(self):
        return {
            'teams': {'row': self.teams.row_team, 'col': self.teams.col_team},
            'axes': self.axes.to_document(self.teams) if self.axes is not None else None,
            'payouts': self.payouts,
            'scores': self.scores,
        }
