"""Grid state: who owns which of the 100 squares.

A ``GridState`` is always rebuilt from the full ``squares`` collection and is
never patched in place. A key is present iff that cell has an owner.
"""
from dataclasses import dataclass
from collections.abc import Mapping
from typing import Dict, Iterator, List, Optional, Tuple

from squares.exceptions import InvalidCell

GRID_SIZE = 10
TOTAL_SQUARES = GRID_SIZE * GRID_SIZE


def check_cell(row, col) -> None:
    for value in (row, col):
        if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value < GRID_SIZE:
            raise InvalidCell()


def cell_key(row: int, col: int) -> str:
    check_cell(row, col)
    return f"{row}_{col}"


def parse_cell_key(key) -> Optional[Tuple[int, int]]:
    """``(row, col)`` for a well-formed ``"r_c"`` key, otherwise None."""
    parts = key.split('_') if isinstance(key, str) else ()
    if len(parts) != 2 or not all(p.isdecimal() for p in parts):
        return None
    row, col = int(parts[0]), int(parts[1])
    if not (0 <= row < GRID_SIZE and 0 <= col < GRID_SIZE) or f"{row}_{col}" != key:
        return None
    return row, col


def initials(name: Optional[str]) -> str:
    parts = (name or '').split()
    if not parts:
        return ''
    if len(parts) == 1:
        return parts[0][0].upper()
    return (parts[0][0] + parts[-1][0]).upper()


@dataclass(frozen=True)
class Claim:
    owner_id: str
    owner_display_name: str
    row: int
    col: int
    claimed_at: Optional[str] = None

    @property
    def key(self) -> str:
        return cell_key(self.row, self.col)

    @classmethod
    def from_document(cls, key: str, data: Mapping) -> 'Claim':
        row, col = parse_cell_key(key) or (None, None)
        if row is None:
            raise InvalidCell(f"Malformed square key {key!r}")
        return cls(
            owner_id=str(data.get('owner_id')),
            owner_display_name=data.get('owner_display_name') or '',
            row=row,
            col=col,
            claimed_at=data.get('claimed_at'),
        )

    def to_dict(self):
        return {
            'owner_id': self.owner_id,
            'owner_display_name': self.owner_display_name,
            'initials': initials(self.owner_display_name),
            'row': self.row,
            'col': self.col,
            'claimed_at': self.claimed_at,
        }


class GridState(Mapping):
    """Read-only ``cell key -> Claim`` mapping."""

    def __init__(self, claims: Optional[Dict[str, Claim]] = None):
        self._claims = dict(claims or {})

    @classmethod
    def from_documents(cls, documents: Mapping[str, Mapping]) -> 'GridState':
        """Build from the ``squares`` collection, skipping malformed entries."""
        return cls({
            key: Claim.from_document(key, data)
            for key, data in documents.items()
            if parse_cell_key(key) is not None and isinstance(data, Mapping)
        })

    def __getitem__(self, key: str) -> Claim:
        return self._claims[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._claims)

    def __len__(self) -> int:
        return len(self._claims)

    def claim_at(self, row: int, col: int) -> Optional[Claim]:
        return self._claims.get(cell_key(row, col))

    @property
    def filled(self) -> int:
        return len(self._claims)

    @property
    def is_full(self) -> bool:
        return self.filled >= TOTAL_SQUARES

    def to_dict(self):
        return {key: claim.to_dict() for key, claim in self._claims.items()}


def player_tally(grid: GridState) -> List[dict]:
    """Squares held per owner, most squares first."""
    counts: Dict[str, dict] = {}
    for claim in grid.values():
        entry = counts.setdefault(claim.owner_id, {
            'owner_id': claim.owner_id,
            'display_name': claim.owner_display_name,
            'initials': initials(claim.owner_display_name),
            'squares': 0,
        })
        entry['squares'] += 1
    return sorted(counts.values(), key=lambda e: (-e['squares'], e['display_name'].lower()))
