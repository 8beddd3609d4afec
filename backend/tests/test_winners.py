from squares.services.pool.game_config import GameConfiguration, Teams
from squares.services.pool.grid import Claim, GridState, initials, parse_cell_key, player_tally
from squares.services.pool.winners import (
    NO_CLAIM,
    UNDETERMINED,
    WON,
    parse_score,
    quarter_results,
    winner_for_quarter,
)

TEAMS = Teams(row_team='chiefs', col_team='eagles')
CHIEFS_AXIS = [7, 2, 9, 0, 1, 3, 4, 5, 6, 8]
EAGLES_AXIS = [4, 1, 0, 2, 3, 5, 6, 7, 8, 9]


def make_config(scores=None, payouts=None, axes=True):
    doc = {'scores': scores or {}, 'payouts': payouts or {}}
    if axes:
        doc['axes'] = {'chiefs': CHIEFS_AXIS, 'eagles': EAGLES_AXIS}
    return GameConfiguration.from_document(doc, TEAMS)


def make_grid(*cells):
    return GridState({
        f"{row}_{col}": Claim(owner_id=owner, owner_display_name=name, row=row, col=col)
        for row, col, owner, name in cells
    })


def test_winner_matches_last_digits_against_axes():
    grid = make_grid((0, 0, 'u1', 'Alice Smith'))
    config = make_config(scores={'Q1': {'eagles': 24, 'chiefs': 17}})
    result = winner_for_quarter('Q1', config, grid)
    # eagles 4 -> column 0, chiefs 7 -> row 0
    assert result.status == WON
    assert (result.row, result.col) == (0, 0)
    assert result.claim.owner_id == 'u1'


def test_winner_accepts_typed_text_scores():
    grid = make_grid((1, 3, 'u2', 'Bob Jones'))
    config = make_config(scores={'Q2': {'eagles': ' 12 ', 'chiefs': '22'}})
    result = winner_for_quarter('Q2', config, grid)
    assert (result.row, result.col) == (1, 3)
    assert result.status == WON


def test_free_winning_square_is_no_claim():
    config = make_config(scores={'Q1': {'eagles': 24, 'chiefs': 17}})
    result = winner_for_quarter('Q1', config, make_grid())
    assert result.status == NO_CLAIM
    assert (result.row, result.col) == (0, 0)
    assert result.claim is None


def test_undetermined_without_axes_regardless_of_scores():
    grid = make_grid((0, 0, 'u1', 'Alice Smith'))
    config = make_config(scores={'Q1': {'eagles': 24, 'chiefs': 17}}, axes=False)
    assert winner_for_quarter('Q1', config, grid).status == UNDETERMINED


def test_undetermined_for_missing_or_unparseable_scores():
    config = make_config(scores={
        'Q1': {'eagles': '', 'chiefs': 3},
        'Q2': {'eagles': 'seven', 'chiefs': 3},
        'Q3': {'eagles': 10},
    })
    grid = make_grid()
    for quarter in ('Q1', 'Q2', 'Q3', 'Q4'):
        assert winner_for_quarter(quarter, config, grid).status == UNDETERMINED


def test_malformed_axis_is_undetermined():
    doc = {'axes': {'chiefs': [1, 2, 3], 'eagles': EAGLES_AXIS}, 'scores': {'Q1': {'eagles': 4, 'chiefs': 7}}}
    config = GameConfiguration.from_document(doc, TEAMS)
    assert config.locked
    assert winner_for_quarter('Q1', config, make_grid()).status == UNDETERMINED


def test_parse_score():
    assert parse_score(17) == 17
    assert parse_score('24') == 24
    assert parse_score(0) == 0
    assert parse_score('') is None
    assert parse_score(None) is None
    assert parse_score('2.5') is None
    assert parse_score(24.0) == 24
    assert parse_score(' 21.0 ') == 21
    assert parse_score(2.5) is None
    assert parse_score(float('nan')) is None
    assert parse_score(-3) is None
    assert parse_score(True) is None


def test_quarter_results_include_payouts():
    config = make_config(
        scores={'Q1': {'eagles': 24, 'chiefs': 17}},
        payouts={'Q1': 10, 'Q2': 20, 'Q3': 30, 'Q4': 40},
    )
    results = quarter_results(config, make_grid((0, 0, 'u1', 'Alice Smith')))
    assert [r['quarter'] for r in results] == ['Q1', 'Q2', 'Q3', 'Q4']
    assert results[0]['status'] == WON
    assert results[0]['winner']['initials'] == 'AS'
    assert results[0]['payout'] == 10
    assert results[3]['status'] == UNDETERMINED
    assert results[3]['payout'] == 40


def test_player_tally_counts_squares_per_owner():
    grid = make_grid(
        (0, 0, 'u1', 'Alice Smith'),
        (0, 1, 'u1', 'Alice Smith'),
        (5, 5, 'u2', 'Bob Jones'),
    )
    tally = player_tally(grid)
    assert [(p['owner_id'], p['squares']) for p in tally] == [('u1', 2), ('u2', 1)]
    assert tally[1]['initials'] == 'BJ'


def test_initials():
    assert initials('Alice Mary Smith') == 'AS'
    assert initials('cher') == 'C'
    assert initials('') == ''
    assert initials(None) == ''


def test_grid_skips_malformed_square_documents():
    grid = GridState.from_documents({
        '1_2': {'owner_id': 'u1', 'owner_display_name': 'Alice Smith'},
        'bogus': {'owner_id': 'u2'},
        '10_0': {'owner_id': 'u2'},
        '01_2': {'owner_id': 'u2'},
        '3_3': 'not a document',
    })
    assert list(grid) == ['1_2']
    assert grid.claim_at(1, 2).owner_display_name == 'Alice Smith'


def test_parse_cell_key():
    assert parse_cell_key('0_9') == (0, 9)
    assert parse_cell_key('9_9_9') is None
    assert parse_cell_key('a_b') is None
    assert parse_cell_key(None) is None
