from flask import Blueprint, jsonify, request, current_app
from squares.exceptions import InvalidRequestBody, SquaresError
from squares.identity import current_identity
from squares.services.pool.state import current_pool


pool_api = Blueprint('pool', __name__)


@pool_api.errorhandler(SquaresError)
def handle_pool_error(exc):
    current_app.logger.info(f"[rejected] {request.method} {request.path} code={exc.code}: {exc}")
    return jsonify({'error': str(exc), 'code': exc.code}), exc.status


def _json_object() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidRequestBody()
    return data


def _state_payload(pool, caller):
    payload = pool.state.snapshot()
    payload['identity'] = caller.to_dict() if caller else None
    payload['is_administrator'] = bool(pool.is_administrator(caller))
    return payload


@pool_api.route('/state', methods=['GET'])
def get_state():
    pool = current_pool()
    return jsonify(_state_payload(pool, current_identity()))


@pool_api.route('/squares/<int:row>/<int:col>', methods=['POST'])
def claim_square(row, col):
    pool = current_pool()
    claim = pool.claims.claim(row, col, current_identity())
    return jsonify(claim.to_dict()), 201


@pool_api.route('/squares/<int:row>/<int:col>', methods=['DELETE'])
def unclaim_square(row, col):
    pool = current_pool()
    pool.claims.unclaim(row, col, current_identity())
    return jsonify({'message': 'Square released', 'row': row, 'col': col})


# ---- Administrator ----

@pool_api.route('/start', methods=['POST'])
def start_game():
    pool = current_pool()
    axes = pool.lifecycle.start_game(current_identity())
    return jsonify({'message': 'Game started with randomized axes!', 'axes': axes})


@pool_api.route('/payouts', methods=['POST'])
def save_payouts():
    data = _json_object()
    pool = current_pool()
    payouts = pool.lifecycle.save_payouts(current_identity(), data)
    return jsonify({'message': 'Payouts saved!', 'payouts': payouts})


@pool_api.route('/scores', methods=['POST'])
def save_scores():
    data = _json_object()
    pool = current_pool()
    scores = pool.lifecycle.save_scores(current_identity(), data)
    return jsonify({'message': 'Scores saved!', 'scores': scores})


@pool_api.route('/restart', methods=['POST'])
def restart_game():
    data = _json_object()
    pool = current_pool()
    summary = pool.lifecycle.restart_game(current_identity(), confirm=data.get('confirm') is True)
    return jsonify({'message': 'Game restarted!', **summary})
