from flask_socketio import join_room, leave_room, emit
from flask import current_app
from squares import socketio
from squares.identity import current_identity
from squares.services.pool.state import current_pool

POOL_ROOM = 'pool'


def broadcast_state(state) -> None:
    """Push the full pool state to every subscribed client."""
    socketio.emit('state_update', state.to_dict(), to=POOL_ROOM, namespace='/ws')


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})
    identity = current_identity()
    emit('identity', {'identity': identity.to_dict() if identity else None})


def handle_join_pool(data=None):
    join_room(POOL_ROOM)
    emit('joined', {'room': POOL_ROOM})
    # Catch up on other workers' writes, then hand the newcomer the full state
    pool = current_pool()
    pool.state.refresh()
    emit('state_update', pool.state.to_dict())
    current_app.logger.info(f"[ws-join] filled={pool.state.grid.filled} locked={pool.state.config.locked}")


def handle_leave_pool(data=None):
    leave_room(POOL_ROOM)
    emit('left', {'room': POOL_ROOM})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    Rooms are left automatically on disconnect, which ends the feed.
    """
    socketio.on_event('connect', handle_connect, namespace='/ws')
    socketio.on_event('join_pool', handle_join_pool, namespace='/ws')
    socketio.on_event('leave_pool', handle_leave_pool, namespace='/ws')
    socketio.on_event('ping', handle_ping, namespace='/ws')

    if testing:
        socketio.on_event('connect', handle_connect, namespace='/')
        socketio.on_event('join_pool', handle_join_pool, namespace='/')
        socketio.on_event('leave_pool', handle_leave_pool, namespace='/')
        socketio.on_event('ping', handle_ping, namespace='/')
