def _events(sio_client, name):
    return [pkt for pkt in sio_client.get_received('/ws') if pkt['name'] == name]


def test_socket_connect_reports_anonymous_identity(sio_client):
    if not sio_client.is_connected('/ws'):
        sio_client.connect(namespace='/ws')
    assert sio_client.is_connected('/ws')

    received = sio_client.get_received('/ws')
    names = [pkt['name'] for pkt in received]
    assert 'connected' in names
    identity = next(pkt for pkt in received if pkt['name'] == 'identity')
    assert identity['args'][0] == {'identity': None}


def test_join_pool_delivers_full_state(sio_client):
    sio_client.get_received('/ws')  # flush
    sio_client.emit('join_pool', {}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert any(pkt['name'] == 'joined' for pkt in received)
    updates = [pkt for pkt in received if pkt['name'] == 'state_update']
    assert updates
    state = updates[-1]['args'][0]
    assert state['grid'] == {}
    assert state['locked'] is False


def test_claims_are_pushed_to_subscribers(sio_client, alice_client):
    sio_client.emit('join_pool', {}, namespace='/ws')
    sio_client.get_received('/ws')  # flush

    assert alice_client.post('/api/pool/squares/2/7').status_code == 201
    updates = _events(sio_client, 'state_update')
    assert updates
    state = updates[-1]['args'][0]
    assert state['grid']['2_7']['owner_display_name'] == 'Alice Smith'
    assert state['filled'] == 1
    assert state['players'][0]['initials'] == 'AS'


def test_leave_pool_stops_updates(sio_client, alice_client):
    sio_client.emit('join_pool', {}, namespace='/ws')
    sio_client.emit('leave_pool', {}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert any(pkt['name'] == 'left' for pkt in received)

    assert alice_client.post('/api/pool/squares/0/0').status_code == 201
    assert _events(sio_client, 'state_update') == []


def test_ping(sio_client):
    sio_client.get_received('/ws')
    sio_client.emit('ping', {'n': 1}, namespace='/ws')
    pongs = _events(sio_client, 'pong')
    assert pongs and pongs[0]['args'][0] == {'n': 1}
