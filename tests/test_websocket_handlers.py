"""
End-to-end tests over the Socket.IO test client.
"""

import json
import time
import pytest
from numguess.app import create_app


@pytest.fixture
def log_path(tmp_path):
    return tmp_path / 'matches.jsonl'


@pytest.fixture
def app(log_path):
    app, socketio = create_app({'TESTING': True, 'MATCH_LOG_PATH': str(log_path)})
    app.socketio = socketio
    return app


@pytest.fixture
def alice(app):
    client = app.socketio.test_client(app)
    yield client
    if client.is_connected():
        client.disconnect()


@pytest.fixture
def bob(app):
    client = app.socketio.test_client(app)
    yield client
    if client.is_connected():
        client.disconnect()


def events(client, name):
    return [msg['args'][0] for msg in client.get_received() if msg['name'] == name]


def by_name(received, name):
    return [msg['args'][0] for msg in received if msg['name'] == name]


def start_game(alice, bob):
    """Create a room, seat both clients and commit secrets; return the last state."""
    alice.emit('createRoom', {'username': 'Alice', 'digits': 4})
    room_id = events(alice, 'roomJoined')[0]['roomId']
    bob.emit('joinRoom', {'roomId': room_id, 'username': 'Bob'})
    alice.emit('submitSecret', {'roomId': room_id, 'secret': '1234'})
    bob.emit('submitSecret', {'roomId': room_id, 'secret': '5678'})
    bob.get_received()
    return events(alice, 'updateRoomState')[-1]


def test_create_room(alice):
    alice.emit('createRoom', {'username': 'Alice', 'digits': 4})
    received = alice.get_received()
    joined = by_name(received, 'roomJoined')[0]
    assert joined['isHost'] is True
    assert len(joined['roomId']) == 6
    state = by_name(received, 'updateRoomState')[-1]
    assert state['state'] == 'waiting'
    assert state['digits'] == 4


def test_join_missing_room(bob):
    bob.emit('joinRoom', {'roomId': '000000', 'username': 'Bob'})
    assert events(bob, 'error') == ['Room not found.']


def test_full_game(app, alice, bob, log_path):
    state = start_game(alice, bob)
    assert state['state'] == 'playing'
    assert state['actionState'] == 'asking'
    assert all('secretRaw' not in p for p in state['players'])

    clients = {'Alice': alice, 'Bob': bob}
    secrets = {'Alice': '1234', 'Bob': '5678'}
    names = {p['id']: p['name'] for p in state['players']}
    asker_name = names[state['turn']]
    answerer_name = 'Bob' if asker_name == 'Alice' else 'Alice'
    room_id = state['id']

    clients[asker_name].emit('askQuestion', {'roomId': room_id, 'question': 'Is it even?'})
    clients[answerer_name].emit('answerQuestion', {'roomId': room_id, 'answer': 'No'})
    state = events(alice, 'updateRoomState')[-1]
    assert names[state['turn']] == answerer_name
    bob.get_received()

    # The answerer now holds the turn and guesses wrong first.
    clients[answerer_name].emit('makeGuess', {'roomId': room_id, 'guess': '0000'})
    assert events(clients[answerer_name], 'guessResult') == [{'success': False}]
    assert events(clients[asker_name], 'guessResult') == []

    # Turn went back to the asker, who guesses right.
    clients[asker_name].emit('makeGuess', {'roomId': room_id, 'guess': secrets[answerer_name]})
    over = events(clients[answerer_name], 'gameOver')
    assert len(over) == 1
    room = over[0]['room']
    assert room['state'] == 'finished'
    assert names[room['winner']] == asker_name
    assert {p['name']: p['secretRaw'] for p in room['players']} == secrets

    deadline = time.time() + 3.0
    while time.time() < deadline and not log_path.exists():
        time.sleep(0.05)
    lines = log_path.read_text(encoding='utf-8').splitlines()
    assert len(lines) == 1
    assert json.loads(lines[0])['id'] == room_id


def test_chat(alice, bob):
    state = start_game(alice, bob)
    bob.emit('sendMessage', {'roomId': state['id'], 'message': 'good luck'})
    assert events(alice, 'receiveMessage') == [{'author': 'Bob', 'text': 'good luck'}]


def test_surrender_bare_room_id(alice, bob):
    state = start_game(alice, bob)
    alice.emit('surrender', state['id'])
    room = events(bob, 'gameOver')[0]['room']
    assert room['reason'] == 'surrender'
    names = {p['id']: p['name'] for p in room['players']}
    assert names[room['winner']] == 'Bob'


def test_disconnect_mid_game(alice, bob):
    state = start_game(alice, bob)
    alice.disconnect()
    room = events(bob, 'gameOver')[0]['room']
    assert room['reason'] == 'disconnect'
    assert room['history'][-1]['type'] == 'system'
    names = {p['id']: p['name'] for p in room['players']}
    assert names[room['winner']] == 'Bob'


def test_disconnect_during_setup(app, alice, bob):
    alice.emit('createRoom', {'username': 'Alice', 'digits': 4})
    room_id = events(alice, 'roomJoined')[0]['roomId']
    bob.emit('joinRoom', {'roomId': room_id, 'username': 'Bob'})
    alice.emit('submitSecret', {'roomId': room_id, 'secret': '1234'})
    alice.get_received()

    bob.disconnect()
    received = alice.get_received()
    assert by_name(received, 'playerLeft')
    state = by_name(received, 'updateRoomState')[-1]
    assert state['state'] == 'waiting'
    assert [p['name'] for p in state['players']] == ['Alice']
    assert state['players'][0]['ready'] is False


def test_third_player_rejected(app, alice, bob):
    state = start_game(alice, bob)
    carol = app.socketio.test_client(app)
    carol.emit('joinRoom', {'roomId': state['id'], 'username': 'Carol'})
    assert events(carol, 'error') == ['Room is full.']
    carol.disconnect()
