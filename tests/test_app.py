"""
Tests for Flask application factory and HTTP routes.
"""

import pytest
from numguess.app import create_app


@pytest.fixture
def app(tmp_path):
    app, socketio = create_app({'TESTING': True, 'MATCH_LOG_PATH': str(tmp_path / 'matches.jsonl')})
    app.socketio = socketio
    return app


def test_create_app():
    """Test that the app factory creates a valid Flask app."""
    app, socketio = create_app({'TESTING': True})
    assert app is not None
    assert socketio is not None
    assert app.config['SECRET_KEY'] is not None
    assert app.config['DEFAULT_DIGITS'] == 5


def test_config_override():
    app, _ = create_app({'DEFAULT_DIGITS': 3, 'MAX_DIGITS': 6})
    limits = app.extensions['numguess_gateway'].limits
    assert limits.default_digits == 3
    assert limits.max_digits == 6


def test_health(app):
    response = app.test_client().get('/health')
    assert response.status_code == 200
    assert response.get_json() == {'success': True, 'data': {'rooms': 0}}


def test_get_missing_room(app):
    response = app.test_client().get('/api/rooms/123456')
    assert response.status_code == 404
    assert response.get_json()['success'] is False


def test_get_room_hides_secrets(app):
    registry = app.extensions['numguess_registry']
    room = registry.create(4)
    room.add_player('p1', 'Alice')
    room.add_player('p2', 'Bob')
    room.submit_secret('p1', '1234')

    response = app.test_client().get(f'/api/rooms/{room.id}')
    assert response.status_code == 200
    data = response.get_json()['data']
    assert data['id'] == room.id
    assert data['state'] == 'setup'
    assert '1234' not in str(data['players'])
    assert all('secretHash' not in p for p in data['players'])


def test_get_finished_room_hides_secrets(app):
    registry = app.extensions['numguess_registry']
    room = registry.create(4)
    room.add_player('p1', 'Alice')
    room.add_player('p2', 'Bob')
    room.submit_secret('p1', '1234')
    room.submit_secret('p2', '5678')
    room.surrender('p1')

    response = app.test_client().get(f'/api/rooms/{room.id}')
    assert response.status_code == 200
    data = response.get_json()['data']
    assert '1234' not in str(data['players'])
    assert '5678' not in str(data['players'])
    assert data['state'] == 'finished'
    assert all('secretRaw' not in p and 'secretHash' not in p for p in data['players'])


def test_socketio_runs_in_threading_mode(app):
    assert app.socketio.async_mode == 'threading'
