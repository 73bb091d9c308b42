import pytest

from rpsduel.game.service import RoomRegistry
from rpsduel.server import create_app


class TestConfig:
    TESTING = True
    SECRET_KEY = "test-secret"
    CORS_ORIGINS = "*"
    TRUST_PROXY_HEADERS = False
    SOCKETIO_ASYNC_MODE = "threading"
    # Run the countdown synchronously inside the makeChoice handler
    COUNTDOWN_TICK_SEC = 0
    COUNTDOWN_RESOLVE_DELAY_SEC = 0
    COUNTDOWN_INLINE = True
    ROOM_CODE_LENGTH = 6
    MAX_NAME_LENGTH = 16


@pytest.fixture()
def app_and_socketio():
    return create_app(TestConfig)


@pytest.fixture()
def flask_app(app_and_socketio):
    return app_and_socketio[0]


@pytest.fixture()
def socketio(app_and_socketio):
    return app_and_socketio[1]


@pytest.fixture()
def registry(flask_app) -> RoomRegistry:
    return flask_app.extensions["rps_registry"]


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def make_sio_client(flask_app, socketio):
    clients = []

    def _make():
        test_client = socketio.test_client(flask_app, flask_test_client=flask_app.test_client())
        clients.append(test_client)
        return test_client

    yield _make
    for c in clients:
        try:
            if c.is_connected():
                c.disconnect()
        except Exception:
            pass
