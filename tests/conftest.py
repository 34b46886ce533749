"""Shared fixtures for relay tests."""

import json

import pytest
from starlette.websockets import WebSocketState

from relay import ClientRegistry, ChannelIndex, MessageRouter


class FakeWebSocket:
    """Stands in for a Starlette WebSocket; records decoded outbound frames."""

    def __init__(self, fail_sends=False):
        self.client_state = WebSocketState.CONNECTED
        self.application_state = WebSocketState.CONNECTED
        self.sent = []
        self.fail_sends = fail_sends

    async def send_text(self, data):
        if self.fail_sends:
            raise RuntimeError("transport broken")
        self.sent.append(json.loads(data))

    def disconnect(self):
        self.client_state = WebSocketState.DISCONNECTED

    def frames_of(self, kind):
        return [frame for frame in self.sent if frame.get("type") == kind]


class SequenceIds:
    """Identifier generator that replays a fixed list."""

    def __init__(self, *ids):
        self._ids = list(ids)

    def __call__(self):
        return self._ids.pop(0)


@pytest.fixture
def make_websocket():
    return FakeWebSocket


@pytest.fixture
def registry():
    return ClientRegistry()


@pytest.fixture
def channel_index(registry):
    return ChannelIndex(registry)


@pytest.fixture
def router(registry, channel_index):
    return MessageRouter(registry, channel_index)


@pytest.fixture
def sequence_ids():
    return SequenceIds


@pytest.fixture
def join():
    """Open a connection on `router` and complete its init handshake."""

    async def _join(router, websocket, channel, name="Alice"):
        session = await router.open(websocket)
        await router.handle_frame(session, {
            "init": True,
            "uuid": session.client_id,
            "channel": channel,
            "name": name,
        })
        return session

    return _join
