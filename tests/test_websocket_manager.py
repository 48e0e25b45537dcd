"""WebSocket fan-out tests with in-memory viewers."""

import asyncio
import json

from stepgraph.backend.websocket_manager import WebSocketManager


class FakeViewer:
    def __init__(self, fail=False):
        self.fail = fail
        self.accepted = False
        self.closed = False
        self.sent = []

    async def accept(self):
        self.accepted = True

    async def send_text(self, text):
        if self.fail:
            raise RuntimeError("connection reset")
        self.sent.append(json.loads(text))

    async def close(self):
        self.closed = True


def test_messages_carry_increasing_sequence_numbers():
    async def scenario():
        manager = WebSocketManager()
        viewer = FakeViewer()
        await manager.connect(viewer)

        await manager.notify_graph_updated({"graph": {"nodes": [], "edges": []}})
        await manager.notify_graph_updated()
        return manager, viewer

    manager, viewer = asyncio.run(scenario())

    assert viewer.accepted
    assert [m["seq"] for m in viewer.sent] == [1, 2]
    assert viewer.sent[0]["state"]["graph"]["nodes"] == []
    assert "state" not in viewer.sent[1]
    assert manager.sequence == 2


def test_no_viewers_sends_nothing():
    manager = WebSocketManager()
    assert asyncio.run(manager.notify_graph_updated()) == 0
    assert manager.sequence == 0


def test_failed_viewer_is_dropped():
    async def scenario():
        manager = WebSocketManager()
        healthy, broken = FakeViewer(), FakeViewer(fail=True)
        await manager.connect(healthy)
        await manager.connect(broken)
        delivered = await manager.notify_graph_updated()
        return manager, healthy, delivered

    manager, healthy, delivered = asyncio.run(scenario())

    assert delivered == 1
    assert manager.connection_count == 1
    assert len(healthy.sent) == 1


def test_close_all():
    async def scenario():
        manager = WebSocketManager()
        viewers = [FakeViewer(), FakeViewer()]
        for viewer in viewers:
            await manager.connect(viewer)
        await manager.close_all()
        return manager, viewers

    manager, viewers = asyncio.run(scenario())

    assert manager.connection_count == 0
    assert all(v.closed for v in viewers)
