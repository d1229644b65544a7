"""
实时推送连接管理测试
"""
import asyncio

from hotelops.services.connection_manager import HotelConnectionManager


class FakeWebSocket:
    def __init__(self, fail=False):
        self.sent = []
        self.fail = fail

    async def send_json(self, message):
        if self.fail:
            raise RuntimeError("connection closed")
        self.sent.append(message)


class TestHotelConnectionManager:

    def test_join_groups_by_hotel(self):
        manager = HotelConnectionManager()
        a, b = FakeWebSocket(), FakeWebSocket()
        manager.join(a, "h1")
        manager.join(b, "h2")
        assert manager.connection_count("h1") == 1
        assert manager.connection_count("h2") == 1

    def test_rejoin_moves_connection(self):
        manager = HotelConnectionManager()
        ws = FakeWebSocket()
        manager.join(ws, "h1")
        manager.join(ws, "h2")
        assert manager.connection_count("h1") == 0
        assert manager.connection_count("h2") == 1

    def test_disconnect(self):
        manager = HotelConnectionManager()
        ws = FakeWebSocket()
        manager.join(ws, "h1")
        manager.disconnect(ws)
        manager.disconnect(ws)
        assert manager.connection_count("h1") == 0

    def test_broadcast_only_to_hotel(self):
        manager = HotelConnectionManager()
        a, b = FakeWebSocket(), FakeWebSocket()
        manager.join(a, "h1")
        manager.join(b, "h2")

        asyncio.run(manager.broadcast("h1", {"type": "customer_added", "data": {}}))

        assert a.sent == [{"type": "customer_added", "data": {}}]
        assert b.sent == []

    def test_failed_connection_pruned(self):
        manager = HotelConnectionManager()
        good, bad = FakeWebSocket(), FakeWebSocket(fail=True)
        manager.join(good, "h1")
        manager.join(bad, "h1")

        asyncio.run(manager.broadcast("h1", {"type": "customer_updated", "data": {}}))

        assert len(good.sent) == 1
        assert manager.connection_count("h1") == 1

    def test_schedule_without_loop_is_dropped(self):
        manager = HotelConnectionManager()
        ws = FakeWebSocket()
        manager.join(ws, "h1")
        manager.schedule_broadcast("h1", {"type": "customer_added", "data": {}})
        assert ws.sent == []

    def test_schedule_on_bound_loop(self):
        manager = HotelConnectionManager()
        ws = FakeWebSocket()
        manager.join(ws, "h1")

        async def scenario():
            manager.bind_loop(asyncio.get_running_loop())
            manager.schedule_broadcast("h1", {"type": "service_request_created", "data": {}})
            await asyncio.sleep(0.01)

        asyncio.run(scenario())
        assert ws.sent == [{"type": "service_request_created", "data": {}}]
