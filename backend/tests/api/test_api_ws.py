"""
实时推送 WebSocket 测试
"""
import pytest

from hotelops.security.auth import create_access_token
from hotelops.services.event_handlers import event_handlers


@pytest.fixture
def live_client(client):
    """确保推送处理器已注册在全局事件总线上"""
    event_handlers.unregister_handlers()
    event_handlers.register_handlers()
    return client


def _join(ws, admin_id, hotel_id=None):
    message = {"type": "join_hotel", "token": create_access_token(admin_id)}
    if hotel_id is not None:
        message["hotelId"] = hotel_id
    ws.send_json(message)
    return ws.receive_json()


class TestWebSocket:

    def test_join_ack(self, live_client, admin, hotel):
        with live_client.websocket_connect("/ws") as ws:
            assert _join(ws, admin.id, hotel.id.upper()) == {"type": "joined", "hotelId": hotel.id}

    def test_join_defaults_to_own_hotel(self, live_client, admin, hotel):
        with live_client.websocket_connect("/ws") as ws:
            assert _join(ws, admin.id) == {"type": "joined", "hotelId": hotel.id}

    def test_join_requires_token(self, live_client, hotel):
        with live_client.websocket_connect("/ws") as ws:
            ws.send_json({"type": "join_hotel", "hotelId": hotel.id})
            assert ws.receive_json()["type"] == "error"

            ws.send_json({"type": "join_hotel", "hotelId": hotel.id, "token": "garbage"})
            assert ws.receive_json()["type"] == "error"

    def test_join_other_hotel_rejected(self, live_client, admin, hotel, other_hotel):
        """只能订阅 token 对应管理员自己的酒店"""
        with live_client.websocket_connect("/ws") as ws:
            assert _join(ws, admin.id, other_hotel.id)["type"] == "error"
            assert _join(ws, other_hotel.owner_id, hotel.id)["type"] == "error"

    def test_join_without_hotel(self, live_client, admin):
        with live_client.websocket_connect("/ws") as ws:
            assert _join(ws, admin.id)["type"] == "error"

    def test_join_inactive_admin(self, live_client, db_session, admin, hotel):
        admin.is_active = False
        db_session.commit()
        with live_client.websocket_connect("/ws") as ws:
            assert _join(ws, admin.id)["type"] == "error"

    def test_ping(self, live_client):
        with live_client.websocket_connect("/ws") as ws:
            ws.send_json({"type": "ping"})
            assert ws.receive_json() == {"type": "pong"}

    def test_invalid_hotel_id(self, live_client, admin, hotel):
        with live_client.websocket_connect("/ws") as ws:
            assert _join(ws, admin.id, "lobby")["type"] == "error"

    def test_non_json_message(self, live_client):
        with live_client.websocket_connect("/ws") as ws:
            ws.send_text("hello")
            assert ws.receive_json()["type"] == "error"

    def test_customer_added_pushed(self, live_client, admin, auth_headers, hotel, standard_type):
        with live_client.websocket_connect("/ws") as ws:
            _join(ws, admin.id, hotel.id)
            response = live_client.post("/customers", headers=auth_headers, json={
                "name": "John", "phone": "+11234567890",
                "room_type_id": standard_type.id, "room_number": "1",
            })
            assert response.status_code == 200

            message = ws.receive_json()
            assert message["type"] == "customer_added"
            assert message["data"]["id"] == response.json()["id"]

            live_client.post(f"/customers/{response.json()['id']}/checkout", headers=auth_headers)
            message = ws.receive_json()
            assert message["type"] == "customer_updated"
            assert message["data"]["is_active"] is False

    def test_service_request_pushed_to_own_hotel_only(self, live_client, admin, hotel, other_hotel):
        with live_client.websocket_connect("/ws") as ws:
            _join(ws, admin.id)
            for target in (other_hotel, hotel):
                live_client.post("/service-requests", json={
                    "hotel_id": target.id, "room_number": "101",
                    "type": "room_service", "description": "Coffee",
                })

            message = ws.receive_json()
            assert message["type"] == "service_request_created"
            assert message["data"]["hotel_id"] == hotel.id
