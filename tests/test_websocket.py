"""WebSocket endpoint tests."""

import uuid

import pytest
from starlette.websockets import WebSocketDisconnect

from cartmate.main import app
from cartmate.services.auth import create_access_token


def ws_url(headers) -> str:
    return f"/api/v1/ws?token={headers.token}"


def join(ws, list_id) -> None:
    ws.send_json({"type": "JoinList", "list_id": str(list_id)})


class TestWebSocketAuth:
    def test_websocket_requires_token(self, client):
        with pytest.raises(WebSocketDisconnect), client.websocket_connect("/api/v1/ws"):
            pass

    def test_websocket_rejects_invalid_token(self, client):
        with (
            pytest.raises(WebSocketDisconnect) as exc_info,
            client.websocket_connect("/api/v1/ws?token=invalid_token"),
        ):
            pass
        assert exc_info.value.code == 4001

    def test_websocket_rejects_nonexistent_user(self, client):
        fake_token = create_access_token(uuid.uuid4(), "fake@example.com")
        with (
            pytest.raises(WebSocketDisconnect) as exc_info,
            client.websocket_connect(f"/api/v1/ws?token={fake_token}"),
        ):
            pass
        assert exc_info.value.code == 4001


class TestListRoom:
    def test_owner_join_gets_active_users(self, client, auth_headers, grocery_list):
        with client.websocket_connect(ws_url(auth_headers)) as ws:
            join(ws, grocery_list.id)
            message = ws.receive_json()

        assert message["type"] == "ActiveUsers"
        assert message["list_id"] == str(grocery_list.id)
        assert message["data"] == [{"user_id": str(auth_headers.user_id), "user_name": "Owner"}]

    def test_shared_user_join_and_item_broadcast(
        self, client, auth_headers, other_headers, shared_list
    ):
        with client.websocket_connect(ws_url(auth_headers)) as owner_ws:
            join(owner_ws, shared_list.id)
            assert owner_ws.receive_json()["type"] == "ActiveUsers"

            with client.websocket_connect(ws_url(other_headers)) as friend_ws:
                join(friend_ws, shared_list.id)

                active = friend_ws.receive_json()
                assert active["type"] == "ActiveUsers"
                assert {u["user_id"] for u in active["data"]} == {
                    str(auth_headers.user_id),
                    str(other_headers.user_id),
                }

                joined = owner_ws.receive_json()
                assert joined["type"] == "UserJoined"
                assert joined["data"] == {
                    "user_id": str(other_headers.user_id),
                    "user_name": "Friend",
                }

                present = client.get(
                    f"/api/v1/lists/{shared_list.id}/active-users", headers=auth_headers
                ).json()
                assert len(present) == 2

                response = client.post(
                    f"/api/v1/lists/{shared_list.id}/items",
                    headers=other_headers,
                    json={"name": "Milk"},
                )
                assert response.status_code == 201

                added = owner_ws.receive_json()
                assert added["type"] == "ItemAdded"
                assert added["data"]["name"] == "Milk"
                assert friend_ws.receive_json()["type"] == "ItemAdded"

            left = owner_ws.receive_json()
            assert left["type"] == "UserLeft"
            assert left["data"]["user_id"] == str(other_headers.user_id)

    def test_unauthorized_join_is_ignored(self, client, auth_headers, other_headers, grocery_list):
        own_list = client.post(
            "/api/v1/lists", headers=other_headers, json={"name": "Mine"}
        ).json()

        with client.websocket_connect(ws_url(auth_headers)) as owner_ws:
            join(owner_ws, grocery_list.id)
            assert owner_ws.receive_json()["type"] == "ActiveUsers"

            with client.websocket_connect(ws_url(other_headers)) as stranger_ws:
                join(stranger_ws, grocery_list.id)
                join(stranger_ws, "not-a-uuid")
                join(stranger_ws, own_list["id"])

                # The first reply is for the list the user can read
                reply = stranger_ws.receive_json()
                assert reply["type"] == "ActiveUsers"
                assert reply["list_id"] == own_list["id"]

            client.post(
                f"/api/v1/lists/{grocery_list.id}/items", headers=auth_headers, json={"name": "Eggs"}
            )
            # No UserJoined or UserLeft reached the owner
            assert owner_ws.receive_json()["type"] == "ItemAdded"

    def test_leave_list_notifies_room(self, client, auth_headers, other_headers, shared_list):
        with client.websocket_connect(ws_url(auth_headers)) as owner_ws:
            join(owner_ws, shared_list.id)
            owner_ws.receive_json()

            with client.websocket_connect(ws_url(other_headers)) as friend_ws:
                join(friend_ws, shared_list.id)
                friend_ws.receive_json()
                assert owner_ws.receive_json()["type"] == "UserJoined"

                friend_ws.send_json({"type": "pong"})
                friend_ws.send_json({"type": "LeaveList", "list_id": str(shared_list.id)})
                assert owner_ws.receive_json()["type"] == "UserLeft"

                client.patch(
                    f"/api/v1/lists/{shared_list.id}/items/{uuid.uuid4()}/bought",
                    headers=auth_headers,
                    json={"is_bought": True},
                )
                item = client.post(
                    f"/api/v1/lists/{shared_list.id}/items",
                    headers=auth_headers,
                    json={"name": "Tea"},
                ).json()
                assert owner_ws.receive_json()["data"]["id"] == item["id"]

            # Disconnecting after an explicit leave sends nothing more; the
            # next message the owner sees is its own update
            client.delete(
                f"/api/v1/lists/{shared_list.id}/items/{item['id']}", headers=auth_headers
            )
            removed = owner_ws.receive_json()
            assert removed["type"] == "ItemRemoved"
            assert removed["data"] == {"id": item["id"]}

    def test_revoked_member_stays_in_room_but_cannot_mutate(
        self, client, auth_headers, other_headers, shared_list
    ):
        with client.websocket_connect(ws_url(auth_headers)) as owner_ws:
            join(owner_ws, shared_list.id)
            owner_ws.receive_json()

            with client.websocket_connect(ws_url(other_headers)) as friend_ws:
                join(friend_ws, shared_list.id)
                friend_ws.receive_json()
                owner_ws.receive_json()

                share_id = client.get(
                    f"/api/v1/lists/{shared_list.id}/shares", headers=auth_headers
                ).json()[0]["id"]
                client.delete(
                    f"/api/v1/lists/{shared_list.id}/shares/{share_id}", headers=auth_headers
                )

                response = client.post(
                    f"/api/v1/lists/{shared_list.id}/items",
                    headers=other_headers,
                    json={"name": "Cake"},
                )
                assert response.status_code == 403

                # Presence is not proactively evicted
                present = client.get(
                    f"/api/v1/lists/{shared_list.id}/active-users", headers=auth_headers
                ).json()
                assert {u["user_id"] for u in present} == {
                    str(auth_headers.user_id),
                    str(other_headers.user_id),
                }


class TestDisconnectCleanup:
    def test_closing_socket_clears_presence(
        self, client, auth_headers, other_headers, shared_list
    ):
        hub = app.state.hub

        with client.websocket_connect(ws_url(auth_headers)) as owner_ws:
            join(owner_ws, shared_list.id)
            owner_ws.receive_json()

            for _ in range(5):
                with client.websocket_connect(ws_url(other_headers)) as friend_ws:
                    join(friend_ws, shared_list.id)
                    friend_ws.receive_json()
                    assert owner_ws.receive_json()["type"] == "UserJoined"

                left = owner_ws.receive_json()
                assert left["type"] == "UserLeft"
                assert left["data"]["user_id"] == str(other_headers.user_id)

                rooms, reverse = hub.registry.snapshot()
                assert list(reverse.values()) == [shared_list.id]
                assert len(rooms[shared_list.id]) == 1

            # Exactly one UserLeft per departure: the next event is the item
            client.post(
                f"/api/v1/lists/{shared_list.id}/items", headers=auth_headers, json={"name": "Jam"}
            )
            assert owner_ws.receive_json()["type"] == "ItemAdded"

        assert hub.registry.snapshot() == ({}, {})
        assert len(hub.connections) == 0
