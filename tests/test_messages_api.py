"""
Tests para los endpoints de mensajería
"""
from bson import ObjectId
from fastapi import status

async def test_messages_require_auth(client):
    response = await client.get("/messages")
    assert response.status_code == status.HTTP_401_UNAUTHORIZED

async def test_send_and_open_thread(client, make_user, auth_headers):
    ana = await make_user("Ana", "Quliyeva")
    bob = await make_user("Bob", "Hasanov", is_online=True)

    r = await client.post("/messages", headers=auth_headers(ana), json={
        "receiver_id": bob,
        "content": "Salam!",
        "attachments": [{"name": "cv.pdf", "url": "/uploads/cv.pdf", "type": "application/pdf", "size": 2048}],
    })
    assert r.status_code == status.HTTP_201_CREATED
    sent = r.json()["message"]
    assert sent["sender_id"] == ana
    assert sent["receiver_id"] == bob
    assert sent["read"] is False
    assert sent["attachments"][0]["size"] == 2048
    assert sent["sender"]["id"] == ana
    assert sent["sender"]["name"] == "Ana Quliyeva"
    assert sent["receiver"]["id"] == bob

    r = await client.get(f"/messages/{ana}", headers=auth_headers(bob))
    assert r.status_code == status.HTTP_200_OK
    body = r.json()
    assert [m["id"] for m in body["messages"]] == [sent["id"]]
    assert body["messages"][0]["sender"]["name"] == "Ana Quliyeva"
    assert body["messages"][0]["receiver"]["id"] == bob
    assert body["messages"][0]["receiver"]["is_online"] is True
    assert body["other_user"]["name"] == "Ana Quliyeva"
    assert body["pagination"] == {"current": 1, "pages": 1, "total": 1}

    # Abrir el hilo marca como leído lo recibido
    r = await client.get("/messages", headers=auth_headers(bob))
    conv = r.json()["conversations"][0]
    assert conv["unread_count"] == 0
    assert conv["last_message"]["read"] is True

async def test_conversation_list_for_sender(client, make_user, auth_headers):
    ana = await make_user("Ana")
    bob = await make_user("Bob", is_online=True)
    await client.post("/messages", headers=auth_headers(ana), json={"receiver_id": bob, "content": "hola"})
    await client.post("/messages", headers=auth_headers(bob), json={"receiver_id": ana, "content": "qué tal"})

    r = await client.get("/messages", headers=auth_headers(ana))
    assert r.status_code == status.HTTP_200_OK
    data = r.json()
    assert data["pagination"] == {"current": 1, "pages": 1, "total": 1}
    conv = data["conversations"][0]
    assert conv["user"]["id"] == bob
    assert conv["user"]["is_online"] is True
    assert conv["last_message"]["content"] == "qué tal"
    assert conv["unread_count"] == 1

    r = await client.get("/messages/unread-count", headers=auth_headers(ana))
    assert r.json() == {"unread": 1}

async def test_open_thread_without_marking(client, make_user, auth_headers):
    ana = await make_user("Ana")
    bob = await make_user("Bob")
    await client.post("/messages", headers=auth_headers(ana), json={"receiver_id": bob, "content": "hola"})

    r = await client.get(f"/messages/{ana}", params={"mark_read": "false"}, headers=auth_headers(bob))
    assert r.status_code == status.HTTP_200_OK
    r = await client.get("/messages/unread-count", headers=auth_headers(bob))
    assert r.json() == {"unread": 1}

    r = await client.put(f"/messages/{ana}/read-all", headers=auth_headers(bob))
    assert r.json() == {"updated": 1}
    r = await client.put(f"/messages/{ana}/read-all", headers=auth_headers(bob))
    assert r.json() == {"updated": 0}

async def test_send_validation_errors(client, make_user, auth_headers):
    ana = await make_user("Ana")
    bob = await make_user("Bob")
    headers = auth_headers(ana)

    r = await client.post("/messages", headers=headers, json={"receiver_id": ana, "content": "yo"})
    assert r.status_code == status.HTTP_400_BAD_REQUEST
    r = await client.post("/messages", headers=headers, json={"receiver_id": bob, "content": "   "})
    assert r.status_code == status.HTTP_400_BAD_REQUEST
    r = await client.post("/messages", headers=headers, json={"receiver_id": bob, "content": "x" * 2001})
    assert r.status_code == status.HTTP_400_BAD_REQUEST
    r = await client.post("/messages", headers=headers, json={"receiver_id": "nope", "content": "hola"})
    assert r.status_code == status.HTTP_400_BAD_REQUEST
    r = await client.post("/messages", headers=headers, json={"receiver_id": str(ObjectId()), "content": "hola"})
    assert r.status_code == status.HTTP_404_NOT_FOUND
    r = await client.post("/messages", headers=headers, json={"content": "hola"})
    assert r.status_code == 422

async def test_thread_with_unknown_user(client, make_user, auth_headers):
    ana = await make_user("Ana")
    r = await client.get(f"/messages/{ObjectId()}", headers=auth_headers(ana))
    assert r.status_code == status.HTTP_404_NOT_FOUND

async def test_bad_pagination_is_400(client, make_user, auth_headers):
    ana = await make_user("Ana")
    r = await client.get("/messages", params={"page": 0}, headers=auth_headers(ana))
    assert r.status_code == status.HTTP_400_BAD_REQUEST
    r = await client.get("/messages", params={"limit": 0}, headers=auth_headers(ana))
    assert r.status_code == status.HTTP_400_BAD_REQUEST

async def test_page_past_the_end(client, make_user, auth_headers):
    ana = await make_user("Ana")
    bob = await make_user("Bob")
    await client.post("/messages", headers=auth_headers(bob), json={"receiver_id": ana, "content": "hola"})

    r = await client.get("/messages", params={"page": 3, "limit": 5}, headers=auth_headers(ana))
    assert r.status_code == status.HTTP_200_OK
    assert r.json() == {"conversations": [], "pagination": {"current": 3, "pages": 1, "total": 1}}

async def test_mark_single_message_read(client, make_user, auth_headers):
    ana = await make_user("Ana")
    bob = await make_user("Bob")
    r = await client.post("/messages", headers=auth_headers(ana), json={"receiver_id": bob, "content": "hola"})
    message_id = r.json()["message"]["id"]

    r = await client.put(f"/messages/{message_id}/read", headers=auth_headers(ana))
    assert r.status_code == status.HTTP_403_FORBIDDEN

    r = await client.put(f"/messages/{message_id}/read", headers=auth_headers(bob))
    assert r.status_code == status.HTTP_200_OK
    assert r.json()["message"]["read"] is True
    assert r.json()["message"]["read_at"] is not None

    r = await client.put(f"/messages/{ObjectId()}/read", headers=auth_headers(bob))
    assert r.status_code == status.HTTP_404_NOT_FOUND

async def test_delete_message(client, make_user, auth_headers):
    ana = await make_user("Ana")
    bob = await make_user("Bob")
    eve = await make_user("Eve")
    r = await client.post("/messages", headers=auth_headers(ana), json={"receiver_id": bob, "content": "hola"})
    message_id = r.json()["message"]["id"]

    r = await client.delete(f"/messages/{message_id}", headers=auth_headers(eve))
    assert r.status_code == status.HTTP_403_FORBIDDEN

    r = await client.delete(f"/messages/{message_id}", headers=auth_headers(bob))
    assert r.status_code == status.HTTP_200_OK

    r = await client.delete(f"/messages/{message_id}", headers=auth_headers(ana))
    assert r.status_code == status.HTTP_404_NOT_FOUND

    r = await client.get(f"/messages/{bob}", headers=auth_headers(ana))
    assert r.json()["messages"] == []
    r = await client.get("/messages", headers=auth_headers(ana))
    assert r.json()["conversations"] == []

async def test_thread_page_includes_both_participants(client, make_user, auth_headers):
    ana = await make_user("Ana", "Quliyeva", profile_picture="/uploads/ana.png")
    bob = await make_user("Bob", "Hasanov")
    await client.post("/messages", headers=auth_headers(ana), json={"receiver_id": bob, "content": "uno"})
    await client.post("/messages", headers=auth_headers(bob), json={"receiver_id": ana, "content": "dos"})

    r = await client.get(f"/messages/{bob}", headers=auth_headers(ana))
    messages = r.json()["messages"]
    assert [m["content"] for m in messages] == ["uno", "dos"]
    assert messages[0]["sender"]["profile_picture"] == "/uploads/ana.png"
    assert messages[0]["receiver"]["name"] == "Bob Hasanov"
    assert messages[1]["sender"]["id"] == bob
    assert messages[1]["receiver"]["id"] == ana
