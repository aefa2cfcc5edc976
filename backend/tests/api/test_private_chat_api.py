import pytest

ALICE = {"X-User-Id": "alice"}
BOB = {"X-User-Id": "bob"}
CAROL = {"X-User-Id": "carol"}


async def _befriend(api_client):
	await api_client.post("/users/follow/bob", headers=ALICE)
	await api_client.post("/users/follow/alice", headers=BOB)


@pytest.mark.asyncio
async def test_start_chat_is_forbidden_without_mutual_follow(api_client):
	await api_client.post("/users/follow/bob", headers=ALICE)
	response = await api_client.post("/private-chat", json={"userId": "bob"}, headers=ALICE)
	assert response.status_code == 403
	body = response.json()
	assert body["code"] == "NOT_MUTUAL_FOLLOW"
	assert body["detail"] == "You can only chat with users who follow you back"


@pytest.mark.asyncio
async def test_start_chat_creates_once(api_client):
	await _befriend(api_client)

	created = await api_client.post("/private-chat", json={"userId": "bob"}, headers=ALICE)
	assert created.status_code == 201
	body = created.json()
	assert body["isNew"] is True
	assert body["unreadCount"] == 0
	assert body["chat"]["otherParticipantId"] == "bob"

	again = await api_client.post("/private-chat", json={"userId": "alice"}, headers=BOB)
	assert again.status_code == 200
	assert again.json()["isNew"] is False
	assert again.json()["chatId"] == body["chatId"]


@pytest.mark.asyncio
async def test_message_flow(api_client):
	await _befriend(api_client)
	chat_id = (await api_client.post("/private-chat", json={"userId": "bob"}, headers=ALICE)).json()["chatId"]

	sent = await api_client.post(f"/private-chat/{chat_id}/messages", json={"text": " hi bob "}, headers=ALICE)
	assert sent.status_code == 201
	assert sent.json()["text"] == "hi bob"
	assert sent.json()["senderId"] == "alice"

	chats = (await api_client.get("/private-chat", headers=BOB)).json()
	assert chats["count"] == 1
	assert chats["chats"][0]["unreadCount"] == 1
	assert chats["chats"][0]["lastMessage"]["text"] == "hi bob"

	read = await api_client.put(f"/private-chat/{chat_id}/read", headers=BOB)
	assert read.json() == {"success": True, "updated": 1}

	page = (await api_client.get(f"/private-chat/{chat_id}/messages", params={"limit": 10}, headers=BOB)).json()
	assert page["totalMessages"] == 1
	assert page["totalPages"] == 1
	assert page["messages"][0]["readBy"] == ["alice", "bob"]


@pytest.mark.asyncio
async def test_empty_message_is_rejected(api_client):
	await _befriend(api_client)
	chat_id = (await api_client.post("/private-chat", json={"userId": "bob"}, headers=ALICE)).json()["chatId"]
	response = await api_client.post(f"/private-chat/{chat_id}/messages", json={"text": "   "}, headers=ALICE)
	assert response.status_code == 400
	assert response.json()["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_unfollow_blocks_further_messages(api_client):
	await _befriend(api_client)
	chat_id = (await api_client.post("/private-chat", json={"userId": "bob"}, headers=ALICE)).json()["chatId"]
	await api_client.delete("/users/follow/alice", headers=BOB)

	response = await api_client.post(f"/private-chat/{chat_id}/messages", json={"text": "hello?"}, headers=ALICE)
	assert response.status_code == 403
	assert response.json()["code"] == "NOT_MUTUAL_FOLLOW"


@pytest.mark.asyncio
async def test_non_participants_see_not_found(api_client):
	await _befriend(api_client)
	chat_id = (await api_client.post("/private-chat", json={"userId": "bob"}, headers=ALICE)).json()["chatId"]

	assert (await api_client.get(f"/private-chat/{chat_id}", headers=CAROL)).status_code == 404
	assert (await api_client.get(f"/private-chat/{chat_id}/messages", headers=CAROL)).status_code == 404
	assert (await api_client.delete(f"/private-chat/{chat_id}", headers=CAROL)).status_code == 404


@pytest.mark.asyncio
async def test_delete_chat(api_client):
	await _befriend(api_client)
	chat_id = (await api_client.post("/private-chat", json={"userId": "bob"}, headers=ALICE)).json()["chatId"]

	deleted = await api_client.delete(f"/private-chat/{chat_id}", headers=BOB)
	assert deleted.json() == {"success": True}
	assert (await api_client.get(f"/private-chat/{chat_id}", headers=ALICE)).status_code == 404


@pytest.mark.asyncio
async def test_start_chat_requires_user_id(api_client):
	response = await api_client.post("/private-chat", json={}, headers=ALICE)
	assert response.status_code == 422
