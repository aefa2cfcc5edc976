import pytest

ALICE = {"X-User-Id": "alice"}
BOB = {"X-User-Id": "bob"}


@pytest.mark.asyncio
async def test_follow_then_unfollow(api_client):
	response = await api_client.post("/users/follow/bob", headers=ALICE)
	assert response.status_code == 200
	assert response.json() == {"success": True, "isFollowing": True, "followersCount": 1}

	response = await api_client.delete("/users/follow/bob", headers=ALICE)
	assert response.status_code == 200
	assert response.json()["isFollowing"] is False
	assert response.json()["followersCount"] == 0


@pytest.mark.asyncio
async def test_follow_error_codes(api_client):
	self_follow = await api_client.post("/users/follow/alice", headers=ALICE)
	assert self_follow.status_code == 400
	assert self_follow.json()["code"] == "VALIDATION_ERROR"

	missing = await api_client.post("/users/follow/ghost", headers=ALICE)
	assert missing.status_code == 404
	assert missing.json()["code"] == "NOT_FOUND"

	await api_client.post("/users/follow/bob", headers=ALICE)
	duplicate = await api_client.post("/users/follow/bob", headers=ALICE)
	assert duplicate.status_code == 409
	assert duplicate.json()["code"] == "ALREADY_FOLLOWING"

	not_following = await api_client.delete("/users/follow/carol", headers=ALICE)
	assert not_following.status_code == 409
	assert not_following.json()["code"] == "NOT_FOLLOWING"


@pytest.mark.asyncio
async def test_followers_and_following_lists(api_client):
	await api_client.post("/users/follow/bob", headers=ALICE)
	await api_client.post("/users/follow/alice", headers=BOB)
	await api_client.post("/users/follow/carol", headers=BOB)

	followers = await api_client.get("/users/bob/followers", headers=ALICE)
	following = await api_client.get("/users/bob/following", headers=ALICE)

	assert followers.json()["count"] == 1
	assert followers.json()["items"][0]["followerId"] == "alice"
	assert {row["followeeId"] for row in following.json()["items"]} == {"alice", "carol"}


@pytest.mark.asyncio
async def test_check_mutual_reflects_both_directions(api_client):
	none = await api_client.get("/private-chat/check-mutual/bob", headers=ALICE)
	assert none.json()["relationship"] == "none"
	assert none.json()["isMutualFollow"] is False

	await api_client.post("/users/follow/bob", headers=ALICE)
	one_way = (await api_client.get("/private-chat/check-mutual/alice", headers=BOB)).json()
	assert one_way["currentUserFollows"] is False
	assert one_way["otherUserFollows"] is True
	assert one_way["relationship"] == "one_way"

	await api_client.post("/users/follow/alice", headers=BOB)
	mutual = (await api_client.get("/private-chat/check-mutual/bob", headers=ALICE)).json()
	assert mutual["isMutualFollow"] is True
	assert mutual["message"]
