from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from models.document import Suggestion
from utils.queries import build_suggestion, get_documents_by_id, save_suggestions


async def save_version(client, headers, content, id="doc-1"):
    response = await client.post(
        "/api/document",
        params={"id": id},
        json={"title": "Essay", "kind": "text", "content": content},
        headers=headers,
    )
    assert response.status_code == 200, response.text
    return response.json()


async def test_get_document_without_id(client, register):
    headers = await register()
    response = await client.get("/api/document", headers=headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "Missing id"


async def test_missing_id_is_checked_before_auth(client):
    assert (await client.get("/api/document")).status_code == 400
    assert (await client.get("/api/document", params={"id": "doc-1"})).status_code == 401


async def test_get_unknown_document(client, register):
    headers = await register()
    response = await client.get("/api/document", params={"id": "nope"}, headers=headers)
    assert response.status_code == 404


async def test_versions_are_returned_oldest_first(client, register):
    headers = await register()
    await save_version(client, headers, "v1")
    await save_version(client, headers, "v2")

    response = await client.get("/api/document", params={"id": "doc-1"}, headers=headers)

    assert response.status_code == 200
    assert [d["content"] for d in response.json()] == ["v1", "v2"]
    assert set(response.json()[0]) == {"id", "createdAt", "title", "content", "kind", "userId"}


async def test_get_document_of_another_user(client, register):
    owner = await register("owner@example.com")
    other = await register("other@example.com")
    await save_version(client, owner, "v1")

    response = await client.get("/api/document", params={"id": "doc-1"}, headers=other)

    assert response.status_code == 401


async def test_post_document_validates(client, register):
    headers = await register()
    body = {"title": "Essay", "kind": "text", "content": "x"}

    assert (await client.post("/api/document", json=body, headers=headers)).status_code == 400
    assert (await client.post("/api/document", params={"id": "d"}, json=body)).status_code == 401

    bad_kind = await client.post(
        "/api/document", params={"id": "d"}, json={**body, "kind": "video"}, headers=headers
    )
    assert bad_kind.status_code == 422


async def test_patch_with_mismatched_owner(client, register):
    owner = await register("owner@example.com")
    other = await register("other@example.com")
    first = await save_version(client, owner, "v1")

    response = await client.patch(
        "/api/document", params={"id": "doc-1"}, json={"timestamp": first["createdAt"]}, headers=other
    )

    assert response.status_code == 401


async def test_patch_unknown_document(client, register):
    headers = await register()
    response = await client.patch(
        "/api/document", params={"id": "nope"}, json={"timestamp": "2026-01-01T00:00:00"}, headers=headers
    )
    assert response.status_code == 404


async def test_patch_deletes_later_versions_and_their_suggestions(client, register, db):
    headers = await register()
    await save_version(client, headers, "v1")
    await save_version(client, headers, "v2")
    await save_version(client, headers, "v3")

    versions = await get_documents_by_id(db, "doc-1")
    user_id = versions[0].user_id
    item = {"originalSentence": "a", "suggestedSentence": "b", "description": "c"}
    await save_suggestions(db, [
        build_suggestion(versions[0], item, user_id),
        build_suggestion(versions[1], item, user_id),
    ])

    listed = await client.get("/api/document", params={"id": "doc-1"}, headers=headers)
    timestamp = listed.json()[0]["createdAt"]

    response = await client.patch(
        "/api/document", params={"id": "doc-1"}, json={"timestamp": timestamp}, headers=headers
    )

    assert response.status_code == 200
    assert response.text == "Deleted"
    remaining = await client.get("/api/document", params={"id": "doc-1"}, headers=headers)
    assert [d["content"] for d in remaining.json()] == ["v1"]

    db.expire_all()
    suggestions = (await db.execute(select(Suggestion))).scalars().all()
    assert len(suggestions) == 1


async def test_created_at_is_serialized_the_same_on_post_and_get(client, register):
    headers = await register()
    first = await save_version(client, headers, "v1")

    listed = await client.get("/api/document", params={"id": "doc-1"}, headers=headers)

    assert listed.json()[0]["createdAt"] == first["createdAt"]
    assert first["createdAt"].endswith("Z")


def _with_offset(created_at, hours):
    moment = datetime.fromisoformat(created_at.replace("Z", "+00:00"))
    return moment.astimezone(timezone(timedelta(hours=hours))).isoformat()


@pytest.mark.parametrize("as_sent", [
    lambda ts: ts,
    lambda ts: ts.replace("Z", "+00:00"),
    lambda ts: ts.replace("Z", ""),
    lambda ts: _with_offset(ts, 2),
], ids=["z-suffix", "utc-offset", "naive-utc", "other-offset"])
async def test_revert_accepts_returned_created_at(client, register, as_sent):
    headers = await register()
    first = await save_version(client, headers, "v1")
    await save_version(client, headers, "v2")

    # Versions are loaded into the request session before the delete runs
    response = await client.patch(
        "/api/document",
        params={"id": "doc-1"},
        json={"timestamp": as_sent(first["createdAt"])},
        headers=headers,
    )

    assert response.status_code == 200, response.text
    remaining = await client.get("/api/document", params={"id": "doc-1"}, headers=headers)
    assert [d["content"] for d in remaining.json()] == ["v1"]
