import json

import llm.llm as llm_module


async def test_create_text_block(client, register, fake_llm):
    headers = await register()
    fake_llm("# Rivers\n\nRivers flow downhill.")

    response = await client.post("/api/blocks", json={"title": "Rivers", "kind": "text"}, headers=headers)

    assert response.status_code == 200
    document = response.json()
    assert document["kind"] == "text"
    assert document["content"].startswith("# Rivers")

    versions = await client.get("/api/document", params={"id": document["id"]}, headers=headers)
    assert len(versions.json()) == 1


async def test_create_code_block_strips_fences(client, register, fake_llm):
    headers = await register()
    fake_llm("```python\nprint('hi')\n```")

    response = await client.post("/api/blocks", json={"title": "Say hi", "kind": "code"}, headers=headers)

    assert response.json()["content"] == "print('hi')"


async def test_create_image_block(client, register, monkeypatch):
    headers = await register()

    async def fake_image(prompt):
        return "aW1hZ2U="

    monkeypatch.setattr(llm_module, "generate_image", fake_image)

    response = await client.post("/api/blocks", json={"title": "A cat", "kind": "image"}, headers=headers)

    assert response.json()["content"] == "aW1hZ2U="


async def test_update_block_saves_new_version(client, register, fake_llm):
    headers = await register()
    fake_llm("First draft.", "Second draft.")
    created = (await client.post("/api/blocks", json={"title": "Draft"}, headers=headers)).json()

    response = await client.post(
        f"/api/blocks/{created['id']}/update", json={"description": "make it better"}, headers=headers
    )

    assert response.status_code == 200
    versions = await client.get("/api/document", params={"id": created["id"]}, headers=headers)
    assert [v["content"] for v in versions.json()] == ["First draft.", "Second draft."]


async def test_update_block_of_another_user(client, register, fake_llm):
    owner = await register("owner@example.com")
    other = await register("other@example.com")
    fake_llm("Draft.")
    created = (await client.post("/api/blocks", json={"title": "Draft"}, headers=owner)).json()

    response = await client.post(
        f"/api/blocks/{created['id']}/update", json={"description": "mine"}, headers=other
    )

    assert response.status_code == 401


async def test_request_suggestions(client, register, fake_llm):
    headers = await register()
    suggestions = [
        {"originalSentence": "Rivers flow.", "suggestedSentence": "Rivers flow downhill.", "description": "More precise"},
        {"originalSentence": "", "suggestedSentence": "dropped"},
    ]
    fake_llm("Rivers flow.", json.dumps(suggestions))
    created = (await client.post("/api/blocks", json={"title": "Rivers"}, headers=headers)).json()

    response = await client.post(f"/api/blocks/{created['id']}/suggestions", headers=headers)

    assert response.status_code == 200
    saved = response.json()
    assert len(saved) == 1
    assert saved[0]["suggestedText"] == "Rivers flow downhill."
    assert saved[0]["isResolved"] is False

    listed = await client.get("/api/suggestions", params={"documentId": created["id"]}, headers=headers)
    assert [s["id"] for s in listed.json()] == [saved[0]["id"]]


async def test_suggestions_only_for_text(client, register, fake_llm):
    headers = await register()
    fake_llm("print(1)")
    created = (await client.post("/api/blocks", json={"title": "Code", "kind": "code"}, headers=headers)).json()

    response = await client.post(f"/api/blocks/{created['id']}/suggestions", headers=headers)

    assert response.status_code == 400


async def test_get_suggestions_checks(client, register):
    headers = await register()
    assert (await client.get("/api/suggestions", headers=headers)).status_code == 400
    assert (await client.get("/api/suggestions", params={"documentId": "d"})).status_code == 401

    empty = await client.get("/api/suggestions", params={"documentId": "d"}, headers=headers)
    assert empty.json() == []
