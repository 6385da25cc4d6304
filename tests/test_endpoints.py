import pytest

from relay.handlers import OPERATIONS


def _page(pid, props, url=None):
    return {"object": "page", "id": pid, "url": url or f"https://notion.so/{pid}", "properties": props}


@pytest.mark.parametrize("name", sorted(OPERATIONS))
def test_missing_token_makes_no_outbound_call(name, client, notion):
    r = client.post(f"/{name}", json={"page_id": "p1", "database_id": "d1"})
    assert r.status_code == 401
    assert r.json() == {"success": False, "message": "Missing notion-token in headers"}
    assert notion.calls == []


@pytest.mark.parametrize("name", sorted(OPERATIONS))
def test_missing_fields_rejected(name, client, notion, headers):
    r = client.post(f"/{name}", json={}, headers=headers)
    assert r.status_code == 400
    assert r.json()["success"] is False
    assert "required" in r.json()["message"]
    assert notion.calls == []


def test_non_object_body_rejected(client, notion, headers):
    r = client.post("/delete-page", content=b"not json", headers=headers)
    assert r.status_code == 400
    r = client.post("/delete-page", json=["p1"], headers=headers)
    assert r.status_code == 400
    assert notion.calls == []


def test_wrongly_typed_field_rejected(client, notion, headers):
    r = client.post("/create-database", json={"page_id": "p", "title": "T", "properties": {"A": 1}}, headers=headers)
    assert r.status_code == 400
    assert r.json()["message"].startswith("properties.A")
    assert notion.calls == []


def test_create_database(client, notion, headers):
    notion.on(
        "POST",
        "databases",
        {"id": "d1", "url": "https://notion.so/d1", "title": [{"plain_text": "Tasks"}]},
    )
    r = client.post(
        "/create-database",
        json={"page_id": "p0", "title": "Tasks", "properties": {"Name": "title", "Due": "date"}},
        headers=headers,
    )
    assert r.status_code == 200
    assert r.json() == {
        "success": True,
        "database_id": "d1",
        "title": "Tasks",
        "url": "https://notion.so/d1",
    }
    sent = notion.calls[0]["json"]
    assert sent["parent"] == {"type": "page_id", "page_id": "p0"}
    assert sent["title"] == [{"type": "text", "text": {"content": "Tasks"}}]
    assert sent["properties"] == {"Name": {"title": {}}, "Due": {"date": {}}}


def test_create_page_formats_by_database_schema(client, notion, headers):
    notion.on(
        "GET",
        "databases/d1",
        {"id": "d1", "properties": {"Name": {"type": "title"}, "Status": {"type": "status"}, "Score": {"type": "number"}}},
    )
    notion.on("POST", "pages", {"id": "p9", "url": "https://notion.so/p9"})
    r = client.post(
        "/create-page",
        json={"database_id": "d1", "properties": {"Name": "Task", "status": "Todo", "Score": "5", "Bogus": 1}},
        headers=headers,
    )
    assert r.json() == {"success": True, "page_id": "p9", "url": "https://notion.so/p9"}
    assert notion.methods() == [("GET", "databases/d1"), ("POST", "pages")]
    sent = notion.calls[1]["json"]
    assert sent["parent"] == {"database_id": "d1"}
    assert sent["properties"] == {
        "Name": {"title": [{"text": {"content": "Task"}}]},
        "Status": {"status": {"name": "Todo"}},
        "Score": {"number": 5},
    }


def test_get_database_properties(client, notion, headers):
    notion.on(
        "GET",
        "databases/d1",
        {"id": "d1", "properties": {"Name": {"type": "title"}, "Created": {"type": "created_time"}, "Tags": {"type": "multi_select"}}},
    )
    r = client.post("/get-database-properties", json={"database_id": "d1"}, headers=headers)
    assert r.json() == {
        "success": True,
        "database_id": "d1",
        "allProperties": ["Name", "Created", "Tags"],
        "editableProperties": ["Name", "Tags"],
    }


def test_get_page_properties(client, notion, headers):
    notion.on("GET", "pages/p1", _page("p1", {"Name": {"type": "title"}, "Edited": {"type": "last_edited_time"}}))
    r = client.post("/get-page-properties", json={"page_id": "p1"}, headers=headers)
    assert r.json() == {
        "success": True,
        "page_id": "p1",
        "allProperties": ["Name", "Edited"],
        "editableProperties": ["Name"],
    }


def test_delete_page_archives(client, notion, headers):
    notion.on("PATCH", "pages/p1", {"id": "p1", "archived": True})
    r = client.post("/delete-page", json={"page_id": "p1"}, headers=headers)
    assert r.json() == {"success": True, "message": "Page p1 archived successfully", "page_id": "p1"}
    assert notion.calls[0]["json"] == {"archived": True}


def test_delete_database_archives(client, notion, headers):
    notion.on("PATCH", "databases/d1", {"id": "d1", "archived": True})
    r = client.post("/delete-database", json={"database_id": "d1"}, headers=headers)
    assert r.json() == {
        "success": True,
        "message": "Database d1 archived successfully",
        "database_id": "d1",
    }
    assert notion.methods() == [("PATCH", "databases/d1")]


def test_update_page_uses_key_heuristics(client, notion, headers):
    notion.on("PATCH", "pages/p1", {"id": "p1", "url": "https://notion.so/p1"})
    r = client.post(
        "/update-page",
        json={"page_id": "p1", "properties": {"Title": "Hello", "Deadline": "2024-01-01"}},
        headers=headers,
    )
    assert r.json() == {"success": True, "page_id": "p1", "url": "https://notion.so/p1"}
    assert notion.methods() == [("PATCH", "pages/p1")]
    assert notion.calls[0]["json"] == {
        "properties": {
            "Title": {"title": [{"text": {"content": "Hello"}}]},
            "Deadline": {"date": {"start": "2024-01-01"}},
        }
    }


def test_update_page1_replaces_content(client, notion, headers):
    notion.on(
        "GET",
        "pages/p1",
        _page("p1", {"Name": {"type": "title"}, "Status": {"type": "status"}, "Formula": {"type": "formula"}}),
    )
    notion.on("PATCH", "pages/p1", _page("p1", {}))
    notion.on("GET", "blocks/p1/children", {"results": [{"id": "b1"}, {"id": "b2"}, {"id": "b3"}]})
    for bid in ("b1", "b2", "b3"):
        notion.on("DELETE", f"blocks/{bid}", {"id": bid, "archived": True})
    notion.on("PATCH", "blocks/p1/children", {"results": [{"id": "n1"}, {"id": "n2"}]})

    r = client.post(
        "/update-page1",
        json={"page_id": "p1", "status": "Done", "nope": "x", "Formula": "1", "content": ["a", "b"]},
        headers=headers,
    )
    assert r.status_code == 200
    assert r.json() == {
        "success": True,
        "page_id": "p1",
        "updatedProperties": ["Status"],
        "appendedBlocks": 2,
        "skippedProperties": ["nope", "Formula"],
    }
    assert notion.methods() == [
        ("GET", "pages/p1"),
        ("PATCH", "pages/p1"),
        ("GET", "blocks/p1/children"),
        ("DELETE", "blocks/b1"),
        ("DELETE", "blocks/b2"),
        ("DELETE", "blocks/b3"),
        ("PATCH", "blocks/p1/children"),
    ]
    assert notion.calls[1]["json"] == {"properties": {"Status": {"status": {"name": "Done"}}}}
    children = notion.calls[-1]["json"]["children"]
    assert len(children) == 2
    assert all(b["type"] == "paragraph" for b in children)


def test_update_page1_without_matches_or_content(client, notion, headers):
    notion.on("GET", "pages/p1", _page("p1", {"Name": {"type": "title"}}))
    r = client.post("/update-page1", json={"page_id": "p1", "Other": "x"}, headers=headers)
    assert r.json() == {
        "success": True,
        "page_id": "p1",
        "updatedProperties": [],
        "appendedBlocks": 0,
        "skippedProperties": ["Other"],
    }
    assert notion.methods() == [("GET", "pages/p1")]


def test_get_database_rows(client, notion, headers):
    props = lambda name, tags: {
        "Name": {"type": "title", "title": [{"plain_text": name}]},
        "Tags": {"type": "multi_select", "multi_select": [{"name": t} for t in tags]},
    }
    notion.on(
        "POST",
        "databases/d1/query",
        {"results": [_page("r1", props("One", ["a", "b"])), _page("r2", props("Two", []))]},
    )
    r = client.post("/get-database-rows", json={"database_id": "d1"}, headers=headers)
    data = r.json()
    assert data["success"] is True
    assert data["total"] == 2
    assert data["rows"][0] == {
        "page_id": "r1",
        "url": "https://notion.so/r1",
        "properties": {"Name": "One", "Tags": "a, b"},
    }
    assert data["rows"][1]["properties"]["Tags"] == ""
    assert notion.calls[0]["json"] == {}


def test_get_page_details(client, notion, headers):
    notion.on(
        "GET",
        "pages/p1",
        _page(
            "p1",
            {
                "Name": {"type": "title", "title": [{"plain_text": "Row"}]},
                "When": {"type": "date", "date": {"start": "2024-03-01"}},
                "Rollup": {"type": "rollup", "rollup": {}},
            },
        ),
    )
    r = client.post("/get-page-details", json={"page_id": "p1"}, headers=headers)
    assert r.json() == {
        "success": True,
        "page_id": "p1",
        "url": "https://notion.so/p1",
        "properties": {"Name": "Row", "When": "2024-03-01", "Rollup": ""},
    }


def test_notion_error_is_mirrored(client, notion, headers):
    body = {"object": "error", "status": 401, "code": "unauthorized", "message": "API token is invalid."}
    notion.on("GET", "pages/p1", body, status=401)
    r = client.post("/get-page-details", json={"page_id": "p1"}, headers=headers)
    assert r.status_code == 500
    assert r.json() == {"success": False, "error": body}


def test_partial_failure_surfaces_error(client, notion, headers):
    notion.on("GET", "pages/p1", _page("p1", {}))
    notion.on("GET", "blocks/p1/children", {"results": [{"id": "b1"}]})
    notion.on("DELETE", "blocks/b1", {"id": "b1"})
    notion.on("PATCH", "blocks/p1/children", {"message": "body failed validation"}, status=400)
    r = client.post("/update-page1", json={"page_id": "p1", "content": "x"}, headers=headers)
    assert r.status_code == 500
    assert r.json()["error"] == {"message": "body failed validation"}
    assert ("DELETE", "blocks/b1") in notion.methods()


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200 and r.json()["ok"] is True


@pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
def test_create_page_writes_null_for_non_finite_number(literal, client, notion, headers):
    notion.on("GET", "databases/d1", {"id": "d1", "properties": {"Score": {"type": "number"}}})
    notion.on("POST", "pages", {"id": "p9", "url": "https://notion.so/p9"})
    body = '{"database_id": "d1", "properties": {"Score": %s}}' % literal
    r = client.post(
        "/create-page",
        content=body.encode(),
        headers={**headers, "content-type": "application/json"},
    )
    assert r.status_code == 200
    assert r.json() == {"success": True, "page_id": "p9", "url": "https://notion.so/p9"}
    assert notion.calls[1]["json"]["properties"] == {"Score": {"number": None}}
