import pytest

from kpi_backend.api.users import USERS_LIST_PATHS


def test_list_users_returns_active_summaries(client):
    resp = client.post("/users/list", json={})

    assert resp.status_code == 200
    body = resp.json()
    assert body["ok"] is True
    assert [i["manv"] for i in body["items"]] == ["E001", "E002", "E003", "E004"]
    assert body["total"] == 4
    admin = body["items"][2]
    assert admin["role_level"] == 90
    assert admin["active"] is True


@pytest.mark.parametrize("path", USERS_LIST_PATHS)
def test_list_aliases_share_handler(client, path):
    resp = client.post(path)
    assert resp.status_code == 200
    assert resp.json()["total"] == 4


def test_list_users_in_scope_filters_by_caller_scope(client):
    resp = client.post("/listUsersInScope", json={"manv": "e001"})

    # E001 sees T1 and T2; E004 has no team and is always visible.
    assert [i["manv"] for i in resp.json()["items"]] == ["E001", "E002", "E004"]


def test_list_users_in_scope_without_scope_is_unrestricted(client):
    resp = client.post("/listUsersInScope", json={"manv": "E002"})
    assert resp.json()["total"] == 4


def test_list_users_store_error(client, gateway):
    gateway.fail = True
    resp = client.post("/users/list", json={})
    assert resp.status_code == 500
    assert resp.json()["ok"] is False


def test_enrich_single(client):
    resp = client.post("/users/enrich", json={"manv": "e003"})

    assert resp.status_code == 200
    user = resp.json()["user"]
    assert user["manv"] == "E003"
    assert user["role_level"] == user["roleLevel"] == 90


def test_enrich_single_not_found(client):
    resp = client.post("/users/enrich", json={"manv": "NOPE"})
    assert resp.status_code == 404
    assert resp.json() == {"ok": False, "error": "User not found"}


def test_enrich_batch_keys_by_upper_case_code(client, gateway):
    resp = client.post("/users/enrichBatch", json={"manvs": ["e001", "E002", " e002 ", "missing"]})

    users = resp.json()["users"]
    assert set(users) == {"E001", "E002"}
    assert users["E002"]["full_name"] == "Tran Van B"
    assert gateway.calls == [("find_users_by_codes", ["E001", "E002", "MISSING"])]


def test_enrich_batch_empty(client, gateway):
    resp = client.post("/users/enrichBatch", json={"manvs": []})
    assert resp.json() == {"ok": True, "users": {}}


def test_enrich_users_alias_dispatches_on_shape(client):
    batch = client.post("/enrichUsers", json={"manvs": ["e001"]}).json()
    single = client.post("/enrichUsers", json={"manv": "e001"}).json()
    missing = client.post("/enrichUsers", json={})

    assert set(batch["users"]) == {"E001"}
    assert single["user"]["manv"] == "E001"
    assert missing.status_code == 400


@pytest.mark.parametrize("body", [{"manvs": None}, {}, None])
def test_enrich_batch_without_codes_is_empty(client, gateway, body):
    resp = client.post("/users/enrichBatch", json=body)

    assert resp.status_code == 200
    assert resp.json() == {"ok": True, "users": {}}
    assert gateway.calls == [("find_users_by_codes", [])]


@pytest.mark.parametrize("path", ["/users/enrichBatch", "/enrichUsers"])
def test_enrich_batch_accepts_numeric_codes(client, gateway, make_user_row, path):
    gateway.users.append(make_user_row("1001"))

    resp = client.post(path, json={"manvs": [1001, None, "e001"]})

    assert resp.status_code == 200
    assert set(resp.json()["users"]) == {"1001", "E001"}
    assert gateway.calls == [("find_users_by_codes", ["1001", "E001"])]
