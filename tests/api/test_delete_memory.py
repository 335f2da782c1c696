from models.models import Location, NewMemory


def _seed(store):
    return store.create(
        NewMemory(
            story="Our old house",
            location=Location(lat=1.0, lng=2.0),
            contributor_id="uid-allowed",
            timestamp=1_700_000_000_000,
        )
    )


def test_delete_memory(client, store):
    memory_id = _seed(store)
    response = client.post(
        "/delete-memory", json={"id": memory_id}, headers={"Authorization": "Bearer token-allowed"}
    )
    assert response.status_code == 200
    assert response.json()["success"] is True
    assert memory_id not in store.docs


def test_delete_memory_twice_succeeds(client, store):
    memory_id = _seed(store)
    headers = {"Authorization": "Bearer token-allowed"}
    first = client.post("/delete-memory", json={"id": memory_id}, headers=headers)
    second = client.post("/delete-memory", json={"id": memory_id}, headers=headers)
    assert first.status_code == 200
    assert second.status_code == 200


def test_delete_unknown_memory_succeeds(client):
    response = client.post(
        "/delete-memory", json={"id": "never-existed"}, headers={"Authorization": "Bearer token-allowed"}
    )
    assert response.status_code == 200


def test_delete_memory_requires_token(client, store):
    memory_id = _seed(store)
    response = client.post("/delete-memory", json={"id": memory_id})
    assert response.status_code == 401
    assert memory_id in store.docs


def test_delete_memory_rejects_identity_not_on_allow_list(client, store):
    memory_id = _seed(store)
    response = client.post(
        "/delete-memory", json={"id": memory_id}, headers={"Authorization": "Bearer token-stranger"}
    )
    assert response.status_code == 403
    assert memory_id in store.docs


def test_delete_memory_missing_id(client):
    response = client.post(
        "/delete-memory", json={}, headers={"Authorization": "Bearer token-allowed"}
    )
    assert response.status_code == 400


def test_delete_memory_rejects_path_like_id(client):
    response = client.post(
        "/delete-memory",
        json={"id": "a/b"},
        headers={"Authorization": "Bearer token-allowed"},
    )
    assert response.status_code == 400
