from pathlib import Path
from typing import Any, List

import pytest
from fastapi.testclient import TestClient

from app.api.tree_api import get_tree_store
from app.core.tree import InMemoryTreeRepository, ParentNotFoundError, PersistenceError, TreeNode, TreeStore
from app.core.tree.engine import DOCUMENT_KEY
from app.core.tree.settings import TreeServiceSettings
from app.main import create_app


SEEDED = {
    "trees": [
        {
            "id": 1,
            "label": "root",
            "children": [{"id": 2, "label": "child1", "children": []}],
        }
    ],
    "nextId": 3,
}


class ExplodingStore:
    """Stand-in store whose every call fails with the configured error."""

    next_id = 1

    def __init__(self, error: Exception) -> None:
        self.error = error
        self.calls: List[Any] = []

    def get_all_trees(self) -> List[TreeNode]:
        raise self.error

    def add_node(self, label: str, parent_id: int) -> TreeNode:
        self.calls.append((label, parent_id))
        raise self.error


@pytest.fixture()
def settings(tmp_path: Path) -> TreeServiceSettings:
    return TreeServiceSettings(data_file=tmp_path / "trees.json", storage="memory")


@pytest.fixture()
def store() -> TreeStore:
    return TreeStore(InMemoryTreeRepository({DOCUMENT_KEY: SEEDED}))


@pytest.fixture()
def client(store: TreeStore, settings: TreeServiceSettings) -> TestClient:
    return TestClient(create_app(store=store, settings=settings))


def _client_with(store: Any, settings: TreeServiceSettings) -> TestClient:
    return TestClient(create_app(store=store, settings=settings))


def test_get_returns_forest(client: TestClient) -> None:
    resp = client.get("/api/tree")
    assert resp.status_code == 200
    assert resp.json() == SEEDED["trees"]


def test_post_creates_node(client: TestClient, store: TreeStore) -> None:
    resp = client.post("/api/tree", json={"label": "child2", "parentId": 2})
    assert resp.status_code == 201
    assert resp.json() == {"id": 3, "label": "child2", "children": []}

    forest = client.get("/api/tree").json()
    assert forest[0]["children"][0]["children"] == [{"id": 3, "label": "child2", "children": []}]
    assert store.next_id == 4


@pytest.mark.parametrize(
    "payload, message",
    [
        ({"parentId": 1}, "Label and parentId are required"),
        ({"label": "foo"}, "Label and parentId are required"),
        ({"label": "", "parentId": 1}, "Label and parentId are required"),
        ({}, "Label and parentId are required"),
        ({"label": "x", "parentId": "abc"}, "parentId must be a number"),
        ({"label": "foo", "parentId": ""}, "parentId must be a number"),
        ({"label": "foo", "parentId": None}, "parentId must be a number"),
        ({"label": "foo", "parentId": True}, "parentId must be a number"),
        ({"label": 12, "parentId": 1}, "label must be a string"),
    ],
)
def test_post_rejects_invalid_input(settings: TreeServiceSettings, payload: Any, message: str) -> None:
    store = ExplodingStore(RuntimeError("must not be called"))
    resp = _client_with(store, settings).post("/api/tree", json=payload)
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid request", "message": message}
    assert store.calls == []


def test_post_without_body_is_rejected(client: TestClient) -> None:
    resp = client.post("/api/tree")
    assert resp.status_code == 400
    assert resp.json()["message"] == "Label and parentId are required"


def test_post_malformed_json_is_rejected(client: TestClient) -> None:
    resp = client.post(
        "/api/tree",
        content="{ bad json ",
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid request", "message": "Malformed request body"}


def test_post_unknown_parent_returns_404(client: TestClient) -> None:
    resp = client.post("/api/tree", json={"label": "orphan", "parentId": 999})
    assert resp.status_code == 404
    assert resp.json() == {
        "error": "Parent not found",
        "message": "Parent node with id 999 not found",
    }


def test_post_on_empty_store_returns_404(settings: TreeServiceSettings) -> None:
    client = _client_with(TreeStore(InMemoryTreeRepository()), settings)
    resp = client.post("/api/tree", json={"label": "root", "parentId": 1})
    assert resp.status_code == 404
    assert "1" in resp.json()["message"]


def test_post_store_failure_returns_500(settings: TreeServiceSettings) -> None:
    store = ExplodingStore(RuntimeError("Unexpected DB error"))
    resp = _client_with(store, settings).post("/api/tree", json={"label": "foo", "parentId": 1})
    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error", "message": "Failed to create node"}
    assert store.calls == [("foo", 1)]


def test_post_persistence_failure_returns_500(settings: TreeServiceSettings) -> None:
    store = ExplodingStore(PersistenceError("Failed to save data"))
    resp = _client_with(store, settings).post("/api/tree", json={"label": "foo", "parentId": 1})
    assert resp.status_code == 500
    assert "save" not in resp.text


def test_post_passes_parent_not_found_from_store(settings: TreeServiceSettings) -> None:
    store = ExplodingStore(ParentNotFoundError(7))
    resp = _client_with(store, settings).post("/api/tree", json={"label": "foo", "parentId": 7})
    assert resp.status_code == 404
    assert resp.json()["message"] == "Parent node with id 7 not found"


def test_get_store_failure_hides_details(settings: TreeServiceSettings) -> None:
    store = ExplodingStore(RuntimeError("Database failure"))
    resp = _client_with(store, settings).get("/api/tree")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error", "message": "Failed to retrieve trees"}
    assert "Database failure" not in resp.text


def test_unknown_route_returns_404(client: TestClient) -> None:
    resp = client.get("/api/forest")
    assert resp.status_code == 404
    assert resp.json() == {"error": "Route not found", "path": "/api/forest"}


def test_store_dependency_can_be_overridden(settings: TreeServiceSettings) -> None:
    app = create_app(store=TreeStore(InMemoryTreeRepository()), settings=settings)
    replacement = TreeStore(InMemoryTreeRepository({DOCUMENT_KEY: SEEDED}))
    app.dependency_overrides[get_tree_store] = lambda: replacement

    resp = TestClient(app).get("/api/tree")

    assert resp.json() == SEEDED["trees"]


def test_create_app_builds_file_store(tmp_path: Path) -> None:
    settings = TreeServiceSettings(data_file=tmp_path / "data" / "trees.json")
    app = create_app(settings=settings)
    assert app.state.tree_store.get_all_trees() == []
    assert app.state.tree_store.next_id == 1


def test_post_below_depth_limit_returns_400(settings: TreeServiceSettings) -> None:
    store = TreeStore(InMemoryTreeRepository({DOCUMENT_KEY: SEEDED}), max_depth=2)
    client = _client_with(store, settings)

    resp = client.post("/api/tree", json={"label": "grandchild", "parentId": 2})

    assert resp.status_code == 400
    assert resp.json() == {
        "error": "Invalid request",
        "message": "Node with id 2 is at the maximum depth of 2",
    }
    assert client.post("/api/tree", json={"label": "sibling", "parentId": 1}).status_code == 201


def test_deep_forest_is_served(settings: TreeServiceSettings) -> None:
    store = TreeStore(InMemoryTreeRepository({DOCUMENT_KEY: SEEDED}))
    client = _client_with(store, settings)
    parent = 2
    for idx in range(store.max_depth - 2):
        resp = client.post("/api/tree", json={"label": f"level{idx}", "parentId": parent})
        assert resp.status_code == 201
        parent = resp.json()["id"]

    resp = client.get("/api/tree")

    assert resp.status_code == 200
    depth, node = 1, resp.json()[0]
    while node["children"]:
        node = node["children"][0]
        depth += 1
    assert depth == store.max_depth
    assert node["id"] == parent
