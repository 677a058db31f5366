"""Tests for the REST transport."""

from dataclasses import replace

import pytest

from pipeline_api import RegistrationError, RestTransport

READ_OPTIONS = {
    "type": "object",
    "properties": {
        "okOption": {"type": "integer"},
        "_internalOption": {"type": "string"},
    },
    "additionalProperties": False,
}


@pytest.fixture
def client(api, app, memory_pipeline):
    api.configure(RestTransport())
    api.use(memory_pipeline, "test")
    return app.test_client()


def test_create_and_read_one(client):
    created = client.post("/tests", json={"id": "a1", "value": "first"})
    assert created.status_code == 201
    assert created.get_json() == {"id": "a1", "value": "first"}

    response = client.get("/tests/a1")
    assert response.status_code == 200
    assert response.get_json() == {"id": "a1", "value": "first"}


def test_create_many_returns_a_list(client):
    response = client.post(
        "/tests", json=[{"id": "a1", "value": "x"}, {"id": "b2", "value": "y"}]
    )

    assert response.status_code == 201
    assert [item["id"] for item in response.get_json()] == ["a1", "b2"]


def test_find_with_query(client):
    client.post("/tests", json=[{"id": "a1", "value": "x"}, {"id": "b2", "value": "y"}])

    everything = client.get("/tests").get_json()
    filtered = client.get("/tests?value=y").get_json()

    assert everything["meta"] == {"count": 2}
    assert [item["id"] for item in filtered["data"]] == ["b2"]


def test_unknown_resource_is_404(client):
    response = client.get("/tests/zz")

    assert response.status_code == 404
    assert response.get_json()["error"]["code"] == 404


def test_identifier_longer_than_model_bound_is_400(client):
    response = client.get("/tests/badId")

    assert response.status_code == 400
    assert response.get_json()["error"]["code"] == 400


def test_invalid_body_is_400(client):
    too_long = client.post("/tests", json={"id": "abc", "value": "x"})
    unknown_field = client.post("/tests", json={"id": "a1", "value": "x", "extra": 1})

    assert too_long.status_code == 400
    assert unknown_field.status_code == 400


def test_conflict_is_409(client):
    client.post("/tests", json={"id": "a1", "value": "x"})

    response = client.post("/tests", json={"id": "a1", "value": "again"})

    assert response.status_code == 409
    assert response.get_json()["error"]["message"] == "Resource a1 already exists"


def test_update_patch_and_delete(client, memory_pipeline):
    client.post("/tests", json={"id": "a1", "value": "x"})

    replaced = client.put("/tests/a1", json={"value": "replaced"})
    assert replaced.status_code == 200
    assert replaced.get_json() == {"id": "a1", "value": "replaced"}

    patched = client.patch("/tests/a1", json={"value": "patched"})
    assert patched.status_code == 200
    assert patched.get_json()["value"] == "patched"

    deleted = client.delete("/tests/a1")
    assert deleted.status_code == 200
    assert memory_pipeline.resources == {}
    assert client.get("/tests/a1").status_code == 404


def test_update_unknown_resource_is_404(client):
    response = client.put("/tests/zz", json={"value": "x"})

    assert response.status_code == 404


def test_unimplemented_operation_is_405(api, app, empty_pipeline):
    api.configure(RestTransport())
    api.use(empty_pipeline, "test")

    response = app.test_client().get("/tests")

    assert response.status_code == 405
    assert "does not implement read" in response.get_json()["error"]["message"]


def test_routes_follow_declared_capabilities(api, app, memory_pipeline):
    memory_pipeline.schema_builders = replace(
        memory_pipeline.schema_builders, delete_query=None, create_values=None
    )
    api.configure(RestTransport())
    api.use(memory_pipeline, "test")
    client = app.test_client()

    assert client.delete("/tests/a1").status_code == 405
    assert client.post("/tests", json={"id": "a1", "value": "x"}).status_code == 405
    assert "delete" not in api.open_api["paths"]["/tests/{id}"]
    assert "post" not in api.open_api["paths"]["/tests"]


def test_internal_options_never_reach_the_pipeline(api, app, memory_pipeline):
    memory_pipeline.schema_builders = replace(
        memory_pipeline.schema_builders, read_options=READ_OPTIONS
    )
    api.configure(RestTransport())
    api.use(memory_pipeline, "test")

    response = app.test_client().get("/tests?okOption=42&_internalOption=x")

    assert response.status_code == 200
    assert memory_pipeline.received_options == [("read", {"okOption": 42})]


def test_generated_parameters_exclude_internal_options(api, memory_pipeline):
    memory_pipeline.schema_builders = replace(
        memory_pipeline.schema_builders, read_options=READ_OPTIONS
    )
    api.configure(RestTransport())
    api.use(memory_pipeline, "test")

    find = api.open_api["paths"]["/tests"]["get"]
    get_one = api.open_api["paths"]["/tests/{id}"]["get"]

    assert [p["name"] for p in find["parameters"]] == ["id", "value", "okOption"]
    assert [(p["in"], p["name"]) for p in get_one["parameters"]] == [
        ("path", "id"),
        ("query", "value"),
        ("query", "okOption"),
    ]
    assert get_one["parameters"][0]["schema"] == {"type": "string", "maxLength": 2}


def test_document_describes_the_resource(api, app, memory_pipeline):
    api.configure(RestTransport())
    api.use(memory_pipeline, "test")

    document = app.test_client().get("/api.json").get_json()

    assert set(document["paths"]) == {"/tests", "/tests/{id}"}
    assert set(document["paths"]["/tests"]) == {"get", "post"}
    assert set(document["paths"]["/tests/{id}"]) == {"get", "put", "patch", "delete"}
    assert "Test" in document["components"]["schemas"]
    assert "Error" in document["components"]["schemas"]


def test_prefix_is_applied_to_routes_and_paths(api, app, memory_pipeline):
    api.configure(RestTransport(prefix="v1/"))
    api.use(memory_pipeline, "test")
    client = app.test_client()

    assert client.post("/v1/tests", json={"id": "a1", "value": "x"}).status_code == 201
    assert client.get("/v1/tests/a1").status_code == 200
    assert "/v1/tests/{id}" in api.open_api["paths"]


def test_path_collision_between_transports_raises(api, memory_pipeline):
    api.configure(RestTransport(prefix="/v1"))
    api.configure(RestTransport(prefix="/v1"))

    with pytest.raises(RegistrationError):
        api.use(memory_pipeline, "test")

    assert "tests" not in api.pipeline_by_name
    assert "Test" not in api.open_api["components"]["schemas"]
    assert api.open_api["paths"] == {}


def test_transports_with_different_prefixes_coexist(api, app, memory_pipeline):
    api.configure(RestTransport(prefix="/v1"))
    api.configure(RestTransport(prefix="/v2"))
    api.use(memory_pipeline, "test")
    client = app.test_client()

    assert client.post("/v1/tests", json={"id": "a1", "value": "x"}).status_code == 201
    assert client.get("/v2/tests/a1").get_json() == {"id": "a1", "value": "x"}
    assert {"/v1/tests/{id}", "/v2/tests/{id}"} <= set(api.open_api["paths"])
