import copy
import os
import sys

import pytest
from flask import Flask

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from pipeline_api import (  # noqa: E402
    Api,
    ConflictError,
    PipelineAbstract,
    Results,
    default_schema_builders,
)

TEST_MODEL = {
    "type": "object",
    "properties": {
        "id": {"type": "string", "maxLength": 2},
        "value": {"type": "string"},
    },
    "required": ["id", "value"],
}


class EmptyPipeline(PipelineAbstract):
    """Declares every operation but implements none."""


class InMemoryPipeline(PipelineAbstract):
    """Keeps resources in a dict and records the options it receives."""

    def __init__(self, schema_builders=None):
        super().__init__(schema_builders or default_schema_builders(TEST_MODEL))
        self.resources = {}
        self.received_options = []

    def _matches(self, resource, query):
        return all(resource.get(key) == value for key, value in query.items())

    def _create(self, resources, options):
        self.received_options.append(("create", options))
        created = []
        for resource in resources:
            if resource["id"] in self.resources:
                raise ConflictError(f"Resource {resource['id']} already exists")
            self.resources[resource["id"]] = dict(resource)
            created.append(dict(resource))
        return Results(data=created)

    def _read(self, query, options):
        self.received_options.append(("read", options))
        data = [dict(r) for r in self.resources.values() if self._matches(r, query)]
        return Results(data=data, meta={"count": len(data)})

    def _update(self, id, values, options):
        self.received_options.append(("update", options))
        if id not in self.resources:
            return Results()
        self.resources[id] = {"id": id, **values}
        return Results(data=[dict(self.resources[id])])

    def _patch(self, query, values, options):
        self.received_options.append(("patch", options))
        patched = []
        for resource in self.resources.values():
            if self._matches(resource, query):
                resource.update(values)
                patched.append(dict(resource))
        return Results(data=patched)

    def _delete(self, query, options):
        self.received_options.append(("delete", options))
        deleted = [r for r in self.resources.values() if self._matches(r, query)]
        for resource in deleted:
            del self.resources[resource["id"]]
        return Results(data=deleted)


@pytest.fixture
def test_model():
    return copy.deepcopy(TEST_MODEL)


@pytest.fixture
def app():
    app = Flask(__name__)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def api(app):
    return Api(
        app,
        {
            "openapi": "3.0.0",
            "info": {"version": "1.0.0", "title": "Unit test Api"},
            "paths": {},
        },
    )


@pytest.fixture
def empty_pipeline(test_model):
    return EmptyPipeline(default_schema_builders(test_model))


@pytest.fixture
def memory_pipeline():
    return InMemoryPipeline()
