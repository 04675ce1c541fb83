"""CLI tests — click commands against a mocked HTTP API.

The CLI only speaks HTTP, so each test swaps the client factory for one
backed by httpx.MockTransport and asserts on the requests the command
sends and what it prints.
"""

import json

import httpx
import pytest
from click.testing import CliRunner

from taskvault.cli import main as cli

TASK = {
    "id": 7,
    "title": "Buy milk",
    "description": "2%",
    "status": "OPEN",
    "user_id": "3b1f6a52-8f5e-4d7a-9a43-0c3f4f0a1b2c",
}


class MockApi:
    """Canned responses keyed by (method, path); records every request."""

    def __init__(self):
        self.routes: dict[tuple[str, str], httpx.Response] = {}
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.routes.get(
            (request.method, request.url.path),
            httpx.Response(404, json={"detail": "Not Found"}),
        )


@pytest.fixture
def api(monkeypatch):
    mock = MockApi()

    def client():
        return httpx.AsyncClient(
            transport=httpx.MockTransport(mock.handler), base_url="http://test"
        )

    monkeypatch.setattr(cli, "_client", client)
    return mock


@pytest.fixture
def runner():
    return CliRunner()


def test_signup(api, runner):
    api.routes[("POST", "/api/v1/auth/signup")] = httpx.Response(201)
    result = runner.invoke(cli.main, ["signup", "alice", "--password", "Secret123"])

    assert result.exit_code == 0, result.output
    assert "Account 'alice' created" in result.output
    assert json.loads(api.requests[0].content) == {"username": "alice", "password": "Secret123"}


def test_signup_conflict(api, runner):
    api.routes[("POST", "/api/v1/auth/signup")] = httpx.Response(
        409, json={"detail": "Username already exists"}
    )
    result = runner.invoke(cli.main, ["signup", "alice", "--password", "Secret123"])

    assert result.exit_code == 1
    assert "Username already exists" in result.output


def test_signin_prints_token(api, runner):
    api.routes[("POST", "/api/v1/auth/signin")] = httpx.Response(
        200, json={"access_token": "tok-123", "token_type": "bearer"}
    )
    result = runner.invoke(cli.main, ["signin", "alice", "--password", "Secret123"])

    assert result.exit_code == 0
    assert result.output.strip() == "tok-123"


def test_tasks_list_sends_token_and_filters(api, runner):
    api.routes[("GET", "/api/v1/tasks")] = httpx.Response(200, json=[TASK])
    result = runner.invoke(
        cli.main,
        ["tasks", "list", "--status", "OPEN", "--search", "milk"],
        env={"TASKVAULT_TOKEN": "tok-123"},
    )

    assert result.exit_code == 0, result.output
    assert "Buy milk" in result.output
    request = api.requests[0]
    assert request.headers["Authorization"] == "Bearer tok-123"
    assert request.url.params["status"] == "OPEN"
    assert request.url.params["search"] == "milk"


def test_tasks_list_requires_token(api, runner):
    result = runner.invoke(cli.main, ["tasks", "list"], env={"TASKVAULT_TOKEN": ""})
    assert result.exit_code == 1
    assert "--token required" in result.output
    assert api.requests == []


def test_tasks_create(api, runner):
    api.routes[("POST", "/api/v1/tasks")] = httpx.Response(201, json=TASK)
    result = runner.invoke(
        cli.main,
        ["tasks", "create", "Buy milk", "2%", "--token", "tok-123"],
    )

    assert result.exit_code == 0, result.output
    assert "Task #7 created" in result.output


def test_tasks_status(api, runner):
    api.routes[("PATCH", "/api/v1/tasks/7/status")] = httpx.Response(
        200, json={**TASK, "status": "DONE"}
    )
    result = runner.invoke(
        cli.main, ["tasks", "status", "7", "DONE", "--token", "tok-123"]
    )

    assert result.exit_code == 0, result.output
    assert "DONE" in result.output
    assert json.loads(api.requests[0].content) == {"status": "DONE"}


def test_tasks_status_rejects_unknown_status(api, runner):
    result = runner.invoke(
        cli.main, ["tasks", "status", "7", "ARCHIVED", "--token", "tok-123"]
    )
    assert result.exit_code == 2
    assert api.requests == []


def test_tasks_show_not_found(api, runner):
    api.routes[("GET", "/api/v1/tasks/9")] = httpx.Response(
        404, json={"detail": 'Task with ID "9" not found'}
    )
    result = runner.invoke(cli.main, ["tasks", "show", "9", "--token", "tok-123"])

    assert result.exit_code == 1
    assert 'Task with ID "9" not found' in result.output


def test_tasks_delete(api, runner):
    api.routes[("DELETE", "/api/v1/tasks/7")] = httpx.Response(204)
    result = runner.invoke(cli.main, ["tasks", "delete", "7", "--token", "tok-123"])

    assert result.exit_code == 0, result.output
    assert "Task #7 deleted" in result.output
