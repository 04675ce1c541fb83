"""TaskVault CLI — sign up, sign in, and manage your tasks over HTTP.

Usage:
    taskvault signup alice                     # prompts for a password
    taskvault signin alice                     # prints an access token
    export TASKVAULT_TOKEN=<token>
    taskvault tasks list --status OPEN --search milk
    taskvault tasks create "Buy milk" "2%"
    taskvault tasks status 7 DONE
    taskvault tasks delete 7
    taskvault serve                            # run the API with uvicorn
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import os
import sys
from typing import Optional

import click
import httpx

DEFAULT_API_URL = "http://localhost:3000"
STATUSES = ("OPEN", "IN_PROGRESS", "DONE")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _api_url() -> str:
    return os.environ.get("TASKVAULT_API_URL", DEFAULT_API_URL).rstrip("/")


def _client() -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the TaskVault API."""
    return httpx.AsyncClient(base_url=_api_url(), timeout=30.0)


def _run(coro):
    """Run an async coroutine from a synchronous click handler.

    Offloads to a thread when a loop is already running (e.g. tests).
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
        return pool.submit(asyncio.run, coro).result()


async def _send(method: str, path: str, **kwargs) -> httpx.Response:
    async with _client() as c:
        return await c.request(method, path, **kwargs)


def _call(method: str, path: str, expect: int, **kwargs) -> httpx.Response:
    """Send one request; print the API error and exit unless ``expect``."""
    try:
        r = _run(_send(method, path, **kwargs))
    except httpx.HTTPError as e:
        click.secho(f"Error: cannot reach {_api_url()}: {e}", fg="red", err=True)
        sys.exit(1)

    if r.status_code != expect:
        try:
            detail = r.json().get("detail", r.text)
        except ValueError:
            detail = r.text
        if not isinstance(detail, str):
            detail = json.dumps(detail)
        click.secho(f"Error ({r.status_code}): {detail}", fg="red", err=True)
        sys.exit(1)
    return r


def _auth_headers(token: Optional[str]) -> dict[str, str]:
    if not token:
        click.secho(
            "Error: --token required (or set TASKVAULT_TOKEN env var)",
            fg="red",
            err=True,
        )
        sys.exit(1)
    return {"Authorization": f"Bearer {token}"}


def _status_color(status: str) -> str:
    return {"OPEN": "white", "IN_PROGRESS": "yellow", "DONE": "green"}.get(
        status, "white"
    )


def _print_task(task: dict) -> None:
    status = click.style(task["status"].ljust(11), fg=_status_color(task["status"]))
    click.echo(f"#{str(task['id']).ljust(5)} {status} {task['title']}")
    if task.get("description"):
        click.echo(f"       {task['description']}")


token_option = click.option(
    "--token",
    envvar="TASKVAULT_TOKEN",
    help="Access token (or set TASKVAULT_TOKEN)",
)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version="0.1.0", prog_name="taskvault")
def main():
    """TaskVault — per-user task lists behind credential-based auth."""


@main.command()
@click.argument("username")
@click.password_option()
def signup(username: str, password: str):
    """Create an account for USERNAME."""
    _call(
        "POST", "/api/v1/auth/signup", expect=201,
        json={"username": username, "password": password},
    )
    click.secho(f"Account '{username}' created", fg="green")


@main.command()
@click.argument("username")
@click.password_option(confirmation_prompt=False)
def signin(username: str, password: str):
    """Sign in as USERNAME and print an access token."""
    r = _call(
        "POST", "/api/v1/auth/signin", expect=200,
        json={"username": username, "password": password},
    )
    click.echo(r.json()["access_token"])


# ---------------------------------------------------------------------------
# taskvault tasks ...
# ---------------------------------------------------------------------------


@main.group()
def tasks():
    """Manage your tasks."""


@tasks.command("list")
@token_option
@click.option("--status", type=click.Choice(STATUSES), help="Filter by status")
@click.option("--search", help="Case-insensitive text in title or description")
@click.option("--json", "as_json", is_flag=True, help="Raw JSON output")
def list_tasks(token: Optional[str], status: Optional[str],
               search: Optional[str], as_json: bool):
    """List your tasks."""
    params = {k: v for k, v in (("status", status), ("search", search)) if v}
    r = _call(
        "GET", "/api/v1/tasks", expect=200,
        params=params, headers=_auth_headers(token),
    )
    data = r.json()
    if as_json:
        click.echo(json.dumps(data, indent=2))
        return
    if not data:
        click.echo("No tasks.")
        return
    for task in data:
        _print_task(task)


@tasks.command("show")
@token_option
@click.argument("task_id", type=int)
def show_task(token: Optional[str], task_id: int):
    """Show a single task."""
    r = _call(
        "GET", f"/api/v1/tasks/{task_id}", expect=200,
        headers=_auth_headers(token),
    )
    _print_task(r.json())


@tasks.command("create")
@token_option
@click.argument("title")
@click.argument("description")
def create_task(token: Optional[str], title: str, description: str):
    """Create a task with TITLE and DESCRIPTION."""
    r = _call(
        "POST", "/api/v1/tasks", expect=201,
        json={"title": title, "description": description},
        headers=_auth_headers(token),
    )
    click.secho(f"Task #{r.json()['id']} created", fg="green")


@tasks.command("status")
@token_option
@click.argument("task_id", type=int)
@click.argument("status", type=click.Choice(STATUSES))
def set_status(token: Optional[str], task_id: int, status: str):
    """Set the STATUS of a task."""
    r = _call(
        "PATCH", f"/api/v1/tasks/{task_id}/status", expect=200,
        json={"status": status},
        headers=_auth_headers(token),
    )
    _print_task(r.json())


@tasks.command("delete")
@token_option
@click.argument("task_id", type=int)
def delete_task(token: Optional[str], task_id: int):
    """Delete a task."""
    _call(
        "DELETE", f"/api/v1/tasks/{task_id}", expect=204,
        headers=_auth_headers(token),
    )
    click.secho(f"Task #{task_id} deleted", fg="green")


# ---------------------------------------------------------------------------
# taskvault serve
# ---------------------------------------------------------------------------


@main.command()
@click.option("--host", default=None, help="Bind address (default from settings)")
@click.option("--port", default=None, type=int, help="Port (default from settings)")
@click.option("--reload", is_flag=True, help="Auto-reload on code changes")
def serve(host: Optional[str], port: Optional[int], reload: bool):
    """Run the API server with uvicorn."""
    import uvicorn

    from taskvault.config import settings

    uvicorn.run(
        "taskvault.main:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


if __name__ == "__main__":
    main()
