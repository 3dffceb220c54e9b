"""End-to-end CLI tests against an in-memory backend behind httpx.MockTransport."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest
import typer
from typer.testing import CliRunner

from moondash.cli import app as cli_app
from moondash.cli.runtime import run
from moondash.errors import QueryFailure
from moondash.gateway import HttpGateway, TokenStore
from tests.helpers import ADMIN, CUSTOMER, DRIVER, OUTPOST, ROVER

BASE_URL = "https://moon.example"

runner = CliRunner()


class FakeBackend:
    """Just enough of the backend's REST dialect for the CLI flows."""

    def __init__(self) -> None:
        self.online = True
        self.passwords = {CUSTOMER["email"]: "pw", DRIVER["email"]: "pw", ADMIN["email"]: "pw"}
        self.collections: dict[str, list[dict[str, Any]]] = {
            "user": [dict(CUSTOMER), dict(DRIVER), dict(ADMIN)],
            "lunarOutpost": [dict(OUTPOST)],
            "lunarRover": [dict(ROVER)],
            "order": [
                {"id": "o-100", "customerId": 1, "roverId": "rv-1", "totalPrice": 18.0, "status": "in_transit"},
                {"id": "o-101", "customerId": 1, "roverId": None, "totalPrice": 7.5, "status": "placed"},
            ],
        }
        self.requests: list[httpx.Request] = []
        self.identity_down = False
        self.failing: set[str] = set()

    def _user_by_token(self, request: httpx.Request) -> dict[str, Any] | None:
        header = request.headers.get("Authorization", "")
        email = header.removeprefix("Bearer token-")
        return next((u for u in self.collections["user"] if u["email"] == email), None)

    def _attach(self, row: dict[str, Any], relations: list[str]) -> dict[str, Any]:
        row = dict(row)
        if "rover" in relations:
            row["rover"] = next((r for r in self.collections["lunarRover"] if r["id"] == row.get("roverId")), None)
        if "customer" in relations:
            row["customer"] = next((u for u in self.collections["user"] if u["id"] == row.get("customerId")), None)
        return row

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if not self.online:
            raise httpx.ConnectError("refused", request=request)
        self.requests.append(request)
        path = request.url.path

        if path == "/api/health":
            return httpx.Response(200, json={"status": "ok"})
        if path == "/api/auth/user/login":
            body = json.loads(request.content)
            if self.passwords.get(body["email"]) != body["password"]:
                return httpx.Response(401, json={"message": "Invalid credentials"})
            return httpx.Response(200, json={"token": f"token-{body['email']}"})
        if path == "/api/auth/user/signup":
            body = json.loads(request.content)
            self.passwords[body["email"]] = body.pop("password")
            self.collections["user"].append({"id": len(self.collections["user"]) + 1, **body})
            return httpx.Response(201, json={"token": "ignored"})
        if path == "/api/auth/user/me":
            if self.identity_down:
                return httpx.Response(500, json={"message": "db down"})
            user = self._user_by_token(request)
            if user is None:
                return httpx.Response(401)
            return httpx.Response(200, json=user)

        collection = path.split("/")[3]
        if collection in self.failing:
            return httpx.Response(503, json={"message": "collection offline"})
        if request.method == "GET":
            rows = self.collections[collection]
            for key, value in request.url.params.items():
                if key.endswith("_eq"):
                    rows = [r for r in rows if str(r.get(key[:-3])) == value]
            relations = request.url.params.get("relations", "").split(",")
            return httpx.Response(200, json={"data": [self._attach(r, relations) for r in rows]})
        if request.method == "POST":
            record = {"id": f"rv-{len(self.collections[collection]) + 1}", "status": "idle", **json.loads(request.content)}
            self.collections[collection].append(record)
            return httpx.Response(201, json=record)
        if request.method == "PATCH":
            record_id = path.split("/")[4]
            record = next(r for r in self.collections[collection] if str(r["id"]) == record_id)
            record.update(json.loads(request.content))
            return httpx.Response(200, json=record)
        return httpx.Response(405)

    def calls(self, method: str, path_prefix: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path.startswith(path_prefix)]


@pytest.fixture
def backend(tmp_path, monkeypatch) -> FakeBackend:
    """Route every CLI invocation to a FakeBackend with an isolated token file."""
    fake = FakeBackend()
    token_store = TokenStore(tmp_path / "credentials")
    monkeypatch.setenv("MOONDASH_BACKEND_URL", BASE_URL)

    def _build_gateway(config):
        client = httpx.AsyncClient(transport=httpx.MockTransport(fake))
        return HttpGateway(config.get_base_url(), token_store=token_store, client=client)

    monkeypatch.setattr("moondash.cli.runtime.build_gateway", _build_gateway)
    return fake


def _login(email: str) -> None:
    result = runner.invoke(cli_app, ["login", "--email", email, "--password", "pw"])
    assert result.exit_code == 0, result.output


def test_help_lists_commands() -> None:
    result = runner.invoke(cli_app, ["--help"])
    assert result.exit_code == 0
    for name in ["status", "login", "signup", "logout", "dashboard", "rover", "config"]:
        assert name in result.stdout


class TestSessionCommands:
    def test_status_when_backend_down(self, backend):
        backend.online = False

        result = runner.invoke(cli_app, ["status"])

        assert result.exit_code == 1
        assert "Backend Disconnected" in result.output

    def test_status_logged_out(self, backend):
        result = runner.invoke(cli_app, ["status"])

        assert result.exit_code == 0
        assert "Backend Connected" in result.output
        assert "Not logged in" in result.output
        assert f"{BASE_URL}/admin" in result.output

    def test_login_then_status(self, backend):
        _login(CUSTOMER["email"])

        result = runner.invoke(cli_app, ["status"])

        assert "Authenticated" in result.output
        assert "customer" in result.output

    def test_login_bad_password(self, backend):
        result = runner.invoke(cli_app, ["login", "--email", CUSTOMER["email"], "--password", "nope"])

        assert result.exit_code == 1
        assert "Invalid email or password" in result.output

    def test_signup_creates_customer(self, backend):
        result = runner.invoke(
            cli_app,
            [
                "signup",
                "--email", "new@moon.example",
                "--password", "pw",
                "--name", "Neil",
                "--address", "Sea of Serenity",
            ],
        )

        assert result.exit_code == 0, result.output
        created = backend.collections["user"][-1]
        assert created["role"] == "customer"
        assert created["lunarAddress"] == "Sea of Serenity"

    def test_login_with_failing_identity_lookup(self, backend):
        backend.identity_down = True

        result = runner.invoke(cli_app, ["login", "--email", CUSTOMER["email"], "--password", "pw"])

        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "db down" in result.output

        backend.identity_down = False
        status = runner.invoke(cli_app, ["status"])
        assert "Not logged in" in status.output

    def test_logout(self, backend):
        _login(DRIVER["email"])

        result = runner.invoke(cli_app, ["logout"])
        again = runner.invoke(cli_app, ["logout"])

        assert "Logged out successfully" in result.output
        assert "Already logged out" in again.output


class TestDashboard:
    def test_requires_login(self, backend):
        result = runner.invoke(cli_app, ["dashboard"])

        assert result.exit_code == 1
        assert "Not logged in" in result.output

    def test_customer_dashboard(self, backend):
        _login(CUSTOMER["email"])

        result = runner.invoke(cli_app, ["dashboard"])

        assert result.exit_code == 0, result.output
        assert "Crater Ramen" in result.output
        assert "IN_TRANSIT" in result.output
        assert "PLACED" in result.output
        assert not backend.calls("GET", "/api/collections/lunarRover")

    def test_driver_dashboard(self, backend):
        _login(DRIVER["email"])

        result = runner.invoke(cli_app, ["dashboard"])

        assert result.exit_code == 0, result.output
        assert "Rover-01" in result.output
        assert "Cmdr. Valentina" in result.output

    def test_admin_dashboard(self, backend):
        _login(ADMIN["email"])

        result = runner.invoke(cli_app, ["dashboard"])

        assert result.exit_code == 0, result.output
        assert "buzz@moon.example" in result.output


class TestRoverCommands:
    def test_invalid_status_rejected_before_any_request(self, backend):
        result = runner.invoke(cli_app, ["rover", "status", "flying"])

        assert result.exit_code == 1
        assert "Invalid rover status" in result.output
        assert backend.requests == []

    def test_driver_sets_status(self, backend):
        _login(DRIVER["email"])

        result = runner.invoke(cli_app, ["rover", "status", "charging"])

        assert result.exit_code == 0, result.output
        assert "CHARGING" in result.output
        assert backend.collections["lunarRover"][0]["status"] == "charging"

    def test_customer_cannot_set_status(self, backend):
        _login(CUSTOMER["email"])

        result = runner.invoke(cli_app, ["rover", "status", "idle"])

        assert result.exit_code == 1
        assert not backend.calls("PATCH", "/api/collections")

    def test_admin_deploys_rover(self, backend):
        _login(ADMIN["email"])

        result = runner.invoke(cli_app, ["rover", "deploy", "--name", "Rover-02", "--operator", "7"])

        assert result.exit_code == 0, result.output
        posts = backend.calls("POST", "/api/collections/lunarRover")
        assert len(posts) == 1
        assert json.loads(posts[0].content) == {"name": "Rover-02", "operatorId": 7}

    def test_admin_deploys_even_if_roster_failed_to_load(self, backend):
        _login(ADMIN["email"])
        backend.failing = {"user"}

        result = runner.invoke(cli_app, ["rover", "deploy", "--name", "Rover-02", "--operator", "7"])

        assert result.exit_code == 0, result.output
        assert "Only admins" not in result.output
        assert len(backend.calls("POST", "/api/collections/lunarRover")) == 1

    def test_driver_status_when_rover_load_fails(self, backend):
        _login(DRIVER["email"])
        backend.failing = {"lunarRover"}

        result = runner.invoke(cli_app, ["rover", "status", "charging"])

        assert result.exit_code == 1
        assert "Failed to load your rover" in result.output
        assert "Only drivers" not in result.output

    def test_deploy_requires_operator(self, backend):
        _login(ADMIN["email"])

        result = runner.invoke(cli_app, ["rover", "deploy", "--name", "Rover-02"])

        assert result.exit_code == 1
        assert "select an operator" in result.output
        assert not backend.calls("POST", "/api/collections")


class TestConfigCommands:
    def test_set_url_and_show(self, tmp_path, monkeypatch):
        monkeypatch.delenv("MOONDASH_BACKEND_URL", raising=False)
        monkeypatch.setattr("moondash.config.MOONDASH_DIR", tmp_path / ".moondash")

        set_result = runner.invoke(cli_app, ["config", "set-url", "https://luna.example/"])
        show_result = runner.invoke(cli_app, ["config", "show"])

        assert set_result.exit_code == 0
        assert "https://luna.example/admin" in show_result.output


class TestRun:
    def test_client_error_becomes_exit_code_one(self, capsys):
        async def _fails():
            raise QueryFailure("Identity lookup failed: db down", 500)

        with pytest.raises(typer.Exit) as exc_info:
            run(_fails)

        assert exc_info.value.exit_code == 1
        assert "Error: Identity lookup failed: db down" in capsys.readouterr().out

    def test_result_passed_through(self):
        async def _ok():
            return 42

        assert run(_ok) == 42
