"""
Health endpoints, error handlers and the management CLI.
"""

from click.testing import CliRunner
from fastapi import Request

from app.core.config import settings
from app.core.limiter import client_key
from main import cli, gunicorn_command
from conftest import auth_headers


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_health_reports_database(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["database"] == "healthy"


def test_process_time_header(client):
    assert "x-process-time" in client.get("/").headers


def test_validation_errors_are_400(client, user):
    response = client.post(
        "/cart", json={"courseId": "abc"}, headers=auth_headers(user)
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Validation error"


def test_cli_info():
    result = CliRunner().invoke(cli, ["info"])
    assert result.exit_code == 0
    assert "Application: Training Course Platform" in result.output


def test_cli_repair_dry_run(user, online_course, enroll):
    enroll(user, online_course, status="cart", is_linked_course=True)

    result = CliRunner().invoke(cli, ["repair-linked-courses", "--dry-run"])

    assert result.exit_code == 0
    assert "Orphaned companions found: 1" in result.output
    assert "Removed:" not in result.output


def test_rate_limit_key_honours_forwarded_for(monkeypatch):
    request = Request(
        {
            "type": "http",
            "headers": [(b"x-forwarded-for", b"203.0.113.7, 10.0.0.1")],
            "client": ("10.0.0.1", 5000),
        }
    )

    assert client_key(request) == "10.0.0.1"
    monkeypatch.setattr(settings, "trust_forwarded_for", True)
    assert client_key(request) == "203.0.113.7"


def test_gunicorn_command_uses_uvicorn_workers():
    cmd = gunicorn_command("0.0.0.0", 9000, 2)

    assert cmd[:2] == ["gunicorn", "main:app"]
    assert "uvicorn.workers.UvicornWorker" in cmd
    assert cmd[cmd.index("--bind") + 1] == "0.0.0.0:9000"
    assert cmd[cmd.index("--workers") + 1] == "2"
    assert cmd[cmd.index("--log-level") + 1] == settings.log_level
