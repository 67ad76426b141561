"""Tests for the firebase-token command."""

import json
from unittest.mock import Mock

import pytest

from firebase_token.cli import generate_token, main, report_existing_token
from firebase_token.config import AppConfig
from firebase_token.exceptions import IncompleteCredentialError
from firebase_token.issuer import TokenIssuer
from firebase_token.token import now_ms

FCM_SCOPE = "https://www.googleapis.com/auth/firebase.messaging"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("GOOGLE_APPLICATION_CREDENTIALS", raising=False)
    monkeypatch.delenv("FIREBASE_TOKEN_CONFIG", raising=False)


@pytest.fixture
def project(tmp_path, service_account_data):
    """A project tree with config/config.json and a service account."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    (config_dir / "service-account.json").write_text(
        json.dumps(service_account_data), encoding="utf-8"
    )
    (config_dir / "config.json").write_text(
        json.dumps(
            {
                "app": {"name": "Firebase Token Generator", "version": "1.0.0"},
                "paths": {
                    "serviceAccount": "config/service-account.json",
                    "outputDir": "output",
                    "tokenFile": "firebase-token.json",
                },
                "firebase": {
                    "defaultScopes": [FCM_SCOPE],
                    "availableScopes": [FCM_SCOPE, "https://www.googleapis.com/auth/cloud-platform"],
                },
                "output": {"prettyPrint": True},
            }
        ),
        encoding="utf-8",
    )
    return tmp_path


def token_path(project):
    return project / "output" / "firebase-token.json"


@pytest.fixture
def endpoint(token_endpoint, monkeypatch):
    """Route every issuer created by main() to the fake token endpoint."""
    monkeypatch.setattr(TokenIssuer, "_get_request", lambda self: token_endpoint)
    return token_endpoint


class TestMain:
    """End-to-end tests for main()."""

    def test_generate(self, project, endpoint, capsys):
        endpoint.respond(200, {"access_token": "ya29.test-token", "expires_in": 3599})

        code = main(["--config", str(project / "config" / "config.json")])

        assert code == 0
        snapshot = json.loads(token_path(project).read_text(encoding="utf-8"))
        assert snapshot["access_token"] == "ya29.test-token"
        assert snapshot["token_type"] == "Bearer"
        assert snapshot["scope"] == FCM_SCOPE
        assert snapshot["config"]["scopes"] == [FCM_SCOPE]
        assert snapshot["metadata"]["is_valid"] is True
        assert snapshot["expires_at"] > now_ms()

        out = capsys.readouterr().out
        assert '-H "Authorization: Bearer ya29.test-token"' in out
        assert '"Authorization": "Bearer ya29.test-token"' in out

    def test_scope_override(self, project, endpoint):
        endpoint.respond(200, {"access_token": "abc", "expires_in": 3600})

        code = main(
            [
                "--config", str(project / "config" / "config.json"),
                "--scope", "https://www.googleapis.com/auth/cloud-platform",
                "--scope", FCM_SCOPE,
            ]
        )

        assert code == 0
        snapshot = json.loads(token_path(project).read_text(encoding="utf-8"))
        assert snapshot["scope"] == f"https://www.googleapis.com/auth/cloud-platform {FCM_SCOPE}"

    def test_rejected_grant_exits_non_zero(self, project, endpoint):
        endpoint.respond(401, {"error": "invalid_client"})

        code = main(["--config", str(project / "config" / "config.json")])

        assert code == 1
        assert not token_path(project).exists()

    def test_malformed_expires_in_exits_non_zero(self, project, endpoint):
        endpoint.respond(200, {"access_token": "abc", "expires_in": "soon"})

        code = main(["--config", str(project / "config" / "config.json")])

        assert code == 1
        assert not token_path(project).exists()

    def test_missing_service_account(self, project):
        code = main(
            [
                "--config", str(project / "config" / "config.json"),
                "--service-account", str(project / "missing.json"),
            ]
        )
        assert code == 1

    def test_incomplete_service_account(self, project, service_account_data, endpoint):
        del service_account_data["client_email"]
        (project / "config" / "service-account.json").write_text(
            json.dumps(service_account_data), encoding="utf-8"
        )

        code = main(["--config", str(project / "config" / "config.json")])

        assert code == 1
        assert not endpoint.called

    def test_null_valued_field_is_accepted(self, project, service_account_data, endpoint):
        service_account_data["client_id"] = None
        (project / "config" / "service-account.json").write_text(
            json.dumps(service_account_data), encoding="utf-8"
        )
        endpoint.respond(200, {"access_token": "abc", "expires_in": 3600})

        code = main(["--config", str(project / "config" / "config.json")])

        assert code == 0
        assert endpoint.called

    def test_missing_config(self, tmp_path):
        assert main(["--config", str(tmp_path / "config.json")]) == 1

    def test_list_scopes(self, project, capsys):
        code = main(["--config", str(project / "config" / "config.json"), "--list-scopes"])
        out = capsys.readouterr().out
        assert code == 0
        assert f"* {FCM_SCOPE}" in out
        assert "  https://www.googleapis.com/auth/cloud-platform" in out

    def test_check_without_snapshot(self, project):
        assert main(["--config", str(project / "config" / "config.json"), "--check"]) == 1

    def test_check_with_valid_snapshot(self, project, capsys):
        path = token_path(project)
        path.parent.mkdir()
        path.write_text(json.dumps({"expires_at": now_ms() + 600_000}), encoding="utf-8")

        code = main(["--config", str(project / "config" / "config.json"), "--check"])

        assert code == 0
        assert "valid" in capsys.readouterr().out


class TestReportExistingToken:
    def test_expired(self, tmp_path, capsys):
        config = AppConfig(output_dir=str(tmp_path))
        (tmp_path / config.token_file).write_text(json.dumps({"expires_at": 1}), encoding="utf-8")

        assert report_existing_token(config) is True
        assert "expired" in capsys.readouterr().out

    def test_none(self, tmp_path):
        assert report_existing_token(AppConfig(output_dir=str(tmp_path))) is False


class TestGenerateToken:
    def test_incomplete_credential_never_reaches_issuer(self, tmp_path, service_account_data):
        del service_account_data["client_email"]
        sa = tmp_path / "sa.json"
        sa.write_text(json.dumps(service_account_data), encoding="utf-8")
        config = AppConfig(service_account_path=str(sa), output_dir=str(tmp_path))
        issuer = Mock()

        with pytest.raises(IncompleteCredentialError) as exc:
            generate_token(config, issuer)

        assert exc.value.missing == ["client_email"]
        issuer.issue.assert_not_called()


class TestLogging:
    def test_module_logger_name(self):
        from firebase_token import cli

        assert cli.logger.name == "firebase_token.cli"
