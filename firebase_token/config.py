"""Application configuration."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from firebase_token.exceptions import ConfigError

CONFIG_ENV = "FIREBASE_TOKEN_CONFIG"
CREDENTIALS_ENV = "GOOGLE_APPLICATION_CREDENTIALS"
DEFAULT_CONFIG_PATH = Path("config") / "config.json"


@dataclass
class AppConfig:
    """Resolved configuration for one invocation."""

    app_name: str = "Firebase Token Generator"
    app_version: str = "1.0.0"
    service_account_path: str = "config/service-account.json"
    output_dir: str = "output"
    token_file: str = "firebase-token.json"
    default_scopes: list[str] = field(
        default_factory=lambda: ["https://www.googleapis.com/auth/firebase.messaging"]
    )
    available_scopes: list[str] = field(default_factory=list)
    pretty_print: bool = True
    timeout: float = 30.0

    @property
    def token_file_path(self) -> str:
        return os.path.join(self.output_dir, self.token_file)

    def with_overrides(
        self,
        service_account_path: str | None = None,
        output_dir: str | None = None,
        scopes: list[str] | None = None,
    ) -> AppConfig:
        """Return a copy with command-line overrides applied."""
        changes: dict[str, Any] = {}
        if service_account_path:
            changes["service_account_path"] = os.path.abspath(service_account_path)
        if output_dir:
            changes["output_dir"] = os.path.abspath(output_dir)
        if scopes:
            changes["default_scopes"] = list(scopes)
        return replace(self, **changes)


def _lookup(data: dict, dotted: str) -> Any:
    value: Any = data
    for key in dotted.split("."):
        if not isinstance(value, dict) or key not in value:
            return None
        value = value[key]
    return value


def _project_root(config_path: Path) -> Path:
    # config/config.json lives one level below the project root
    parent = config_path.resolve().parent
    return parent.parent if parent.name == "config" else parent


def load_config(path: str | Path | None = None, env: dict | None = None) -> AppConfig:
    """Load configuration from a JSON file and the environment.

    The file path comes from ``path``, then ``FIREBASE_TOKEN_CONFIG``, then
    ``config/config.json``. Relative paths inside the file resolve against
    the project root. ``GOOGLE_APPLICATION_CREDENTIALS`` overrides the
    service account path.

    Raises:
        ConfigError: If the file is unreadable or lacks required keys.
    """
    env = os.environ if env is None else env
    config_path = Path(path or env.get(CONFIG_ENV) or DEFAULT_CONFIG_PATH)

    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ConfigError(f"Config file could not be read ({config_path}): {e}", path=str(config_path)) from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file must contain a JSON object: {config_path}", path=str(config_path))

    root = _project_root(config_path)
    defaults = AppConfig()

    service_account = _lookup(data, "paths.serviceAccount")
    output_dir = _lookup(data, "paths.outputDir")
    token_file = _lookup(data, "paths.tokenFile")
    missing = [
        name
        for name, value in (
            ("paths.serviceAccount", service_account),
            ("paths.outputDir", output_dir),
            ("paths.tokenFile", token_file),
        )
        if not value
    ]
    if missing:
        raise ConfigError(
            f"Config file is missing required keys: {', '.join(missing)}",
            path=str(config_path),
        )

    if env.get(CREDENTIALS_ENV):
        service_account_path = os.path.abspath(env[CREDENTIALS_ENV])
    else:
        service_account_path = str(root / service_account)

    pretty_print = _lookup(data, "output.prettyPrint")
    timeout = _lookup(data, "http.timeout")

    return AppConfig(
        app_name=_lookup(data, "app.name") or defaults.app_name,
        app_version=_lookup(data, "app.version") or defaults.app_version,
        service_account_path=service_account_path,
        output_dir=str(root / output_dir),
        token_file=token_file,
        default_scopes=list(_lookup(data, "firebase.defaultScopes") or defaults.default_scopes),
        available_scopes=list(_lookup(data, "firebase.availableScopes") or []),
        pretty_print=defaults.pretty_print if pretty_print is None else bool(pretty_print),
        timeout=defaults.timeout if timeout is None else float(timeout),
    )
