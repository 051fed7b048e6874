"""Summary: Settings for the Nylas access token, API region, and batch policy.

Importance: The CLI and HTTP API resolve credentials and timeouts the same way.
Alternatives: Pass the access token and API URI as command-line flags.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from dataclasses import dataclass

from nylasbridge.models import DEFAULT_API_URI, Credentials


@dataclass(frozen=True)
class AppConfig:
    """Summary: Nylas credentials, default grant, fail policy, and server binding.

    Importance: One frozen value is handed to build_context for every entrypoint.
    Alternatives: Read environment variables lazily inside the transport.
    """

    access_token: str
    api_uri: str
    grant_id: str
    request_timeout: float
    continue_on_fail: bool
    api_host: str
    api_port: int
    api_key: str

    @staticmethod
    def from_env() -> "AppConfig":
        """Summary: Resolve settings with environment over .env over defaults.json.

        Importance: NYLAS_* variables exported by a workflow host win over local files.
        Alternatives: Require every NYLAS_* variable to be set explicitly.
        """

        defaults = load_defaults(Path("config") / "defaults.json")
        load_dotenv(Path(".env"))
        return AppConfig(
            access_token=os.getenv("NYLAS_ACCESS_TOKEN", defaults["access_token"]),
            api_uri=os.getenv("NYLAS_API_URI") or defaults["api_uri"] or DEFAULT_API_URI,
            grant_id=os.getenv("NYLAS_GRANT_ID", defaults["grant_id"]),
            request_timeout=float(
                os.getenv("NYLASBRIDGE_REQUEST_TIMEOUT", defaults["request_timeout"])
            ),
            continue_on_fail=parse_bool(
                os.getenv("NYLASBRIDGE_CONTINUE_ON_FAIL", defaults["continue_on_fail"])
            ),
            api_host=os.getenv("NYLASBRIDGE_API_HOST", defaults["api_host"]),
            api_port=int(os.getenv("NYLASBRIDGE_API_PORT", defaults["api_port"])),
            api_key=os.getenv("NYLASBRIDGE_API_KEY", defaults["api_key"]),
        )

    def credentials(self) -> Credentials:
        """Summary: Build the credential pair used for every request.

        Importance: Applies the default API URI when none is configured.
        Alternatives: Pass token and URI separately to the transport.
        """

        return Credentials(access_token=self.access_token, api_uri=self.api_uri)


def load_defaults(path: Path) -> dict[str, str]:
    """Summary: Read the checked-in defaults for every nylasbridge setting.

    Importance: A missing defaults file is a deployment error, not a silent fallback.
    Alternatives: Hard-code fallbacks next to each os.getenv call.
    """

    if not path.exists():
        raise FileNotFoundError(f"Defaults file not found: {path}")
    return json.loads(path.read_text(encoding="utf-8"))


def load_dotenv(path: Path) -> None:
    """Summary: Export NYLAS_* and NYLASBRIDGE_* pairs from a local .env file.

    Importance: Variables already set in the process are never overwritten.
    Alternatives: Keep the access token only in the shell environment.
    """

    if not path.exists():
        return
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1]
        os.environ.setdefault(key.strip(), value)


def parse_bool(value: str | bool) -> bool:
    """Summary: Parse a boolean flag from config text.

    Importance: Accepts the common spellings used in .env files.
    Alternatives: Require exactly "true" or "false".
    """

    if isinstance(value, bool):
        return value
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off", ""}:
        return False
    raise ValueError(f"Invalid boolean value: {value}")
