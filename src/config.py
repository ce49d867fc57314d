import os
from pathlib import Path

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class ServerConfig:
    def __init__(self) -> None:
        self.sse_port = int(os.getenv("MCP_SSE_PORT", "8000"))
        self.streamable_http_port = int(os.getenv("MCP_STREAMABLE_HTTP_PORT", "8080"))
        self.manifest_path = Path(self._get_required_env("PROFILE_MANIFEST_PATH"))
        self.hide_unsupported = self._get_bool_env("HIDE_UNSUPPORTED", default=True)
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    @staticmethod
    def _get_required_env(key: str) -> str:
        """Get required environment variable or raise descriptive error."""
        value = os.getenv(key)
        if not value:
            raise ValueError(f"Required environment variable {key} is not set")
        return value

    @staticmethod
    def _get_bool_env(key: str, default: bool) -> bool:
        value = os.getenv(key)
        if value is None or not value.strip():
            return default
        normalized = value.strip().lower()
        if normalized in _TRUE_VALUES:
            return True
        if normalized in _FALSE_VALUES:
            return False
        raise ValueError(f"Environment variable {key} must be a boolean, got {value!r}")
