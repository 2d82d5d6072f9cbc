import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from loguru import logger
from pydantic import ValidationError

from g2g_seller.core.config import (
    ENV_ACTIVE_DEVICE_TOKEN,
    ENV_LONG_LIVED_TOKEN,
    ENV_REFRESH_TOKEN,
    ENV_USER_ID,
    SETTINGS_PATH,
)
from g2g_seller.core.errors import SettingsError
from g2g_seller.core.logger import register_secrets
from g2g_seller.models.tokens import AuthTokens

ENV_FIELDS = {
    "user_id": ENV_USER_ID,
    "refresh_token": ENV_REFRESH_TOKEN,
    "long_lived_token": ENV_LONG_LIVED_TOKEN,
    "active_device_token": ENV_ACTIVE_DEVICE_TOKEN,
}


def validate_tokens(tokens: AuthTokens) -> AuthTokens:
    missing = tokens.missing_fields()
    if missing:
        raise SettingsError([f"{name} is empty" for name in missing])
    return tokens


class SettingsStore:
    """Token settings kept in a small JSON file, with an environment fallback."""

    def __init__(self, path: Path | str = SETTINGS_PATH):
        self.path = Path(path)

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            return json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise SettingsError([f"{self.path} is not valid JSON: {exc}"]) from exc

    def _dump(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def from_file(self) -> Optional[AuthTokens]:
        section = self._load().get("g2g")
        if not section:
            return None
        try:
            return AuthTokens(**{name: str(section.get(name) or "") for name in ENV_FIELDS})
        except ValidationError as exc:
            raise SettingsError([str(exc)]) from exc

    @staticmethod
    def from_env() -> Optional[AuthTokens]:
        values = {name: os.getenv(var, "") for name, var in ENV_FIELDS.items()}
        if not any(values.values()):
            return None
        return AuthTokens(**values)

    def load_tokens(self) -> AuthTokens:
        tokens = self.from_file()
        source = str(self.path)
        if tokens is None:
            tokens = self.from_env()
            source = "environment"
        if tokens is None:
            raise SettingsError([
                f"no tokens in {self.path} and none of {', '.join(ENV_FIELDS.values())} are set"
            ])
        logger.info(f"Using G2G tokens from {source}")
        validate_tokens(tokens)
        register_secrets([tokens.refresh_token, tokens.long_lived_token, tokens.active_device_token])
        return tokens

    def has_tokens(self) -> bool:
        try:
            self.load_tokens()
        except SettingsError:
            return False
        return True

    def save_tokens(self, tokens: AuthTokens) -> None:
        validate_tokens(tokens)
        data = self._load()
        data["g2g"] = tokens.model_dump()
        self._dump(data)
        logger.success(f"Settings saved to {self.path}")

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()
            logger.info(f"Settings cleared ({self.path})")
