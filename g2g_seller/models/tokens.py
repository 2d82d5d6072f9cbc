from typing import List

from pydantic import BaseModel, ConfigDict


class AuthTokens(BaseModel):
    """Credentials copied from a logged-in browser session. Never mutated."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    refresh_token: str
    long_lived_token: str
    active_device_token: str

    def missing_fields(self) -> List[str]:
        return [
            name
            for name in ("user_id", "refresh_token", "long_lived_token", "active_device_token")
            if not getattr(self, name).strip()
        ]

    def refresh_body(self) -> dict:
        return {
            "user_id": self.user_id,
            "refresh_token": self.refresh_token,
            "active_device_token": self.active_device_token,
            "long_lived_token": self.long_lived_token,
        }
