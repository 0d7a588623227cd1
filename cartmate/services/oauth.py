"""OAuth identity lookup against external providers."""

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from cartmate.config import get_settings

logger = logging.getLogger(__name__)

SUPPORTED_PROVIDERS = ("google", "facebook")


@dataclass(frozen=True)
class ExternalIdentity:
    """Identity claims returned by a provider's userinfo endpoint."""

    provider: str
    external_user_id: str
    email: str
    name: str
    profile_picture_url: str | None = None


class OAuthError(Exception):
    """Provider rejected the token or returned an unusable profile."""


class OAuthService:
    """Resolves a provider access token into an external identity."""

    def __init__(self) -> None:
        self.settings = get_settings()
        self.timeout = self.settings.oauth_timeout_seconds
        self.userinfo_urls = {
            "google": self.settings.google_userinfo_url,
            "facebook": self.settings.facebook_userinfo_url,
        }

    async def fetch_identity(self, provider: str, access_token: str) -> ExternalIdentity:
        """Query the provider's userinfo endpoint with the user's access token."""
        url = self.userinfo_urls.get(provider)
        if url is None:
            raise OAuthError(f"Unsupported provider: {provider}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    url, headers={"Authorization": f"Bearer {access_token}"}
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            logger.warning(f"Userinfo request to {provider} failed: {e}")
            raise OAuthError(f"Could not verify {provider} token") from e

        return self._parse_profile(provider, data)

    @staticmethod
    def _parse_profile(provider: str, data: dict[str, Any]) -> ExternalIdentity:
        if provider == "google":
            external_id = data.get("sub")
            picture = data.get("picture")
        else:
            external_id = data.get("id")
            picture = (data.get("picture") or {}).get("data", {}).get("url")

        email = data.get("email")
        if not external_id or not email:
            raise OAuthError(f"{provider} profile is missing id or email")

        return ExternalIdentity(
            provider=provider,
            external_user_id=str(external_id),
            email=email,
            name=data.get("name") or email.split("@")[0],
            profile_picture_url=picture,
        )
