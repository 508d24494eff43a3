"""Media-server (Jellyfin/Emby) authorization header and login."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

import aiohttp

from popcornpal import logger
from popcornpal.__version__ import __version__
from popcornpal.config import MediaServerConfig


class MediaServerAuthError(Exception):
    """Authentication against the media server was rejected or failed."""


@dataclass(frozen=True)
class MediaServerSession:
    access_token: str
    user_id: str


def build_media_auth_header(
    client_name: str,
    device_name: str,
    device_id: str,
    version: str = __version__,
    token: str | None = None,
) -> str:
    """
    Return the X-Emby-Authorization header value identifying this client.

    Quotes inside values are dropped because the header is a quoted list.
    """
    fields = [
        ("Client", client_name),
        ("Device", device_name),
        ("DeviceId", device_id),
        ("Version", version),
    ]
    if token:
        fields.append(("Token", token))
    rendered = ", ".join(f'{key}="{(value or "").strip().replace(chr(34), "")}"' for key, value in fields)
    return f"MediaBrowser {rendered}"


class MediaServerAuthenticator:
    """Logs in with the configured anonymous credential pair."""

    def __init__(self, config: MediaServerConfig):
        self.config = config

    def _headers(self) -> dict[str, str]:
        return {
            "X-Emby-Authorization": build_media_auth_header(
                self.config.client_name,
                self.config.device_name,
                self.config.device_id,
            ),
            "Content-Type": "application/json",
        }

    async def authenticate(self, server: str) -> MediaServerSession:
        url = f"{server.rstrip('/')}/Users/AuthenticateByName"
        body = {"Username": self.config.username, "Pw": self.config.password}
        log = logger.get_logger()
        log.api_request("POST", url)
        timeout = aiohttp.ClientTimeout(total=self.config.timeout)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(url, json=body, headers=self._headers()) as response:
                    if response.status != 200:
                        raise MediaServerAuthError(f"Authentication failed: {response.status} {response.reason}")
                    data = await response.json(content_type=None)
        except (asyncio.TimeoutError, aiohttp.ClientError, ValueError) as exc:
            raise MediaServerAuthError(f"Authentication request failed: {exc}") from exc

        if not isinstance(data, dict):
            raise MediaServerAuthError("Authentication response was not an object")
        token = data.get("AccessToken")
        user = data.get("User") if isinstance(data.get("User"), dict) else {}
        user_id = user.get("Id")
        if not token or not user_id:
            raise MediaServerAuthError("Authentication response is missing AccessToken or User.Id")
        return MediaServerSession(access_token=str(token), user_id=str(user_id))
