# Copyright (c) 2026, Renaud Allard <renaud@allard.it>
# All rights reserved.
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions are met:
#
# 1. Redistributions of source code must retain the above copyright notice,
#    this list of conditions and the following disclaimer.
#
# 2. Redistributions in binary form must reproduce the above copyright notice,
#    this list of conditions and the following disclaimer in the documentation
#    and/or other materials provided with the distribution.
#
# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS"
# AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE
# IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE
# ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR CONTRIBUTORS BE
# LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR
# CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO, PROCUREMENT OF
# SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS
# INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN
# CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE)
# ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE, EVEN IF ADVISED OF THE
# POSSIBILITY OF SUCH DAMAGE.

"""Async HTTP transport for the Mail.Ru auth and cloud hosts."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from mailru_cloud.config import CloudProfile

log = logging.getLogger(__name__)

AUTH_PATH = "/cgi-bin/auth"
AUTH_TOKEN_PATH = "/api/v2/tokens/csrf"
DISK_SPACE_PATH = "/api/v2/user/space"
RATES_PATH = "/api/v2/billing/rates"

API_VERSION = 2


class CloudAPI:
    """Async client shared by every call made under one account.

    Each login runs on a fresh client (and cookie jar) from
    :meth:`open_client`; once the handshake succeeds the account hands it
    back through :meth:`adopt` and it becomes :attr:`client`.
    """

    def __init__(
        self,
        profile: CloudProfile,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.profile = profile
        self.auth_url = profile.auth_url
        self.cloud_url = profile.cloud_url
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def open_client(self) -> httpx.AsyncClient:
        """Create a client with an empty cookie jar, routed to the auth host."""
        kwargs: dict[str, Any] = {}
        if self._transport is not None:
            kwargs["transport"] = self._transport
        else:
            kwargs["http2"] = True
            kwargs["limits"] = httpx.Limits(
                max_keepalive_connections=10,
                max_connections=20,
            )
        return httpx.AsyncClient(
            base_url=self.auth_url,
            verify=self.profile.verify_ssl,
            timeout=self.profile.timeout,
            follow_redirects=True,
            **kwargs,
        )

    def route_to_cloud(self, client: httpx.AsyncClient) -> None:
        """Switch a client's base URL from the auth host to the cloud host."""
        client.base_url = httpx.URL(self.cloud_url)

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = self.open_client()
            self.route_to_cloud(self._client)
        return self._client

    def adopt(self, client: httpx.AsyncClient) -> httpx.AsyncClient | None:
        """Install a logged-in client as the session client.

        Returns the previous client, which the caller should close.
        """
        previous = self._client
        self._client = client
        return previous

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def authorized_get(
        self,
        path: str,
        email: str,
        token: str,
        client: httpx.AsyncClient | None = None,
    ) -> httpx.Response:
        """GET a cloud API path with the account email and token attached."""
        params: dict[str, Any] = {
            "api": API_VERSION,
            "email": email,
            "x-email": email,
            "token": token,
        }

        resp = await (client or self.client).get(path, params=params)
        log.debug("GET %s -> %d", path, resp.status_code)
        return resp
