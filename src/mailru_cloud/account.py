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

"""Mail.Ru Cloud account: session lifecycle and account-level queries."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import replace
from types import TracebackType

import httpx

from mailru_cloud.api.auth import handshake
from mailru_cloud.api.client import CloudAPI
from mailru_cloud.api.errors import AuthError, AuthRejectedError
from mailru_cloud.api.guard import ensure_authorized
from mailru_cloud.api.models import (
    DiskUsage,
    Rate,
    SessionState,
    upload_size_limit,
)
from mailru_cloud.config import CloudProfile
from mailru_cloud.credentials import Credential, Secret
from mailru_cloud.services.quota import get_disk_usage_raw
from mailru_cloud.services.rates import CatalogResult, fetch_active_tariffs

log = logging.getLogger(__name__)


class Account:
    """A Mail.Ru Cloud account and its current session.

    ``session`` always holds a complete value: either the empty
    unauthenticated state or the result of a successful login. Logins are
    serialized. Privileged calls pin the session together with the client
    holding its cookies, and a login does not commit until every pinned
    call has finished.
    """

    def __init__(
        self,
        email: str,
        password: str | Secret,
        profile: CloudProfile | None = None,
        api: CloudAPI | None = None,
    ) -> None:
        self._credential = Credential.create(email, password)
        self.api = api or CloudAPI(profile or CloudProfile(name="default", email=email))
        self._session = SessionState()
        self._login_lock = asyncio.Lock()
        self._active_calls = 0
        self._calls_done = asyncio.Event()
        self._calls_done.set()

    @classmethod
    def from_credential(cls, credential: Credential, profile: CloudProfile) -> Account:
        return cls(credential.email, credential.password, profile=profile)

    @property
    def email(self) -> str:
        return self._credential.email

    @property
    def session(self) -> SessionState:
        return self._session

    @property
    def auth_token(self) -> str | None:
        return self._session.auth_token

    @property
    def activated_tariffs(self) -> list[Rate]:
        """Tariffs active at the last login. Log in again to recalculate."""
        return list(self._session.activated_tariffs)

    @property
    def has_2gb_upload_size_limit(self) -> bool:
        return self._session.has_2gb_upload_size_limit

    @property
    def upload_size_limit(self) -> int | None:
        return upload_size_limit(self._session.activated_tariffs)

    async def login(self) -> bool:
        """Log in to the cloud.

        Returns False when the service rejects a handshake step. Raises
        CredentialMissingError before any request if email or password
        is empty, and ProtocolError on a malformed token response.
        """
        async with self._login_lock:
            try:
                state, client = await handshake(self.api, self._credential)
            except AuthRejectedError as e:
                log.info("Login failed for %s: %s", self.email, e)
                return False

            if self._active_calls:
                log.debug("Waiting for %d call(s) on the old session", self._active_calls)
            await self._calls_done.wait()
            previous = self.api.adopt(client)
            self._session = state

        if previous is not None and previous is not client:
            await previous.aclose()
        log.info("Logged in as %s", self.email)
        return True

    @asynccontextmanager
    async def _pinned_session(self) -> AsyncIterator[tuple[SessionState, httpx.AsyncClient]]:
        """Hold the current session and its client for one privileged call.

        Waits for a running login to commit first. Until the block exits,
        no other login can replace the session or close the client.
        """
        async with self._login_lock:
            self._active_calls += 1
            self._calls_done.clear()
            state, client = self._session, self.api.client
        try:
            yield state, client
        finally:
            self._active_calls -= 1
            if self._active_calls == 0:
                self._calls_done.set()

    async def ensure_authorized(self, full_check: bool) -> None:
        """Raise an AuthError unless the account may issue privileged calls."""
        if not full_check:
            await ensure_authorized(self.api, self._credential, self._session, full_check=False)
            return
        async with self._pinned_session() as (state, client):
            await ensure_authorized(
                self.api, self._credential, state, full_check=True, client=client
            )

    async def check_authorization(self) -> bool:
        """Return True if the client is logged in right now."""
        try:
            await self.ensure_authorized(True)
        except AuthError as e:
            log.debug("Authorization check failed: %s", e)
            return False
        return True

    async def get_disk_usage(self) -> DiskUsage:
        """Get total, used and free space of the account."""
        return await self.get_disk_usage_internal(True)

    async def get_disk_usage_internal(self, check_authorization: bool) -> DiskUsage:
        """Get disk usage, optionally skipping the authorization check."""
        async with self._pinned_session() as (state, client):
            if check_authorization:
                await ensure_authorized(
                    self.api, self._credential, state, full_check=True, client=client
                )
            return await get_disk_usage_raw(
                self.api, self.email, state.auth_token or "", client=client
            )

    async def refresh_tariffs(self) -> CatalogResult:
        """Re-read the activated tariffs without logging in again."""
        async with self._pinned_session() as (state, client):
            result = await fetch_active_tariffs(self.api, self._credential, state, client=client)
            if not result.degraded:
                self._session = replace(state, activated_tariffs=result.rates)
        return result

    async def close(self) -> None:
        """Close the HTTP client and forget the password."""
        await self.api.close()
        self._credential.password.wipe()

    async def __aenter__(self) -> Account:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()
