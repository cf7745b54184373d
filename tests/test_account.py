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

"""Tests for the account session lifecycle."""

from __future__ import annotations

import asyncio
from dataclasses import replace
from urllib.parse import parse_qs

import httpx
import pytest
import respx
from conftest import EMAIL, PASSWORD, RATES_DOC, TOKEN
from httpx import Response

from mailru_cloud.account import Account
from mailru_cloud.api.client import CloudAPI
from mailru_cloud.api.errors import (
    CredentialMissingError,
    ProtocolError,
    SessionInvalidError,
    SessionMissingError,
)
from mailru_cloud.api.models import FREE_UPLOAD_SIZE_LIMIT, MIB
from mailru_cloud.config import CloudProfile


class TestLogin:
    @pytest.mark.asyncio
    async def test_login_success(self, account: Account, cloud: respx.MockRouter) -> None:
        assert await account.login() is True

        assert len(account.session.cookies) > 0
        assert account.auth_token == TOKEN
        assert account.session.is_authenticated
        assert [r.id for r in account.activated_tariffs] == ["ZERO", "W1T"]
        assert account.has_2gb_upload_size_limit is False
        assert account.upload_size_limit is None

    @pytest.mark.asyncio
    async def test_login_posts_form(self, account: Account, cloud: respx.MockRouter) -> None:
        await account.login()

        request = cloud["auth"].calls.last.request
        form = parse_qs(request.content.decode())
        assert form == {"Login": [EMAIL], "Domain": ["mail.ru"], "Password": [PASSWORD]}

    @pytest.mark.asyncio
    async def test_login_follows_handshake_order(
        self, account: Account, cloud: respx.MockRouter
    ) -> None:
        await account.login()

        hosts_paths = [(c.request.url.host, c.request.url.path) for c in cloud.calls]
        assert hosts_paths[:3] == [
            ("auth.mail.ru", "/cgi-bin/auth"),
            ("auth.mail.ru", "/sdc"),
            ("cloud.mail.ru", "/api/v2/tokens/csrf"),
        ]
        assert hosts_paths[-1] == ("cloud.mail.ru", "/api/v2/billing/rates")
        assert cloud["sdc"].calls.last.request.url.params["from"] == "https://cloud.mail.ru/home"

    @pytest.mark.asyncio
    async def test_token_sent_with_privileged_calls(
        self, account: Account, cloud: respx.MockRouter
    ) -> None:
        await account.login()

        params = cloud["rates"].calls.last.request.url.params
        assert params["token"] == TOKEN
        assert params["email"] == EMAIL

    @pytest.mark.asyncio
    async def test_empty_email_fails_before_network(
        self, profile: CloudProfile, cloud: respx.MockRouter
    ) -> None:
        account = Account("", PASSWORD, profile=profile)

        with pytest.raises(CredentialMissingError) as exc_info:
            await account.login()
        assert exc_info.value.field == "email"
        assert cloud.calls.call_count == 0

    @pytest.mark.asyncio
    async def test_empty_password_fails_before_network(
        self, profile: CloudProfile, cloud: respx.MockRouter
    ) -> None:
        account = Account(EMAIL, "", profile=profile)

        with pytest.raises(CredentialMissingError) as exc_info:
            await account.login()
        assert exc_info.value.field == "password"
        assert cloud.calls.call_count == 0

    @pytest.mark.asyncio
    async def test_rejected_credentials(self, account: Account, cloud: respx.MockRouter) -> None:
        cloud["auth"].mock(return_value=Response(403))

        assert await account.login() is False
        assert not cloud["sdc"].called
        assert len(account.session.cookies) == 0
        assert account.auth_token is None

    @pytest.mark.asyncio
    async def test_rejected_sdc(self, account: Account, cloud: respx.MockRouter) -> None:
        cloud["sdc"].mock(return_value=Response(500))

        assert await account.login() is False
        assert not cloud["token"].called
        assert not account.session.is_authenticated

    @pytest.mark.asyncio
    async def test_token_failure_leaves_session_untouched(
        self, account: Account, cloud: respx.MockRouter
    ) -> None:
        cloud["token"].mock(return_value=Response(500))

        assert await account.login() is False
        assert cloud["auth"].called and cloud["sdc"].called
        assert len(account.session.cookies) == 0
        assert account.auth_token is None

    @pytest.mark.asyncio
    async def test_malformed_token_raises(self, account: Account, cloud: respx.MockRouter) -> None:
        cloud["token"].mock(return_value=Response(200, text="<html>oops</html>"))

        with pytest.raises(ProtocolError):
            await account.login()
        assert len(account.session.cookies) == 0
        assert account.auth_token is None

    @pytest.mark.asyncio
    async def test_token_document_without_token(
        self, account: Account, cloud: respx.MockRouter
    ) -> None:
        cloud["token"].mock(return_value=Response(200, json={"body": {}}))

        with pytest.raises(ProtocolError):
            await account.login()
        assert not account.session.is_authenticated

    @pytest.mark.asyncio
    async def test_rates_transport_error_degrades(
        self, account: Account, cloud: respx.MockRouter
    ) -> None:
        cloud["rates"].mock(side_effect=httpx.ConnectError("connection refused"))

        assert await account.login() is True
        assert account.activated_tariffs == []
        assert account.has_2gb_upload_size_limit is True
        assert account.upload_size_limit == FREE_UPLOAD_SIZE_LIMIT

    @pytest.mark.asyncio
    async def test_rates_guard_failure_degrades(
        self, account: Account, cloud: respx.MockRouter
    ) -> None:
        cloud["space"].mock(return_value=Response(401))

        assert await account.login() is True
        assert account.activated_tariffs == []
        assert not cloud["rates"].called

    @pytest.mark.asyncio
    async def test_failed_relogin_keeps_previous_session(
        self, account: Account, cloud: respx.MockRouter
    ) -> None:
        await account.login()
        previous = account.session

        cloud["auth"].mock(return_value=Response(401))
        assert await account.login() is False
        assert account.session is previous

    @pytest.mark.asyncio
    async def test_relogin_closes_previous_client(
        self, account: Account, cloud: respx.MockRouter
    ) -> None:
        await account.login()
        first_client = account.api.client

        assert await account.login() is True
        assert first_client.is_closed
        assert account.api.client is not first_client

    @pytest.mark.asyncio
    async def test_concurrent_logins_are_serialized(
        self, account: Account, cloud: respx.MockRouter
    ) -> None:
        results = await asyncio.gather(account.login(), account.login())

        assert results == [True, True]
        assert cloud["auth"].call_count == 2
        assert account.session.is_authenticated
        assert account.session.cookies is account.api.client.cookies

    @pytest.mark.asyncio
    async def test_relogin_waits_for_running_call(self, profile: CloudProfile) -> None:
        logins = 0
        slow_first_session = False
        first_call_started = asyncio.Event()
        seen: list[tuple[str, str]] = []

        async def handler(request: httpx.Request) -> httpx.Response:
            nonlocal logins
            path = request.url.path
            if path == "/cgi-bin/auth":
                logins += 1
                cookie = f"Mpop=login{logins}; Domain=.mail.ru; Path=/"
                return httpx.Response(200, headers={"set-cookie": cookie})
            if path == "/sdc":
                return httpx.Response(200)
            if path == "/api/v2/tokens/csrf":
                return httpx.Response(200, json={"body": {"token": f"T{logins}"}})
            if path == "/api/v2/billing/rates":
                return httpx.Response(200, json=RATES_DOC)
            token = request.url.params["token"]
            seen.append((token, request.headers.get("cookie", "")))
            if slow_first_session and token == "T1":
                first_call_started.set()
                await asyncio.sleep(0.05)
            return httpx.Response(200, json={"body": {"bytes_total": 10, "bytes_used": 3}})

        api = CloudAPI(profile, transport=httpx.MockTransport(handler))
        account = Account(EMAIL, PASSWORD, api=api)
        assert await account.login() is True
        first_client = api.client
        slow_first_session = True
        seen.clear()

        async def relogin() -> bool:
            await first_call_started.wait()
            return await account.login()

        usage, relogged = await asyncio.gather(account.get_disk_usage(), relogin())

        assert usage.used == 3 * MIB
        assert relogged is True
        assert account.auth_token == "T2"
        assert first_client.is_closed
        old_token_calls = [cookie for token, cookie in seen if token == "T1"]
        assert old_token_calls == ["Mpop=login1", "Mpop=login1"]
        assert all(cookie == "Mpop=login2" for token, cookie in seen if token == "T2")
        await account.close()


class TestAuthorizationGuard:
    @pytest.mark.asyncio
    async def test_base_check_is_local(self, account: Account, cloud: respx.MockRouter) -> None:
        await account.ensure_authorized(False)
        assert cloud.calls.call_count == 0

    @pytest.mark.asyncio
    async def test_base_check_missing_credential(
        self, profile: CloudProfile, cloud: respx.MockRouter
    ) -> None:
        account = Account("", "", profile=profile)

        with pytest.raises(CredentialMissingError):
            await account.ensure_authorized(False)
        with pytest.raises(CredentialMissingError):
            await account.ensure_authorized(True)
        assert cloud.calls.call_count == 0

    @pytest.mark.asyncio
    async def test_never_logged_in(self, account: Account, cloud: respx.MockRouter) -> None:
        with pytest.raises(SessionMissingError, match="Missing cookies"):
            await account.ensure_authorized(True)
        assert cloud.calls.call_count == 0

    @pytest.mark.asyncio
    async def test_full_check_after_login(self, account: Account, cloud: respx.MockRouter) -> None:
        await account.login()
        calls_before = cloud["space"].call_count

        await account.ensure_authorized(True)
        assert cloud["space"].call_count == calls_before + 1
        assert await account.check_authorization() is True

    @pytest.mark.asyncio
    async def test_missing_token(self, account: Account, cloud: respx.MockRouter) -> None:
        await account.login()
        account._session = replace(account.session, auth_token="")

        with pytest.raises(SessionMissingError, match="Missing authorization token"):
            await account.ensure_authorized(True)

    @pytest.mark.asyncio
    async def test_missing_cookies(self, account: Account, cloud: respx.MockRouter) -> None:
        await account.login()
        account.session.cookies.clear()

        with pytest.raises(SessionMissingError, match="Missing cookies"):
            await account.ensure_authorized(True)
        assert await account.check_authorization() is False

    @pytest.mark.asyncio
    async def test_session_revoked(self, account: Account, cloud: respx.MockRouter) -> None:
        await account.login()
        cloud["space"].mock(return_value=Response(403))

        with pytest.raises(SessionInvalidError, match="not authorized"):
            await account.ensure_authorized(True)
        assert await account.check_authorization() is False

    @pytest.mark.asyncio
    async def test_check_authorization_before_login(
        self, account: Account, cloud: respx.MockRouter
    ) -> None:
        assert await account.check_authorization() is False


class TestDiskUsage:
    @pytest.mark.asyncio
    async def test_get_disk_usage(self, account: Account, cloud: respx.MockRouter) -> None:
        await account.login()

        usage = await account.get_disk_usage()
        assert usage.total == 10 * MIB
        assert usage.used == 3 * MIB
        assert usage.free == 7 * MIB

    @pytest.mark.asyncio
    async def test_get_disk_usage_requires_session(
        self, account: Account, cloud: respx.MockRouter
    ) -> None:
        with pytest.raises(SessionMissingError):
            await account.get_disk_usage()
        assert cloud.calls.call_count == 0

    @pytest.mark.asyncio
    async def test_internal_skips_guard(self, account: Account, cloud: respx.MockRouter) -> None:
        await account.login()
        calls_before = cloud["space"].call_count

        await account.get_disk_usage_internal(False)
        assert cloud["space"].call_count == calls_before + 1

        await account.get_disk_usage_internal(True)
        assert cloud["space"].call_count == calls_before + 3

    @pytest.mark.asyncio
    async def test_disk_usage_rejected(self, account: Account, cloud: respx.MockRouter) -> None:
        await account.login()
        cloud["space"].mock(return_value=Response(401))

        with pytest.raises(SessionInvalidError):
            await account.get_disk_usage()


class TestAccountLifecycle:
    @pytest.mark.asyncio
    async def test_refresh_tariffs(self, account: Account, cloud: respx.MockRouter) -> None:
        await account.login()
        cloud["rates"].mock(
            return_value=Response(200, json={"body": [{"id": "ZERO", "name": "Free", "is_active": True}]})
        )

        result = await account.refresh_tariffs()
        assert not result.degraded
        assert [r.id for r in account.activated_tariffs] == ["ZERO"]
        assert account.has_2gb_upload_size_limit is True

    @pytest.mark.asyncio
    async def test_refresh_tariffs_failure_keeps_previous(
        self, account: Account, cloud: respx.MockRouter
    ) -> None:
        await account.login()
        cloud["rates"].mock(return_value=Response(500))

        result = await account.refresh_tariffs()
        assert result.degraded
        assert [r.id for r in account.activated_tariffs] == ["ZERO", "W1T"]

    @pytest.mark.asyncio
    async def test_close_forgets_password(self, account: Account, cloud: respx.MockRouter) -> None:
        async with account:
            await account.login()

        with pytest.raises(CredentialMissingError) as exc_info:
            await account.ensure_authorized(False)
        assert exc_info.value.field == "password"

    def test_password_not_in_repr(self, account: Account) -> None:
        assert PASSWORD not in repr(account._credential)
        assert PASSWORD not in repr(account.session)
