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

"""Login handshake for Mail.Ru Cloud."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from mailru_cloud.api.client import AUTH_PATH, AUTH_TOKEN_PATH
from mailru_cloud.api.errors import AuthRejectedError, ProtocolError
from mailru_cloud.api.guard import ensure_authorized
from mailru_cloud.api.models import AuthToken, SessionState
from mailru_cloud.services.rates import fetch_active_tariffs

if TYPE_CHECKING:
    import httpx

    from mailru_cloud.api.client import CloudAPI
    from mailru_cloud.credentials import Credential

log = logging.getLogger(__name__)

AUTH_DOMAIN = "mail.ru"


def _check(resp: httpx.Response, step: str) -> None:
    if not resp.is_success:
        log.info("Login step '%s' rejected: HTTP %d", step, resp.status_code)
        raise AuthRejectedError(step, resp.status_code)


async def handshake(
    api: CloudAPI, credential: Credential
) -> tuple[SessionState, httpx.AsyncClient]:
    """Run the four-step login and return the new session with its client.

    Steps: credential POST, cookie consolidation GET on the auth host,
    token GET on the cloud host, then the tariff catalog. The client is
    closed on any failure, so callers only ever see a complete session.
    """
    await ensure_authorized(api, credential, None, full_check=False)

    client = api.open_client()
    try:
        with credential.password.reveal() as password:
            request = client.build_request(
                "POST",
                AUTH_PATH,
                data={
                    "Login": credential.email,
                    "Domain": AUTH_DOMAIN,
                    "Password": password,
                },
            )
        _check(await client.send(request), "auth")
        log.debug("Credentials accepted for %s", credential.email)

        resp = await client.get(
            api.profile.ensure_sdc_url,
            params={"from": api.profile.cloud_home_url},
        )
        _check(resp, "sdc")

        api.route_to_cloud(client)
        resp = await client.get(AUTH_TOKEN_PATH)
        _check(resp, "token")
        try:
            token = AuthToken.from_api(resp.json()).token
        except ValueError as e:
            raise ProtocolError("Token response is not JSON") from e

        candidate = SessionState(cookies=client.cookies, auth_token=token)
        catalog = await fetch_active_tariffs(api, credential, candidate, client=client)
    except BaseException:
        await client.aclose()
        raise

    return (
        SessionState(
            cookies=candidate.cookies,
            auth_token=token,
            activated_tariffs=catalog.rates,
        ),
        client,
    )
