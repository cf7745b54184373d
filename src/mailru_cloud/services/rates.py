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

"""Tariff catalog service."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from mailru_cloud.api.client import RATES_PATH
from mailru_cloud.api.errors import ProtocolError
from mailru_cloud.api.guard import ensure_authorized
from mailru_cloud.api.models import Rate, parse_rates

if TYPE_CHECKING:
    import httpx

    from mailru_cloud.api.client import CloudAPI
    from mailru_cloud.api.models import SessionState
    from mailru_cloud.credentials import Credential

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class CatalogResult:
    """Active tariffs, or an empty tuple plus the error that replaced them."""

    rates: tuple[Rate, ...] = ()
    error: Exception | None = None

    @property
    def degraded(self) -> bool:
        return self.error is not None


async def fetch_rates(
    api: CloudAPI,
    email: str,
    token: str,
    client: httpx.AsyncClient | None = None,
) -> list[Rate]:
    """Fetch the full tariff catalog."""
    resp = await api.authorized_get(RATES_PATH, email, token, client=client)
    resp.raise_for_status()
    try:
        data = resp.json()
    except ValueError as e:
        raise ProtocolError("Rates response is not JSON") from e
    return parse_rates(data)


async def fetch_active_tariffs(
    api: CloudAPI,
    credential: Credential,
    state: SessionState,
    client: httpx.AsyncClient | None = None,
) -> CatalogResult:
    """Fetch the tariffs activated on the account.

    Never raises: the catalog only enriches the session, so any failure
    (including a failed authorization check) yields an empty result with
    the error attached.
    """
    try:
        await ensure_authorized(api, credential, state, full_check=True, client=client)
        rates = await fetch_rates(api, credential.email, state.auth_token or "", client=client)
    except Exception as e:
        log.warning("Tariff catalog unavailable, assuming no active tariffs: %s", e)
        return CatalogResult(error=e)

    active = tuple(rate for rate in rates if rate.is_active)
    log.debug("Active tariffs: %s", ", ".join(rate.id for rate in active) or "none")
    return CatalogResult(rates=active)
