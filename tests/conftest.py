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

"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import pytest
import respx
from httpx import Response

from mailru_cloud.account import Account
from mailru_cloud.api.client import CloudAPI
from mailru_cloud.config import CloudProfile

AUTH = "https://auth.mail.ru"
CLOUD = "https://cloud.mail.ru"
EMAIL = "user@mail.ru"
PASSWORD = "s3cret-pass"
TOKEN = "csrf-token-123"

RATES_DOC: dict[str, Any] = {
    "email": EMAIL,
    "status": 200,
    "body": [
        {"id": "ZERO", "name": "Free", "is_active": True},
        {
            "id": "W1T",
            "name": "1 TB",
            "is_active": True,
            "cost": [
                {
                    "id": "W1T_month",
                    "cost": 699,
                    "special_cost": 349,
                    "currency": "RUR",
                    "duration": {"days": 0, "months": 1},
                    "special_duration": {"days": 30, "months": 0},
                }
            ],
        },
        {
            "id": "W2T",
            "name": "2 TB",
            "is_active": False,
            "cost": [
                {
                    "id": "W2T_year",
                    "cost": 9990,
                    "special_cost": 4990,
                    "currency": "RUR",
                    "duration": {"months": 12},
                    "special_duration": {"months": 12},
                }
            ],
        },
    ],
}


@pytest.fixture
def profile() -> CloudProfile:
    """Test account profile."""
    return CloudProfile(name="test", email=EMAIL, auth_url=AUTH, cloud_url=CLOUD)


@pytest.fixture
def api(profile: CloudProfile) -> CloudAPI:
    return CloudAPI(profile)


@pytest.fixture
def account(profile: CloudProfile) -> Account:
    return Account(EMAIL, PASSWORD, profile=profile)


@pytest.fixture
def cloud() -> Iterator[respx.MockRouter]:
    """Mocked auth and cloud hosts answering a successful login."""
    with respx.mock(assert_all_called=False) as router:
        router.post(f"{AUTH}/cgi-bin/auth", name="auth").mock(
            return_value=Response(200, headers={"set-cookie": "Mpop=session-cookie; Path=/"})
        )
        router.get(f"{AUTH}/sdc", name="sdc").mock(
            return_value=Response(200, headers={"set-cookie": "sdcs=sdc-cookie; Path=/"})
        )
        router.get(f"{CLOUD}/api/v2/tokens/csrf", name="token").mock(
            return_value=Response(200, json={"email": EMAIL, "body": {"token": TOKEN}})
        )
        router.get(f"{CLOUD}/api/v2/user/space", name="space").mock(
            return_value=Response(200, json={"body": {"bytes_total": 10, "bytes_used": 3}})
        )
        router.get(f"{CLOUD}/api/v2/billing/rates", name="rates").mock(
            return_value=Response(200, json=RATES_DOC)
        )
        yield router
