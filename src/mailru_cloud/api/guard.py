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

"""Session validity checks run before privileged calls."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from mailru_cloud.api.errors import SessionMissingError
from mailru_cloud.services.quota import get_disk_usage_raw

if TYPE_CHECKING:
    import httpx

    from mailru_cloud.api.client import CloudAPI
    from mailru_cloud.api.models import SessionState
    from mailru_cloud.credentials import Credential

log = logging.getLogger(__name__)


async def ensure_authorized(
    api: CloudAPI,
    credential: Credential,
    state: SessionState | None,
    *,
    full_check: bool,
    client: httpx.AsyncClient | None = None,
) -> None:
    """Check that the account may issue privileged calls.

    The credential is always validated locally. With ``full_check`` the
    session must also carry cookies and a token, and a quota round trip
    must succeed; a rejection there raises SessionInvalidError.
    """
    credential.check()
    if not full_check:
        return

    if state is None or len(state.cookies) == 0:
        raise SessionMissingError("Missing cookies.")
    if not state.auth_token:
        raise SessionMissingError("Missing authorization token.")

    await get_disk_usage_raw(api, credential.email, state.auth_token, client=client)
    log.debug("Session verified for %s", credential.email)
