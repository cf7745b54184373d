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

"""Disk quota service."""

from __future__ import annotations

from typing import TYPE_CHECKING

from mailru_cloud.api.client import DISK_SPACE_PATH
from mailru_cloud.api.errors import ProtocolError, SessionInvalidError
from mailru_cloud.api.models import DiskUsage

if TYPE_CHECKING:
    import httpx

    from mailru_cloud.api.client import CloudAPI


async def get_disk_usage_raw(
    api: CloudAPI,
    email: str,
    token: str,
    client: httpx.AsyncClient | None = None,
) -> DiskUsage:
    """Fetch disk usage without checking the session first.

    The authorization guard uses this as its live probe, so any
    non-success status means the service no longer accepts the session.
    """
    resp = await api.authorized_get(DISK_SPACE_PATH, email, token, client=client)
    if not resp.is_success:
        raise SessionInvalidError("The client is not authorized.")

    try:
        data = resp.json()
    except ValueError as e:
        raise ProtocolError("Disk space response is not JSON") from e
    return DiskUsage.from_api(data)
