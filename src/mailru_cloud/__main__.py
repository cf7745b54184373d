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

"""Entry point: log in to a configured account and print its status."""

import asyncio
import getpass
import logging
import re
import sys

_REDACT_RE = re.compile(
    r"(password|token|email|x-email)=[^&\s\"]+",
    re.IGNORECASE,
)


class _RedactFilter(logging.Filter):
    """Strip passwords, tokens, and emails from log messages."""

    def filter(self, record: logging.LogRecord) -> bool:
        # httpx passes the request URL as an argument, so redact the rendered text
        record.msg = _REDACT_RE.sub(r"\1=***", record.getMessage())
        record.args = None
        return True


def _format_size(value: int) -> str:
    size = float(value)
    for unit in ("B", "KiB", "MiB", "GiB"):
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TiB"


async def _run(profile_name: str, store: bool) -> int:
    from mailru_cloud.account import Account
    from mailru_cloud.api.errors import AuthError
    from mailru_cloud.config import load_config
    from mailru_cloud.credentials import Credential, get_credentials, store_credentials

    config = load_config()
    profile = config.get_profile(profile_name)
    if profile is None:
        print(f"Unknown profile: {profile_name or '(no default)'}", file=sys.stderr)
        return 2

    credential = get_credentials(profile.name)
    if credential is None:
        password = getpass.getpass(f"Password for {profile.email}: ")
        if store:
            store_credentials(profile.name, profile.email, password)
        credential = Credential.create(profile.email, password)
        del password

    async with Account.from_credential(credential, profile) as account:
        try:
            if not await account.login():
                print("Login rejected by the service", file=sys.stderr)
                return 1
            usage = await account.get_disk_usage_internal(False)
        except AuthError as e:
            print(f"Login failed: {e}", file=sys.stderr)
            return 1

        print(f"Account: {account.email}")
        print(
            f"Disk: {_format_size(usage.used)} used of {_format_size(usage.total)}"
            f" ({_format_size(usage.free)} free)"
        )
        tariffs = ", ".join(f"{r.name} ({r.id})" for r in account.activated_tariffs)
        print(f"Tariffs: {tariffs or 'none'}")
        if account.has_2gb_upload_size_limit:
            print("Upload size limit: 2 GiB per file")
    return 0


def main() -> None:
    debug = "--debug" in sys.argv
    if debug:
        sys.argv.remove("--debug")
    store = "--store" in sys.argv
    if store:
        sys.argv.remove("--store")

    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
    )
    for handler in logging.getLogger().handlers:
        handler.addFilter(_RedactFilter())

    # Suppress chatty third-party loggers in debug mode
    for name in ("hpack", "httpcore"):
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    profile_name = sys.argv[1] if len(sys.argv) > 1 else ""
    sys.exit(asyncio.run(_run(profile_name, store)))


if __name__ == "__main__":
    main()
