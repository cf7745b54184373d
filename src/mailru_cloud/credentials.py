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

"""Credential handling: in-memory sealed secrets and keyring storage."""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

import keyring
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from mailru_cloud.api.errors import CredentialMissingError

SERVICE_NAME = "mailru-cloud"

_BLOCK_BYTES = algorithms.AES.block_size // 8


def _wipe(buf: bytearray) -> None:
    for i in range(len(buf)):
        buf[i] = 0


class Secret:
    """A password kept encrypted in memory.

    The plaintext is only available inside :meth:`reveal`, decrypted into a
    scratch buffer that is zeroed when the block exits.
    """

    def __init__(self, value: str | bytes | bytearray) -> None:
        plaintext = bytearray(value.encode("utf-8") if isinstance(value, str) else value)
        self._key = os.urandom(32)
        self._nonce = os.urandom(_BLOCK_BYTES)
        try:
            encryptor = self._cipher().encryptor()
            self._sealed = encryptor.update(plaintext) + encryptor.finalize()
        finally:
            _wipe(plaintext)

    def _cipher(self) -> Cipher:  # type: ignore[type-arg]
        return Cipher(algorithms.AES(self._key), modes.CTR(self._nonce))

    def __len__(self) -> int:
        return len(self._sealed)

    def __repr__(self) -> str:
        return "Secret('**********')"

    __str__ = __repr__

    @contextmanager
    def reveal(self) -> Iterator[str]:
        """Yield the plaintext for the duration of the ``with`` block."""
        buf = bytearray(len(self._sealed) + _BLOCK_BYTES - 1)
        try:
            decryptor = self._cipher().decryptor()
            n = decryptor.update_into(self._sealed, buf)
            decryptor.finalize()
            yield str(memoryview(buf)[:n], "utf-8")
        finally:
            _wipe(buf)

    def wipe(self) -> None:
        """Forget the secret; afterwards it behaves as an empty password."""
        self._sealed = b""
        self._key = os.urandom(32)


@dataclass(repr=False)
class Credential:
    """Login email and its sealed password."""

    email: str
    password: Secret

    @classmethod
    def create(cls, email: str, password: str | Secret) -> Credential:
        if not isinstance(password, Secret):
            password = Secret(password)
        return cls(email=email, password=password)

    def check(self) -> None:
        """Raise CredentialMissingError when email or password is empty."""
        if not self.email:
            raise CredentialMissingError("email")
        if len(self.password) == 0:
            raise CredentialMissingError("password")

    def __repr__(self) -> str:
        return f"Credential(email={self.email!r}, password=Secret('**********'))"


def store_credentials(profile_name: str, email: str, password: str) -> None:
    """Store credentials for a profile."""
    keyring.set_password(SERVICE_NAME, f"{profile_name}:email", email)
    keyring.set_password(SERVICE_NAME, f"{profile_name}:password", password)


def get_credentials(profile_name: str) -> Credential | None:
    """Retrieve credentials for a profile, sealing the password immediately.

    Returns None if not found.
    """
    email = keyring.get_password(SERVICE_NAME, f"{profile_name}:email")
    password = keyring.get_password(SERVICE_NAME, f"{profile_name}:password")
    if email is None or password is None:
        return None
    return Credential.create(email, password)


def delete_credentials(profile_name: str) -> None:
    """Delete credentials for a profile."""
    try:
        keyring.delete_password(SERVICE_NAME, f"{profile_name}:email")
    except keyring.errors.PasswordDeleteError:
        pass
    try:
        keyring.delete_password(SERVICE_NAME, f"{profile_name}:password")
    except keyring.errors.PasswordDeleteError:
        pass
