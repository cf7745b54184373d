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

"""Authentication and session errors for the Mail.Ru Cloud API."""

from __future__ import annotations


class AuthError(Exception):
    """Authentication failure."""


class CredentialMissingError(AuthError):
    """Login or password is not defined."""

    def __init__(self, field: str, message: str = "Is not defined.") -> None:
        self.field = field
        super().__init__(f"{field}: {message}")


class SessionMissingError(AuthError):
    """No session has been established (missing cookies or token)."""


class SessionInvalidError(AuthError):
    """Session looked populated locally but the service rejected it."""


class AuthRejectedError(AuthError):
    """A handshake step returned a non-success status."""

    def __init__(self, step: str, status_code: int) -> None:
        self.step = step
        self.status_code = status_code
        super().__init__(f"Handshake step '{step}' rejected with HTTP {status_code}")


class ProtocolError(AuthError):
    """Service response could not be understood."""
