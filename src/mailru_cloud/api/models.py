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

"""Data models for Mail.Ru Cloud API responses."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any

import httpx

from mailru_cloud.api.errors import ProtocolError

log = logging.getLogger(__name__)

MIB = 1024 * 1024
FREE_RATE_ID = "ZERO"
FREE_UPLOAD_SIZE_LIMIT = 2 * 1024 * MIB


def _body(data: Any) -> Any:
    """Unwrap the ``{"body": ...}`` envelope used by the v2 API."""
    if isinstance(data, dict) and "body" in data:
        return data["body"]
    return data


def _decimal(value: Any) -> Decimal:
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise ProtocolError(f"Invalid amount: {value!r}") from e


@dataclass(frozen=True)
class AuthToken:
    """CSRF token document returned after login."""

    token: str

    @classmethod
    def from_api(cls, data: Any) -> AuthToken:
        body = _body(data)
        token = body.get("token", "") if isinstance(body, dict) else ""
        if not token or not isinstance(token, str):
            raise ProtocolError("Token document has no token")
        return cls(token=token)


@dataclass(frozen=True)
class Duration:
    """Billing period expressed in days and/or months."""

    days: int = 0
    months: int = 0

    @property
    def is_positive(self) -> bool:
        return self.days > 0 or self.months > 0

    @classmethod
    def from_api(cls, data: dict | None) -> Duration:  # type: ignore[type-arg]
        data = data or {}
        return cls(
            days=int(data.get("days", data.get("days_count", 0)) or 0),
            months=int(data.get("months", data.get("months_count", 0)) or 0),
        )


@dataclass(frozen=True)
class RateCost:
    """Price of a tariff for one billing period."""

    id: str
    cost: Decimal
    special_cost: Decimal
    currency: str
    duration: Duration
    special_duration: Duration

    @classmethod
    def from_api(cls, data: dict) -> RateCost:  # type: ignore[type-arg]
        return cls(
            id=str(data.get("id", "")),
            cost=_decimal(data.get("cost", 0)),
            special_cost=_decimal(data.get("special_cost", data.get("specialCost", 0))),
            currency=data.get("currency", ""),
            duration=Duration.from_api(data.get("duration")),
            special_duration=Duration.from_api(
                data.get("special_duration", data.get("specialDuration"))
            ),
        )


@dataclass(frozen=True)
class Rate:
    """A billing plan (tariff)."""

    id: str
    name: str
    is_active: bool = False
    cost: tuple[RateCost, ...] | None = None

    @property
    def is_free(self) -> bool:
        return self.id == FREE_RATE_ID

    @classmethod
    def from_api(cls, data: dict) -> Rate:  # type: ignore[type-arg]
        costs = data.get("cost")
        return cls(
            id=str(data.get("id", "")),
            name=data.get("name", ""),
            is_active=bool(data.get("is_active", data.get("active", False))),
            cost=tuple(RateCost.from_api(c) for c in costs) if costs else None,
        )


def _check_rate_costs(rate: Rate) -> None:
    """Log rates whose cost entries do not match their kind; they are kept."""
    if rate.is_free:
        if rate.cost:
            log.debug("Free rate %s carries cost entries", rate.id)
        return
    if not rate.cost:
        log.debug("Paid rate %s has no cost entries", rate.id)
        return
    for cost in rate.cost:
        if not cost.duration.is_positive:
            log.debug("Rate %s cost %s has no billing period", rate.id, cost.id)


def parse_rates(data: Any) -> list[Rate]:
    """Parse the tariff catalog document."""
    body = _body(data)
    if isinstance(body, dict):
        body = body.get("items", body.get("rates"))
    if not isinstance(body, list):
        raise ProtocolError("Rates document has no rate list")
    try:
        rates = [Rate.from_api(item) for item in body]
    except (AttributeError, TypeError, ValueError) as e:
        raise ProtocolError(f"Malformed rate entry: {e}") from e
    for rate in rates:
        _check_rate_costs(rate)
    return rates


def has_2gb_upload_size_limit(rates: list[Rate] | tuple[Rate, ...]) -> bool:
    """True when no activated tariff lifts the free-tier upload ceiling."""
    return not any(rate.id != FREE_RATE_ID for rate in rates)


def upload_size_limit(rates: list[Rate] | tuple[Rate, ...]) -> int | None:
    """Per-file upload ceiling in bytes, or None when a paid tariff is active."""
    if has_2gb_upload_size_limit(rates):
        return FREE_UPLOAD_SIZE_LIMIT
    return None


@dataclass(frozen=True)
class DiskUsage:
    """Disk quota in bytes."""

    total: int
    used: int

    def __post_init__(self) -> None:
        if self.total < 0 or self.used < 0:
            raise ValueError("Disk usage cannot be negative")
        if self.used > self.total:
            raise ValueError(f"Used space {self.used} exceeds total {self.total}")

    @property
    def free(self) -> int:
        return self.total - self.used

    @classmethod
    def from_api(cls, data: Any) -> DiskUsage:
        """Build from the space document; values arrive in MiB."""
        body = _body(data)
        try:
            return cls(
                total=int(body["bytes_total"]) * MIB,
                used=int(body["bytes_used"]) * MIB,
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ProtocolError(f"Malformed disk space document: {e}") from e


@dataclass(frozen=True)
class SessionState:
    """Cookies, token and tariffs of one logged-in account.

    Built whole by the login handshake and swapped in with a single
    assignment. ``cookies`` is the live jar of the session's HTTP client.
    """

    cookies: httpx.Cookies = field(default_factory=httpx.Cookies)
    auth_token: str | None = None
    activated_tariffs: tuple[Rate, ...] = ()

    @property
    def is_authenticated(self) -> bool:
        return bool(self.auth_token) and len(self.cookies) > 0

    @property
    def has_2gb_upload_size_limit(self) -> bool:
        return has_2gb_upload_size_limit(self.activated_tariffs)
