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

"""XDG-compliant TOML configuration management."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

try:
    import tomllib
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore[no-redef]

import tomli_w

DEFAULT_AUTH_URL = "https://auth.mail.ru"
DEFAULT_CLOUD_URL = "https://cloud.mail.ru"
DEFAULT_TIMEOUT = 30.0


def _config_dir() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME", "")
    base = Path(xdg) if xdg else Path.home() / ".config"
    return base / "mailru-cloud"


CONFIG_DIR = _config_dir()
CONFIG_FILE = CONFIG_DIR / "config.toml"


@dataclass
class CloudProfile:
    """A Mail.Ru Cloud account profile. The password lives in the keyring."""

    name: str
    email: str
    auth_url: str = DEFAULT_AUTH_URL
    cloud_url: str = DEFAULT_CLOUD_URL
    verify_ssl: bool = True
    timeout: float = DEFAULT_TIMEOUT

    @property
    def ensure_sdc_url(self) -> str:
        return f"{self.auth_url.rstrip('/')}/sdc"

    @property
    def cloud_home_url(self) -> str:
        return f"{self.cloud_url.rstrip('/')}/home"

    def to_dict(self) -> dict[str, Any]:
        return {
            "email": self.email,
            "auth_url": self.auth_url,
            "cloud_url": self.cloud_url,
            "verify_ssl": self.verify_ssl,
            "timeout": self.timeout,
        }

    @classmethod
    def from_dict(cls, name: str, data: dict[str, Any]) -> CloudProfile:
        return cls(
            name=name,
            email=data.get("email", ""),
            auth_url=data.get("auth_url", DEFAULT_AUTH_URL),
            cloud_url=data.get("cloud_url", DEFAULT_CLOUD_URL),
            verify_ssl=data.get("verify_ssl", True),
            timeout=float(data.get("timeout", DEFAULT_TIMEOUT)),
        )


@dataclass
class AppConfig:
    """Application configuration."""

    default_profile: str = ""
    profiles: dict[str, CloudProfile] = field(default_factory=dict)

    def get_profile(self, name: str = "") -> CloudProfile | None:
        """Look up a profile by name, falling back to the default one."""
        return self.profiles.get(name or self.default_profile)


def load_config() -> AppConfig:
    """Load configuration from TOML file."""
    if not CONFIG_FILE.exists():
        return AppConfig()

    with open(CONFIG_FILE, "rb") as f:
        data = tomllib.load(f)

    profiles: dict[str, CloudProfile] = {}
    for name, pdata in data.get("profiles", {}).items():
        profiles[name] = CloudProfile.from_dict(name, pdata)

    general = data.get("general", {})

    return AppConfig(
        default_profile=general.get("default_profile", ""),
        profiles=profiles,
    )


def save_config(config: AppConfig) -> None:
    """Write configuration to TOML file."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)

    data: dict[str, Any] = {
        "general": {
            "default_profile": config.default_profile,
        },
        "profiles": {},
    }

    for name, profile in config.profiles.items():
        data["profiles"][name] = profile.to_dict()

    with open(CONFIG_FILE, "wb") as f:
        tomli_w.dump(data, f)


def add_profile(config: AppConfig, profile: CloudProfile) -> None:
    """Add or update a profile."""
    config.profiles[profile.name] = profile
    if not config.default_profile:
        config.default_profile = profile.name
    save_config(config)


def remove_profile(config: AppConfig, name: str) -> None:
    """Remove a profile."""
    config.profiles.pop(name, None)
    if config.default_profile == name:
        config.default_profile = next(iter(config.profiles), "")
    save_config(config)
