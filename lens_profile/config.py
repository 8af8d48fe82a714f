from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv

DEFAULT_API_URL = "https://api.lens.xyz/graphql"
DEFAULT_AVATAR = "assets/default-avatar.png"
DEFAULT_USER_AGENT = "lens-profile-app"

# config.json from the browser app used camelCase; config.yml uses snake_case
_ALIASES = {
    "lens_name": ("lens_name", "lensName", "local_name", "localName"),
    "namespace": ("namespace",),
    "evm_address": ("evm_address", "evmAddress"),
    "api_url": ("api_url", "apiUrl", "lensApiUrl", "lens_api_url"),
    "proxy_url": ("proxy_url", "proxyUrl", "worker_url", "workerUrl"),
    "user_agent": ("user_agent", "userAgent"),
    "default_avatar": ("default_avatar", "defaultAvatar"),
    "timeout": ("timeout",),
}

# env var -> config field
_ENV_OVERRIDES = {
    "LENS_API_URL": "api_url",
    "LENS_PROXY_URL": "proxy_url",
    "DEFAULT_LOCALNAME": "lens_name",
    "DEFAULT_NAMESPACE": "namespace",
    "LENS_EVM_ADDRESS": "evm_address",
}


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class ProfileConfig:
    lens_name: str
    namespace: str
    evm_address: str
    api_url: str = DEFAULT_API_URL
    proxy_url: Optional[str] = None
    user_agent: str = DEFAULT_USER_AGENT
    default_avatar: str = DEFAULT_AVATAR
    timeout: float = 30.0
    save_dir: Optional[str] = None

    @property
    def handle(self) -> str:
        return f"{self.lens_name}.lens"

    def with_handle(self, handle: str) -> "ProfileConfig":
        """Return a copy that looks up `handle` instead (a trailing `.lens` is dropped)."""
        name = handle.strip()
        if name.endswith(".lens"):
            name = name[: -len(".lens")]
        if not name:
            raise ConfigError("handle must not be empty")
        return replace(self, lens_name=name)


def _pick(raw: dict, field: str):
    for key in _ALIASES[field]:
        if raw.get(key) not in (None, ""):
            return raw[key]
    return None


def config_from_mapping(raw: dict, environ: Optional[dict] = None) -> ProfileConfig:
    """Build a ProfileConfig from a parsed config file plus environment overrides.

    Environment variables win over the file, so a deployment can repoint the
    API or the default account without editing config.yml.
    """
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ConfigError("config must be a mapping")
    environ = os.environ if environ is None else environ

    values = {field: _pick(raw, field) for field in _ALIASES}
    for env_key, field in _ENV_OVERRIDES.items():
        if environ.get(env_key):
            values[field] = environ[env_key]

    for required in ("lens_name", "namespace", "evm_address"):
        if not values.get(required):
            raise ConfigError(f"config is missing required field: {required}")

    output = raw.get("output", {}) or {}
    timeout = values.get("timeout")
    try:
        timeout = float(timeout) if timeout is not None else 30.0
    except (TypeError, ValueError):
        raise ConfigError(f"timeout must be a number, got {timeout!r}")

    return ProfileConfig(
        lens_name=str(values["lens_name"]),
        namespace=str(values["namespace"]),
        evm_address=str(values["evm_address"]),
        api_url=str(values.get("api_url") or DEFAULT_API_URL),
        proxy_url=(str(values["proxy_url"]).rstrip("/") if values.get("proxy_url") else None),
        user_agent=str(values.get("user_agent") or DEFAULT_USER_AGENT),
        default_avatar=str(values.get("default_avatar") or DEFAULT_AVATAR),
        timeout=timeout,
        save_dir=output.get("save_dir"),
    )


def load_config(config_path: Path, *, env_file: Optional[Path] = None) -> ProfileConfig:
    """Read config.yml (or the old config.json; YAML parses both)."""
    load_dotenv(env_file or (Path(config_path).resolve().parent / ".env"))
    try:
        raw = yaml.safe_load(Path(config_path).read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise ConfigError(f"config file not found: {config_path}")
    except yaml.YAMLError as e:
        raise ConfigError(f"failed to parse {config_path}: {e}")
    return config_from_mapping(raw)
