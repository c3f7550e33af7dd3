"""Registry endpoint and credential resolution.

Mirrors how the npm client picks a registry for a package: a scoped package
(``@scope/name``) uses ``@scope:registry`` when configured, everything else
uses ``registry``. Credentials are keyed by "nerf-darted" registry URLs
(``//host/path/:_authToken``) and matched by walking up the registry path.

All resolution functions are pure: they take a ``RegistryConfig`` built by
``load_registry_config`` from explicit file paths and an explicit
environment mapping, never from ambient process state.
"""

from __future__ import annotations

import base64
import logging
import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import quote, urlsplit

from linkdrift.exceptions import RegistryConfigError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_REGISTRY: str = "https://registry.npmjs.org/"

_ENV_VAR_RE = re.compile(r"(\\*)\$\{([^}]+)\}")
_SCOPE_REGISTRY_RE = re.compile(r"^(@[^:]+):registry$")
_AUTH_KEYS = ("_authToken", "_auth", "username", "_password")


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RegistryCredential:
    """A credential to send with registry requests.

    Attributes:
        token: The token or base64 ``user:password`` pair.
        type: HTTP auth scheme, ``Bearer`` or ``Basic``.
    """

    token: str
    type: str = "Bearer"

    @property
    def header(self) -> str:
        """Value for the ``Authorization`` header."""
        return f"{self.type} {self.token}"


@dataclass(frozen=True)
class RegistryConfig:
    """Registry settings relevant to metadata fetching.

    Attributes:
        default_registry: Registry for unscoped packages and unconfigured scopes.
        scoped_registries: ``@scope`` -> registry URL.
        auth: Nerf-darted registry key (``//host/path/``) -> auth settings
            (``_authToken``, ``_auth``, ``username``, ``_password``).
    """

    default_registry: str = DEFAULT_REGISTRY
    scoped_registries: Mapping[str, str] = field(default_factory=dict)
    auth: Mapping[str, Mapping[str, str]] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


def package_scope(package_name: str) -> str | None:
    """Return the ``@scope`` part of a package name, or None if unscoped."""
    if package_name.startswith("@") and "/" in package_name:
        return package_name.split("/", 1)[0]
    return None


def normalize_registry_url(url: str) -> str:
    """Ensure a registry URL ends with a single trailing slash."""
    return url.rstrip("/") + "/"


def registry_url_for(package_name: str, config: RegistryConfig) -> str:
    """Select the registry serving *package_name*.

    Args:
        package_name: Package name, optionally scoped (``@scope/name``).
        config: Registry configuration.

    Returns:
        Registry base URL ending with ``/``.
    """
    scope = package_scope(package_name)
    if scope is not None and scope in config.scoped_registries:
        return normalize_registry_url(config.scoped_registries[scope])
    return normalize_registry_url(config.default_registry)


def package_url(package_name: str, registry_url: str) -> str:
    """Build the metadata document URL for a package.

    The scope separator is percent-encoded the way the npm client sends it
    (``@scope%2Fname``).
    """
    return normalize_registry_url(registry_url) + quote(package_name, safe="@")


def nerf_dart(url: str) -> str:
    """Reduce a URL to its credential key: ``//host[:port]/path/``."""
    parts = urlsplit(url)
    path = parts.path if parts.path.endswith("/") else parts.path.rsplit("/", 1)[0] + "/"
    return f"//{parts.netloc}{path}"


def auth_for(registry_url: str, config: RegistryConfig) -> RegistryCredential | None:
    """Find the credential for a registry URL.

    Walks from the full registry path up to the host root, returning the
    first configured credential. ``_authToken`` takes precedence over
    ``_auth``, which takes precedence over ``username`` + ``_password``.

    Args:
        registry_url: Registry base URL.
        config: Registry configuration.

    Returns:
        The credential, or None for unauthenticated access.

    Raises:
        RegistryConfigError: If a matching ``_password`` is not valid base64.
    """
    key = nerf_dart(normalize_registry_url(registry_url))
    while True:
        settings = config.auth.get(key)
        if settings:
            credential = _credential_from(key, settings)
            if credential is not None:
                return credential
        if key.count("/") <= 3:
            return None
        key = key[: key.rstrip("/").rfind("/") + 1]


def _credential_from(key: str, settings: Mapping[str, str]) -> RegistryCredential | None:
    token = settings.get("_authToken")
    if token:
        return RegistryCredential(token, "Bearer")
    basic = settings.get("_auth")
    if basic:
        return RegistryCredential(basic, "Basic")
    username, password = settings.get("username"), settings.get("_password")
    if username and password:
        try:
            decoded = base64.b64decode(password, validate=True).decode("utf-8")
        except ValueError as exc:
            raise RegistryConfigError(f"{key}:_password is not valid base64: {exc}") from exc
        pair = base64.b64encode(f"{username}:{decoded}".encode()).decode("ascii")
        return RegistryCredential(pair, "Basic")
    return None


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def _expand_env(value: str, env: Mapping[str, str]) -> str:
    def replace(match: re.Match[str]) -> str:
        escapes, name = match.group(1), match.group(2)
        if len(escapes) % 2:
            return escapes[:-1] + "${" + name + "}"
        return escapes + env.get(name, "")

    return _ENV_VAR_RE.sub(replace, value)


def parse_npmrc(text: str, env: Mapping[str, str]) -> dict[str, str]:
    """Parse ``.npmrc`` content into a flat key/value mapping.

    Supports ``key=value`` lines, ``;`` and ``#`` comments, optional quotes
    around values and ``${VAR}`` expansion from *env*.
    """
    values: dict[str, str] = {}
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped[0] in ";#" or "=" not in stripped:
            continue
        key, _, value = stripped.partition("=")
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1]
        values[_expand_env(key.strip(), env)] = _expand_env(value, env)
    return values


def load_registry_config(
    paths: Iterable[Path], env: Mapping[str, str]
) -> RegistryConfig:
    """Build a ``RegistryConfig`` from npmrc files and environment variables.

    Args:
        paths: npmrc files, lowest precedence first. Missing files are skipped.
        env: Environment mapping used for ``${VAR}`` expansion and
            ``npm_config_registry``.

    Returns:
        The merged configuration.
    """
    merged: dict[str, str] = {}
    for path in paths:
        if not path.is_file():
            continue
        logger.debug("Reading registry configuration from %s", path)
        merged.update(parse_npmrc(path.read_text(encoding="utf-8"), env))

    default = env.get("npm_config_registry") or merged.get("registry") or DEFAULT_REGISTRY
    scoped: dict[str, str] = {}
    auth: dict[str, dict[str, str]] = {}
    for key, value in merged.items():
        scope_match = _SCOPE_REGISTRY_RE.match(key)
        if scope_match:
            scoped[scope_match.group(1)] = value
            continue
        if key.startswith("//") and ":" in key:
            prefix, _, setting = key.rpartition(":")
            if setting in _AUTH_KEYS:
                auth.setdefault(normalize_registry_url(prefix), {})[setting] = value
    return RegistryConfig(default_registry=default, scoped_registries=scoped, auth=auth)
