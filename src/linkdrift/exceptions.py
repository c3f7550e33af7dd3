"""linkdrift exception hierarchy.

All public exceptions inherit from LinkDriftError, giving callers a single
base class to catch when they want to handle any linkdrift-specific failure
without swallowing unrelated errors.

Only ``PackageNotFoundError`` is recovered inside a dependency check; every
other error aborts the run.
"""

from __future__ import annotations


class LinkDriftError(Exception):
    """Base exception for all linkdrift errors."""


class DependencyDirectoryNotFoundError(LinkDriftError):
    """Raised when the dependency directory (``node_modules``) does not exist.

    Means no dependencies are installed, so there is nothing to check.
    """


class RegistryError(LinkDriftError):
    """Raised when registry metadata cannot be fetched.

    Covers transport faults and any non-success HTTP status other than 404.

    Attributes:
        status_code: The HTTP status code, or None for transport faults.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class PackageNotFoundError(RegistryError):
    """Raised when the registry answers 404 for a package name."""

    def __init__(self, package_name: str) -> None:
        super().__init__(f"Package {package_name!r} not found in registry", 404)
        self.package_name = package_name


class RegistryConfigError(LinkDriftError):
    """Raised when npmrc registry settings cannot be used.

    For example a ``_password`` that is not base64 encoded.
    """


class GitError(LinkDriftError):
    """Raised when a git invocation fails.

    Covers git not being installed and non-zero exits such as running
    outside a working copy.

    Attributes:
        returncode: Exit status of the git process, or None if it never ran.
        stderr: Captured standard error output.
    """

    def __init__(
        self, message: str, returncode: int | None = None, stderr: str = ""
    ) -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


class ManifestError(LinkDriftError):
    """Raised when the consumer manifest cannot be read or parsed."""


class InvalidVersionError(LinkDriftError, ValueError):
    """Raised when a string is not a valid semantic version."""


class InvalidRangeError(LinkDriftError, ValueError):
    """Raised when a string is not a valid semantic-version range."""
