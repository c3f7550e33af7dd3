"""linkdrift: Detect drift between linked dependency repositories and declared semver ranges."""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"
