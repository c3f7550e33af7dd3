"""Version-reconciliation engine.

- ``linkdrift.core.semver``        -- semantic versions and npm ranges
- ``linkdrift.core.git``           -- git queries on linked working copies
- ``linkdrift.core.resolver``      -- closest released ancestor of HEAD
- ``linkdrift.core.compatibility`` -- verdict against the declared range

Submodules are imported explicitly; this package re-exports nothing so the
registry layer can depend on ``linkdrift.core.semver`` without cycles.
"""
