"""Discovery of linked dependencies.

Public API::

    from linkdrift.discovery import LinkedPackageScan

    for dep in LinkedPackageScan(Path("node_modules")):
        print(f"{dep.name} -> {dep.path}")
"""

from __future__ import annotations

from linkdrift.discovery.linked_packages import (
    LinkedPackageScan,
    iter_linked_packages,
    iter_packages,
)
from linkdrift.discovery.models import LinkedDependency

__all__ = [
    "LinkedDependency",
    "LinkedPackageScan",
    "iter_linked_packages",
    "iter_packages",
]
