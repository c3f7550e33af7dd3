"""Tests for linked package discovery in node_modules."""

from __future__ import annotations

from pathlib import Path

import pytest

from linkdrift.discovery import (
    LinkedDependency,
    LinkedPackageScan,
    iter_linked_packages,
    iter_packages,
)
from linkdrift.exceptions import DependencyDirectoryNotFoundError
from tests.helpers import install_package, link_package


@pytest.fixture
def node_modules(tmp_path: Path) -> Path:
    """node_modules with a mix of linked, installed, scoped and hidden entries."""
    nm = tmp_path / "app" / "node_modules"
    nm.mkdir(parents=True)
    work = tmp_path / "work"
    install_package(nm, "lodash")
    link_package(nm, "left-pad", work / "left-pad")
    link_package(nm, "@acme/utils", work / "acme-utils")
    install_package(nm, "@acme/core")
    install_package(nm, ".bin")
    return nm


class TestIterPackages:
    """Tests for ``iter_packages``."""

    def test_lists_all_entries(self, node_modules: Path) -> None:
        names = [name for name, _ in iter_packages(node_modules)]
        assert names == ["@acme/core", "@acme/utils", "left-pad", "lodash"]

    def test_skips_hidden_entries(self, node_modules: Path) -> None:
        assert ".bin" not in {name for name, _ in iter_packages(node_modules)}

    def test_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(DependencyDirectoryNotFoundError):
            list(iter_packages(tmp_path / "node_modules"))

    def test_empty_directory(self, tmp_path: Path) -> None:
        assert list(iter_packages(tmp_path)) == []


class TestIterLinkedPackages:
    """Tests for ``iter_linked_packages``."""

    def test_only_symlinks(self, node_modules: Path) -> None:
        names = [dep.name for dep in iter_linked_packages(node_modules)]
        assert names == ["@acme/utils", "left-pad"]

    def test_resolves_targets(self, node_modules: Path, tmp_path: Path) -> None:
        deps = {dep.name: dep for dep in iter_linked_packages(node_modules)}
        assert deps["left-pad"].path == (tmp_path / "work" / "left-pad").resolve()
        assert deps["left-pad"].link_path == (node_modules / "left-pad").absolute()

    def test_scoped_target(self, node_modules: Path, tmp_path: Path) -> None:
        """Scoped links resolve to their own target, not the scope directory."""
        deps = {dep.name: dep for dep in iter_linked_packages(node_modules)}
        assert deps["@acme/utils"].path == (tmp_path / "work" / "acme-utils").resolve()
        assert deps["@acme/utils"].link_path == (node_modules / "@acme" / "utils").absolute()

    def test_linked_scope_directory_contents(self, tmp_path: Path) -> None:
        """Only entries inside a scope directory are candidates, not the scope itself."""
        nm = tmp_path / "node_modules"
        nm.mkdir()
        link_package(nm, "@linked", tmp_path / "scope-target")
        (tmp_path / "scope-target" / "pkg").mkdir()
        assert list(iter_linked_packages(nm)) == []

    def test_missing_directory(self, tmp_path: Path) -> None:
        with pytest.raises(DependencyDirectoryNotFoundError):
            list(iter_linked_packages(tmp_path / "node_modules"))


class TestLinkedPackageScan:
    """Tests for the restartable scan."""

    def test_restartable(self, node_modules: Path) -> None:
        scan = LinkedPackageScan(node_modules)
        assert [d.name for d in scan] == [d.name for d in scan]

    def test_reflects_new_links(self, node_modules: Path, tmp_path: Path) -> None:
        scan = LinkedPackageScan(node_modules)
        assert len(list(scan)) == 2
        link_package(node_modules, "right-pad", tmp_path / "work" / "right-pad")
        assert [d.name for d in scan][-1] == "right-pad"

    def test_lazy_error(self, tmp_path: Path) -> None:
        """Construction succeeds; the missing directory surfaces on iteration."""
        scan = LinkedPackageScan(tmp_path / "node_modules")
        with pytest.raises(DependencyDirectoryNotFoundError):
            next(iter(scan))

    def test_yields_models(self, node_modules: Path) -> None:
        assert all(isinstance(dep, LinkedDependency) for dep in LinkedPackageScan(node_modules))
