"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import pytest
from fakes import (
    TEST_CATALOG,
    TEST_TOKENS,
    FakeExtensionHost,
    FakeFileSystem,
    FakePackageManager,
    GIT_CMD_DIR,
    InstalledProbeValidator,
    StepClock,
)

from provctl.core.catalog import CatalogResolver
from provctl.core.reconciler import Reconciler
from provctl.models.catalog import Catalog


@pytest.fixture
def test_catalog() -> Catalog:
    """Small catalogue covering every group and section."""
    return Catalog.model_validate(TEST_CATALOG)


@pytest.fixture
def resolver(test_catalog: Catalog) -> CatalogResolver:
    """Resolver over the test catalogue."""
    return CatalogResolver(test_catalog)


@pytest.fixture
def package_manager() -> FakePackageManager:
    """Package manager with nothing installed."""
    return FakePackageManager()


@pytest.fixture
def extension_host() -> FakeExtensionHost:
    """Extension host with nothing installed."""
    return FakeExtensionHost()


@pytest.fixture
def file_system() -> FakeFileSystem:
    """Filesystem where only the Git directory exists."""
    return FakeFileSystem(dirs={GIT_CMD_DIR})


@pytest.fixture
def make_reconciler(resolver: CatalogResolver):
    """Factory building a Reconciler wired to fakes."""

    def _make(
        manager: FakePackageManager,
        host: FakeExtensionHost,
        fs: FakeFileSystem,
        **overrides: object,
    ) -> Reconciler:
        options: dict[str, object] = {
            "resolver": resolver,
            "validator": InstalledProbeValidator(manager),
            "tokens": TEST_TOKENS,
            "clock": StepClock(),
            "require_admin": False,
        }
        options.update(overrides)
        return Reconciler(manager, host, fs, **options)  # type: ignore[arg-type]

    return _make


@pytest.fixture
def isolated_dirs(monkeypatch: pytest.MonkeyPatch, tmp_path):
    """Point the config and state directories at a temporary directory."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / "state"))
    return tmp_path
