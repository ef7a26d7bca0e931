from pathlib import Path

import pytest

API_DIR = Path(__file__).resolve().parents[2] / "api"

FEATURE_PACKAGES = ("admin_requests", "auth", "courses", "misc", "payments")


@pytest.mark.parametrize("package", FEATURE_PACKAGES)
def test_feature_packages_are_namespace_packages(package):
    assert (API_DIR / package / "router.py").is_file()
    assert not (API_DIR / package / "__init__.py").exists()


def test_core_is_a_regular_package():
    assert (API_DIR / "core" / "__init__.py").is_file()
