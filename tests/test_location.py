"""Tests for the known-location detector."""
from __future__ import annotations

import pytest

from Argos.catalog import Catalog, default_catalog
from Argos.catalog.models import LocationRule
from Argos.core.config import EngineConfig
from Argos.detectors.location import LocationDetector, match_segments, path_segments


@pytest.fixture
def detector() -> LocationDetector:
    return LocationDetector(default_catalog(), EngineConfig(worker_count=1))


def _apps(detector: LocationDetector, path: str) -> set:
    return {p.label for p in detector.resolve(path)}


def test_chrome_login_data(detector: LocationDetector) -> None:
    """Test a browser credential database under a profile directory."""
    path = r"C:\Users\alice\AppData\Local\Google\Chrome\User Data\Default\Login Data"
    partials = detector.resolve(path)
    assert [p.label for p in partials] == ["Google Chrome"]
    assert partials[0].category == "browser-credentials"
    assert partials[0].weight == 80


def test_case_insensitive_and_forward_slashes(detector: LocationDetector) -> None:
    """Test matching ignores case and separator style."""
    path = "c:/USERS/alice/appdata/LOCAL/google/chrome/user data/Profile 1/LOGIN DATA"
    assert _apps(detector, path) == {"Google Chrome"}


def test_double_star_spans_zero_or_more_segments(detector: LocationDetector) -> None:
    """Test '**' matches nested and directly contained files."""
    nested = r"C:\Users\a\AppData\Roaming\Microsoft\Protect\S-1-5-21-1\0f1e2d3c"
    direct = r"C:\Users\a\AppData\Roaming\Microsoft\Protect\CREDHIST"
    assert "DPAPI master keys" in _apps(detector, nested)
    assert "DPAPI master keys" in _apps(detector, direct)


def test_unc_and_extended_prefixes(detector: LocationDetector) -> None:
    """Test server/share and \\\\?\\ prefixes are stripped before matching."""
    assert _apps(detector, r"\\fileserver\c$\Users\bob\.git-credentials") == {"Git credential store"}
    assert _apps(detector, r"\\?\C:\Users\bob\.aws\credentials") == {"AWS CLI"}
    assert _apps(detector, r"\\?\UNC\fileserver\share\Users\bob\.aws\credentials") == {"AWS CLI"}


def test_globs_are_anchored(detector: LocationDetector) -> None:
    """Test a copied profile deeper in the tree does not match."""
    assert _apps(detector, r"D:\backup\Users\bob\.aws\credentials") == set()


def test_location_root_for_mounted_volumes() -> None:
    """Test location_root re-anchors matching at a mount point."""
    detector = LocationDetector(
        default_catalog(), EngineConfig(worker_count=1, location_root=r"D:\backup")
    )
    assert _apps(detector, r"D:\backup\Users\bob\.aws\credentials") == {"AWS CLI"}
    assert _apps(detector, r"E:\Users\bob\.aws\credentials") == set()


def test_overlapping_rules_both_reported() -> None:
    """Test every matching rule yields its own partial."""
    catalog = Catalog(locations=(
        LocationRule(r"{USERPROFILE}\**\*.kdbx", "Any vault", 30, "password-database"),
        LocationRule(r"{USERPROFILE}\Dropbox\**\*.kdbx", "Dropbox vault", 40, "password-database"),
    ))
    detector = LocationDetector(catalog, EngineConfig(worker_count=1))
    assert _apps(detector, r"C:\Users\bob\Dropbox\vault\db.kdbx") == {"Any vault", "Dropbox vault"}


@pytest.mark.parametrize(
    "path",
    [r"C:\Windows\System32\notepad.exe", r"C:\Users", "C:\\", "", None],
)
def test_no_match(detector: LocationDetector, path) -> None:
    """Test ordinary and degenerate paths produce nothing."""
    assert detector.resolve(path) == []


def test_windows_system_files(detector: LocationDetector) -> None:
    """Test SAM and NTDS paths are recognized."""
    assert _apps(detector, r"C:\Windows\System32\config\SAM") == {"Windows SAM hive"}
    assert _apps(detector, r"C:\Windows\NTDS\ntds.dit") == {"Active Directory database"}


def test_path_segments() -> None:
    """Test drive letters are dropped and segments lowercased."""
    assert path_segments(r"C:\Users\Bob\NTUSER.DAT") == ("users", "bob", "ntuser.dat")
    assert path_segments("/mnt/img/Users/x", root=("mnt", "img")) == ("users", "x")
    assert path_segments("/srv/other", root=("mnt", "img")) is None


def test_match_segments() -> None:
    """Test the segment matcher directly."""
    assert match_segments(("a", "b", "c"), ("a", "**", "c"))
    assert match_segments(("a", "c"), ("a", "**", "c"))
    assert not match_segments(("a", "b"), ("a", "**", "c"))
    assert match_segments(("users", "bob", "id_rsa"), ("users", "*", "id_*"))
    assert not match_segments(("users", "bob", "x", "id_rsa"), ("users", "*", "id_*"))
