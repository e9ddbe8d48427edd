"""Tests for header-based server detection."""
import pytest

from detectors.server import ServerDetector
from models.signature import ServerSignature
from rules.rules_loader import load_server_signatures


@pytest.fixture
def detector():
    return ServerDetector(load_server_signatures())


def test_detects_nginx(detector):
    entry = detector.detect({"server": "nginx/1.2"})
    assert entry.detector == "server"
    assert entry.id == "nginx"
    assert entry.name == "Nginx"


def test_detects_cloudflare(detector):
    entry = detector.detect({"server": "cloudflare"})
    assert entry.to_dict() == {"detector": "server", "id": "cloudflare", "name": "Cloudflare"}


def test_unrecognized_headers(detector):
    assert detector.detect({"server": "gws", "content-type": "text/html"}) is None
    assert detector.detect({}) is None


def test_matching_is_case_insensitive(detector):
    assert detector.detect({"Server": "NGINX"}).id == "nginx"
    assert detector.detect({"SERVER": "Microsoft-IIS/10.0"}).id == "microsoft-iis"


def test_value_must_start_with_prefix(detector):
    assert detector.detect({"server": "my-nginx"}) is None


def test_presence_only_matchers(detector):
    assert detector.detect({"X-Wix-Request-Id": "1234.5678"}).id == "wix"
    assert detector.detect({"x-akamai-transformed": "9 - 0 pmb=mRUM,1"}).id == "akamai"


def test_table_order_decides_precedence(detector):
    # Both akamai and nginx match; akamai comes first in the table
    entry = detector.detect({"server": "nginx", "x-akamai-transformed": "9"})
    assert entry.id == "akamai"


def test_any_matcher_in_a_signature_is_enough():
    detector = ServerDetector([
        ServerSignature(id="edge", name="Edge", headers={"x-edge-id": "", "server": "edge"}),
    ])
    assert detector.detect({"Server": "Edge/2"}).id == "edge"
    assert detector.detect({"x-edge-id": "abc"}).id == "edge"
    assert detector.detect({"server": "other"}) is None
