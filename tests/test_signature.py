"""
Tests for the magic-byte pre-check
"""
import pytest

from vmix_server.core.signature import (
    MAX_FILE_BYTES,
    OLE_SIGNATURE,
    check_signature,
    detect_format,
    ensure_signature,
    is_encrypted_package,
)
from vmix_server.errors import SecurityRejected


@pytest.mark.parametrize("prefix", [b"PK\x03\x04", b"PK\x05\x06", b"PK\x07\x08"])
def test_zip_signatures_accepted(prefix):
    result = check_signature(prefix + b"\x00" * 32)
    assert result.ok is True
    assert result.reason is None


def test_ole_signature_accepted():
    assert check_signature(bytes.fromhex("d0cf11e0a1b11ae1") + b"\x00" * 32).ok is True


@pytest.mark.parametrize("data", [
    b"",
    b"PK",
    b"%PDF-1.7\n",
    b"id,name\n1,x\n",
    bytes.fromhex("d0cf11e0a1b11a"),   # truncated OLE header
])
def test_other_prefixes_rejected(data):
    result = check_signature(data)
    assert result.ok is False
    assert result.reason


def test_oversize_rejected():
    data = b"PK\x03\x04" + bytes(MAX_FILE_BYTES - 3)
    result = check_signature(data)
    assert result.ok is False
    assert "50 MB" in result.reason


def test_exact_limit_accepted():
    data = b"PK\x03\x04" + bytes(60)
    assert check_signature(data, max_bytes=len(data)).ok is True
    assert check_signature(data, max_bytes=len(data) - 1).ok is False


def test_detect_format():
    assert detect_format(b"PK\x03\x04rest") == "xlsx"
    assert detect_format(OLE_SIGNATURE) == "xls"
    assert detect_format(b"nope") is None


def test_encrypted_package_detected():
    data = OLE_SIGNATURE + b"\x00" * 64 + "EncryptedPackage".encode("utf-16-le")
    assert is_encrypted_package(data) is True
    assert is_encrypted_package(OLE_SIGNATURE + b"\x00" * 64) is False


def test_ensure_signature_raises():
    with pytest.raises(SecurityRejected) as exc_info:
        ensure_signature(b"not a workbook")
    assert exc_info.value.code == "INVALID_EXCEL_SECURITY"
