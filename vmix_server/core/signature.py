"""
Magic-byte sniffing for uploaded spreadsheets

A cheap format check run on raw bytes before paying for a full parse.
Modern workbooks (.xlsx) are ZIP containers, legacy ones (.xls) are OLE
compound documents.
"""
from typing import Optional

from vmix_server.errors import SecurityRejected
from vmix_server.models import SignatureCheck


MAX_FILE_BYTES = 50 * 1024 * 1024

FORMAT_XLSX = "xlsx"
FORMAT_XLS = "xls"

ZIP_SIGNATURES = (
    b"PK\x03\x04",   # local file header
    b"PK\x05\x06",   # end of central directory (empty archive)
    b"PK\x07\x08",   # spanned archive
)
OLE_SIGNATURE = bytes.fromhex("d0cf11e0a1b11ae1")

# Directory entry name (UTF-16LE) of an encrypted OOXML package inside an OLE container
_ENCRYPTED_PACKAGE = "EncryptedPackage".encode("utf-16-le")


def detect_format(data: bytes) -> Optional[str]:
    """Return ``"xlsx"``, ``"xls"`` or None from the leading bytes"""
    if data[:4] in ZIP_SIGNATURES:
        return FORMAT_XLSX
    if data[:8] == OLE_SIGNATURE:
        return FORMAT_XLS
    return None


def is_encrypted_package(data: bytes) -> bool:
    """True when an OLE container wraps a password-protected .xlsx"""
    return data[:8] == OLE_SIGNATURE and _ENCRYPTED_PACKAGE in data


def check_signature(data: bytes, max_bytes: int = MAX_FILE_BYTES) -> SignatureCheck:
    """
    Check size and container signature of an uploaded file

    Args:
        data: Raw uploaded bytes
        max_bytes: Largest accepted buffer

    Returns:
        SignatureCheck with ok=False and a reason when rejected
    """
    if len(data) > max_bytes:
        limit_mb = max_bytes // (1024 * 1024)
        return SignatureCheck(ok=False, reason=f"File too large (max {limit_mb} MB)")

    if detect_format(data) is None:
        return SignatureCheck(ok=False, reason="Invalid file signature")

    return SignatureCheck(ok=True)


def ensure_signature(data: bytes, max_bytes: int = MAX_FILE_BYTES) -> None:
    """Raise SecurityRejected if ``check_signature`` refuses the buffer"""
    result = check_signature(data, max_bytes)
    if not result.ok:
        raise SecurityRejected(result.reason or "Invalid format")
