"""
Error types raised by the parser and the row store

Routers translate these into HTTP responses; each carries a stable ``code``
that is sent back to the client.
"""
from typing import Optional


class VmixError(Exception):
    """Base class for recoverable server errors"""
    code = "VMIX_ERROR"
    title = "Server error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class SecurityRejected(VmixError):
    """Uploaded bytes failed the size or signature check"""
    code = "INVALID_EXCEL_SECURITY"
    title = "Unsafe Excel file"


class ParseError(VmixError):
    """Uploaded bytes could not be turned into rows"""
    CORRUPTED = "corrupted"
    PASSWORD_PROTECTED = "password protected"
    NO_WORKSHEET = "no worksheet"
    NO_HEADER = "no header"
    NO_DATA = "no data"

    _CODES = {
        CORRUPTED: ("CORRUPTED_EXCEL_FILE", "Corrupted Excel file"),
        PASSWORD_PROTECTED: ("ENCRYPTED_EXCEL_FILE", "Protected Excel file"),
        NO_WORKSHEET: ("EMPTY_EXCEL_FILE", "Empty Excel file"),
        NO_HEADER: ("EMPTY_EXCEL_FILE", "Empty Excel file"),
        NO_DATA: ("EMPTY_EXCEL_FILE", "Empty Excel file"),
    }

    def __init__(self, reason: str, message: Optional[str] = None):
        super().__init__(message or reason)
        self.reason = reason
        self.code, self.title = self._CODES.get(
            reason, ("EXCEL_IMPORT_ERROR", "Excel import error")
        )


class ValidationFailed(VmixError):
    """Parsed rows are structurally empty"""
    code = "INVALID_EXCEL_DATA"
    title = "Invalid Excel data"


class NotFound(VmixError):
    """No row carries the requested id"""
    code = "ELEMENT_NOT_FOUND"
    title = "Element not found"

    def __init__(self, row_id: str):
        super().__init__(f"No element found with id: {row_id}")
        self.row_id = row_id


class NoSelection(VmixError):
    """No row is currently selected"""
    code = "NO_ELEMENT_SELECTED"
    title = "No element selected"

    def __init__(self, message: str = "Select an element from the list first"):
        super().__init__(message)
