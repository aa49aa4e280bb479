"""
Data models for the VMix data server
"""
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


ROW_ID_KEY = "id"


class Row(BaseModel):
    """
    One imported spreadsheet data record

    Columns are kept as ordered (key, value) pairs. Setting a key that is
    already present replaces its value in place, so a later cell with the
    same header overwrites an earlier one. The ``id`` key is never stored
    among the entries.
    """
    id: str = Field(min_length=1)
    entries: List[Tuple[str, str]] = []

    def set(self, key: str, value: str) -> None:
        if key == ROW_ID_KEY:
            raise ValueError(f"'{ROW_ID_KEY}' is reserved for the row identifier")
        for idx, (existing, _) in enumerate(self.entries):
            if existing == key:
                self.entries[idx] = (key, value)
                return
        self.entries.append((key, value))

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        if key == ROW_ID_KEY:
            return self.id
        for existing, value in self.entries:
            if existing == key:
                return value
        return default

    def keys(self) -> List[str]:
        """Column keys in order, excluding ``id``"""
        return [key for key, _ in self.entries]

    def to_dict(self) -> Dict[str, str]:
        """Flat JSON form: ``{"id": ..., "<column>": "<value>", ...}``"""
        data = {ROW_ID_KEY: self.id}
        data.update(self.entries)
        return data


class SignatureCheck(BaseModel):
    """Result of the magic-byte pre-check"""
    ok: bool
    reason: Optional[str] = None


class StoreInfo(BaseModel):
    """Summary of the row store contents"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    count: int = Field(alias="elementCount")
    has_selection: bool
    last_updated: datetime
    filename: Optional[str] = None
    columns: List[str] = []


class WorkbookMetadata(BaseModel):
    """Container-level details of an uploaded workbook"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    format: str                       # "xlsx" | "xls"
    sheet_names: List[str] = []
    sheet_count: int = 0
    creator: Optional[str] = None
    created: Optional[datetime] = None
    modified: Optional[datetime] = None


class UploadResponse(BaseModel):
    """Payload returned after a successful import"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    filename: str
    row_count: int
    columns: List[str]
    file_size: Optional[int] = None
    mime_type: Optional[str] = None
    metadata: Optional[WorkbookMetadata] = None


def api_response(data: Any = None, message: Optional[str] = None) -> Dict[str, Any]:
    """Build the success envelope used by every API endpoint"""
    body: Dict[str, Any] = {"success": True}
    if data is not None:
        body["data"] = data
    if message is not None:
        body["message"] = message
    return body
