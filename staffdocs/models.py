# staffdocs/models.py
"""
StaffDocs SDK Data Models

Pydantic models for the domain side of the API.
Attributes are snake_case; the camelCase aliases are the field names the
console works with (``middleName``, ``dateOfBirth``, ``documentName`` ...).
Server field names that differ from these live in ``adapters``.
"""

import mimetypes
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


GENERIC_MIME_TYPE = "application/octet-stream"


# =============================================================================
# ENUMS
# =============================================================================

class BackendProfile(str, Enum):
    """Shape of the document API exposed by the backend."""
    FILE_LINKING = "file_linking"
    DOCUMENT_RESOURCE = "document_resource"


# =============================================================================
# DOMAIN MODELS
# =============================================================================

class DomainModel(BaseModel):
    """Base for models that serialize with camelCase keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


class Employee(DomainModel):
    """An employee record."""
    id: Optional[int] = None
    first_name: str = ""
    last_name: str = ""
    middle_name: Optional[str] = None
    username: Optional[str] = None
    date_of_birth: Optional[str] = None

    @property
    def full_name(self) -> str:
        parts = [self.last_name, self.first_name, self.middle_name]
        return " ".join(p for p in parts if p)


class DocumentType(DomainModel):
    """A document category."""
    id: Optional[int] = None
    type_name: str
    documents_count: Optional[int] = None


class Document(DomainModel):
    """A document attached to an employee."""
    id: Optional[int] = None
    document_name: str
    file_size: int = 0
    mime_type: str = GENERIC_MIME_TYPE
    document_type: Optional[DocumentType] = None
    employee: Optional[Employee] = None
    created_at: Optional[str] = None


class TokenPair(DomainModel):
    """Access/refresh token pair as issued by ``/users/login`` and ``/users/refresh``."""
    access_token: str
    refresh_token: str


# =============================================================================
# FILE TRANSFER
# =============================================================================

@dataclass
class UploadFile:
    """A file to send as the ``file`` part of a multipart upload."""
    filename: str
    content: bytes
    content_type: str = GENERIC_MIME_TYPE

    @property
    def size(self) -> int:
        return len(self.content)

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "UploadFile":
        path = Path(path)
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(
            filename=path.name,
            content=path.read_bytes(),
            content_type=content_type or GENERIC_MIME_TYPE,
        )

    def as_multipart(self) -> tuple:
        return (self.filename, self.content, self.content_type)


@dataclass
class DownloadedFile:
    """Raw bytes of a downloaded document plus its declared content type."""
    content: bytes
    content_type: str = GENERIC_MIME_TYPE
    filename: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.content)

    def save(self, destination: Union[str, Path]) -> Path:
        """Write the payload to ``destination`` (a directory or a file path)."""
        destination = Path(destination)
        if destination.is_dir():
            name = Path((self.filename or "").replace("\\", "/")).name
            destination = destination / (name if name not in ("", ".", "..") else "download")
        destination.write_bytes(self.content)
        return destination
