"""
StaffDocs SDK

A Python client library for the StaffDocs employee records service.

Quick Start:
    ```python
    from staffdocs import StaffDocsClient, UploadFile

    client = StaffDocsClient(api_url="http://localhost:5055/api")
    client.auth.login("admin@example.com", "Secret!1")

    # List employees
    employees = client.employees.list()

    # Attach a scan to the first one
    client.documents.upload(
        employees[0].id,
        document_type_id=1,
        document_name="Passport",
        file=UploadFile.from_path("passport.pdf"),
    )
    ```

Async usage mirrors the sync client:
    ```python
    from staffdocs import AsyncStaffDocsClient

    async with AsyncStaffDocsClient() as client:
        employees = await client.employees.search("Ivanov")
    ```
"""

__version__ = "0.1.0"

from .client import StaffDocsClient
from .async_client import AsyncStaffDocsClient
from .config import ClientSettings, configure_logging, load_settings, MAX_UPLOAD_BYTES
from .errors import (
    StaffDocsError,
    ClientValidationError,
    RequestValidationError,
    AuthenticationError,
    SessionExpiredError,
    PermissionDeniedError,
    NotFoundError,
    ServerError,
    NetworkError,
)
from .models import (
    BackendProfile,
    Employee,
    Document,
    DocumentType,
    TokenPair,
    UploadFile,
    DownloadedFile,
)
from .tokens import TokenStore, MemoryTokenStore, FileTokenStore

__all__ = [
    "StaffDocsClient",
    "AsyncStaffDocsClient",
    "ClientSettings",
    "load_settings",
    "configure_logging",
    "MAX_UPLOAD_BYTES",
    "StaffDocsError",
    "ClientValidationError",
    "RequestValidationError",
    "AuthenticationError",
    "SessionExpiredError",
    "PermissionDeniedError",
    "NotFoundError",
    "ServerError",
    "NetworkError",
    "BackendProfile",
    "Employee",
    "Document",
    "DocumentType",
    "TokenPair",
    "UploadFile",
    "DownloadedFile",
    "TokenStore",
    "MemoryTokenStore",
    "FileTokenStore",
]
