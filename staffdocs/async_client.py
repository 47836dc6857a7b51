# staffdocs/async_client.py
"""
StaffDocs Async API Client

Async version of the StaffDocs client using httpx.AsyncClient.
Provides the same API as the sync client but with async/await support.
The static document type catalog needs no I/O and is shared with the sync
client.
"""

import logging
from typing import Any, Dict, List, Optional, Union

import httpx

from .adapters import (
    document_from_file_record,
    document_from_wire,
    document_type_from_wire,
    document_type_to_wire,
    employee_from_wire,
    employee_to_wire,
)
from .client import (
    StaticDocumentTypesClient,
    as_employee,
    downloaded_file,
    json_or_none,
    linked_document_or_none,
)
from .config import ClientSettings, load_settings
from .errors import NotFoundError, StaffDocsError
from .models import (
    BackendProfile,
    Document,
    DocumentType,
    DownloadedFile,
    Employee,
    TokenPair,
    UploadFile,
)
from .pipeline import AsyncRequestPipeline, SessionExpiredCallback
from .tokens import FileTokenStore, MemoryTokenStore, TokenStore
from .validation import (
    validate_credentials,
    validate_document_type,
    validate_employee,
    validate_registration,
    validate_upload,
)

logger = logging.getLogger(__name__)


async def _ignore_missing(pipeline: AsyncRequestPipeline, path: str) -> bool:
    try:
        await pipeline.request("DELETE", path)
    except NotFoundError:
        logger.info(f"Delete target already missing: {path}")
        return False
    return True


class AsyncEmployeesClient:
    """Async client for employee operations."""

    def __init__(self, pipeline: AsyncRequestPipeline):
        self._pipeline = pipeline

    async def list(self) -> List[Employee]:
        """List all employees in server order."""
        response = await self._pipeline.request("GET", "/employees")
        return [employee_from_wire(e) for e in response.json()]

    async def get(self, employee_id: int) -> Employee:
        """Get a single employee by ID."""
        response = await self._pipeline.request("GET", f"/employees/{employee_id}")
        return employee_from_wire(response.json())

    async def search(self, query: str) -> List[Employee]:
        """Search employees; a blank query lists everyone."""
        if not query or not query.strip():
            return await self.list()
        response = await self._pipeline.request("GET", "/employees/search", params={"q": query.strip()})
        return [employee_from_wire(e) for e in response.json()]

    async def create(self, employee: Union[Employee, Dict[str, Any]]) -> Employee:
        employee = as_employee(employee)
        validate_employee(employee)
        response = await self._pipeline.request("POST", "/employees", json=employee_to_wire(employee))
        return employee_from_wire(response.json())

    async def update(self, employee_id: int, employee: Union[Employee, Dict[str, Any]]) -> Employee:
        employee = as_employee(employee).model_copy(update={"id": employee_id})
        validate_employee(employee)
        response = await self._pipeline.request(
            "PUT", f"/employees/{employee_id}", json=employee_to_wire(employee)
        )
        body = json_or_none(response)
        return employee_from_wire(body) if body else employee

    async def delete(self, employee_id: int) -> bool:
        return await _ignore_missing(self._pipeline, f"/employees/{employee_id}")


class AsyncDocumentTypesClient:
    """Async client for the document type resource."""

    def __init__(self, pipeline: AsyncRequestPipeline):
        self._pipeline = pipeline

    async def list(self) -> List[DocumentType]:
        response = await self._pipeline.request("GET", "/documenttypes")
        return [document_type_from_wire(t) for t in response.json()]

    async def create(self, type_name: str) -> DocumentType:
        document_type = DocumentType(type_name=type_name)
        validate_document_type(document_type)
        response = await self._pipeline.request(
            "POST", "/documenttypes", json=document_type_to_wire(document_type)
        )
        return document_type_from_wire(response.json())

    async def update(self, type_id: int, type_name: str) -> DocumentType:
        document_type = DocumentType(id=type_id, type_name=type_name)
        validate_document_type(document_type)
        response = await self._pipeline.request(
            "PUT", f"/documenttypes/{type_id}", json=document_type_to_wire(document_type)
        )
        body = json_or_none(response)
        return document_type_from_wire(body) if body else document_type

    async def delete(self, type_id: int) -> bool:
        return await _ignore_missing(self._pipeline, f"/documenttypes/{type_id}")


class AsyncStaticDocumentTypesClient:
    """Awaitable facade over the in-memory catalog."""

    def __init__(self):
        self._catalog = StaticDocumentTypesClient()

    async def list(self) -> List[DocumentType]:
        return self._catalog.list()

    async def create(self, type_name: str) -> DocumentType:
        return self._catalog.create(type_name)

    async def update(self, type_id: int, type_name: str) -> DocumentType:
        return self._catalog.update(type_id, type_name)

    async def delete(self, type_id: int) -> bool:
        return self._catalog.delete(type_id)


class AsyncLinkedFilesClient:
    """Async documents client for file-linking backends."""

    def __init__(self, pipeline: AsyncRequestPipeline):
        self._pipeline = pipeline

    async def list_by_employee(self, employee_id: int) -> List[Document]:
        response = await self._pipeline.request("GET", f"/employees/{employee_id}")
        data = response.json()
        employee = employee_from_wire(data)
        return [document_from_file_record(f, employee) for f in data.get("files") or []]

    async def upload(
        self,
        employee_id: int,
        document_type_id: Optional[int],
        document_name: Optional[str],
        file: UploadFile,
    ) -> Optional[Document]:
        validate_upload(file, require_metadata=False)
        response = await self._pipeline.request(
            "POST",
            f"/employees/{employee_id}/link-file",
            files={"file": file.as_multipart()},
        )
        logger.info(f"Uploaded {file.filename} ({file.size} bytes) for employee {employee_id}")
        return linked_document_or_none(json_or_none(response), employee_id)

    async def download(self, file_id: int) -> DownloadedFile:
        response = await self._pipeline.request("GET", f"/employees/files/{file_id}")
        return downloaded_file(response)

    async def preview(self, file_id: int) -> DownloadedFile:
        response = await self._pipeline.request("GET", f"/employees/files/{file_id}/preview")
        return downloaded_file(response)

    async def delete(self, file_id: int) -> bool:
        return await _ignore_missing(self._pipeline, f"/employees/files/{file_id}")


class AsyncEmployeeDocumentsClient:
    """Async documents client for the dedicated document resource."""

    def __init__(self, pipeline: AsyncRequestPipeline):
        self._pipeline = pipeline

    async def list(self) -> List[Document]:
        response = await self._pipeline.request("GET", "/employeedocuments")
        return [document_from_wire(d) for d in response.json()]

    async def list_by_employee(self, employee_id: int) -> List[Document]:
        response = await self._pipeline.request("GET", f"/employeedocuments/employee/{employee_id}")
        return [document_from_wire(d) for d in response.json()]

    async def get(self, document_id: int) -> Document:
        response = await self._pipeline.request("GET", f"/employeedocuments/{document_id}")
        return document_from_wire(response.json())

    async def upload(
        self,
        employee_id: int,
        document_type_id: int,
        document_name: str,
        file: UploadFile,
    ) -> Document:
        validate_upload(file, employee_id, document_type_id, document_name)
        response = await self._pipeline.request(
            "POST",
            "/employeedocuments",
            data={
                "employeeId": str(employee_id),
                "documentTypeId": str(document_type_id),
                "documentName": document_name.strip(),
            },
            files={"file": file.as_multipart()},
        )
        logger.info(f"Uploaded {file.filename} ({file.size} bytes) for employee {employee_id}")
        return document_from_wire(response.json())

    async def download(self, document_id: int) -> DownloadedFile:
        response = await self._pipeline.request("GET", f"/employeedocuments/{document_id}/download")
        return downloaded_file(response)

    async def preview(self, document_id: int) -> DownloadedFile:
        return await self.download(document_id)

    async def delete(self, document_id: int) -> bool:
        return await _ignore_missing(self._pipeline, f"/employeedocuments/{document_id}")


class AsyncAuthClient:
    """Async client for registration and session operations."""

    def __init__(self, pipeline: AsyncRequestPipeline):
        self._pipeline = pipeline

    async def register(self, email: str, password: str, confirm_password: Optional[str] = None) -> Any:
        validate_registration(email, password, confirm_password)
        response = await self._pipeline.request(
            "POST",
            "/users/register",
            authenticated=False,
            json={"email": email.strip(), "password": password},
        )
        return json_or_none(response)

    async def login(self, email: str, password: str) -> TokenPair:
        validate_credentials(email, password)
        response = await self._pipeline.request(
            "POST",
            "/users/login",
            authenticated=False,
            json={"email": email.strip(), "password": password},
        )
        pair = TokenPair.model_validate(response.json())
        self._pipeline.tokens.set(pair.access_token, pair.refresh_token)
        logger.info("Signed in")
        return pair

    async def logout(self) -> None:
        try:
            if self._pipeline.tokens.is_authenticated():
                await self._pipeline.request("GET", "/users/logout", refresh=False)
        except StaffDocsError as e:
            logger.warning(f"Server logout failed: {e.message}")
        finally:
            self._pipeline.tokens.clear()
            logger.info("Signed out")

    async def refresh(self) -> TokenPair:
        return await self._pipeline.refresh_tokens()

    def is_authenticated(self) -> bool:
        return self._pipeline.tokens.is_authenticated()


class AsyncStaffDocsClient:
    """
    Async StaffDocs API client.

    Same API as StaffDocsClient but with async/await support.

    Example:
        ```python
        async with AsyncStaffDocsClient(api_url="http://localhost:5055/api") as client:
            await client.auth.login("admin@example.com", "Secret!1")
            employees = await client.employees.search("Ivanov")
        ```
    """

    def __init__(
        self,
        environment: Optional[str] = None,
        api_url: Optional[str] = None,
        backend_profile: Optional[Union[BackendProfile, str]] = None,
        token_store: Optional[TokenStore] = None,
        on_session_expired: Optional[SessionExpiredCallback] = None,
        timeout: Optional[float] = None,
        settings: Optional[ClientSettings] = None,
    ):
        """
        Initialize the async StaffDocs client.

        Takes the same arguments as ``StaffDocsClient``;
        ``on_session_expired`` may also be a coroutine function.

        Without ``token_store`` tokens stay in memory unless a token file is
        configured; ``FileTokenStore`` does blocking file I/O on every request.
        """
        self.settings = settings or load_settings(
            environment=environment,
            api_url=api_url,
            backend_profile=backend_profile,
            timeout=timeout,
        )
        self._env = self.settings.resolve_environment()
        if token_store is None:
            if self.settings.token_file:
                token_store = FileTokenStore(self.settings.token_file)
            else:
                token_store = MemoryTokenStore()
        self.tokens = token_store

        self._http = httpx.AsyncClient(
            base_url=self._env.api_url,
            headers={"Accept": "application/json"},
            timeout=self.settings.timeout,
        )
        self._pipeline = AsyncRequestPipeline(self._http, self.tokens, on_session_expired)

        # Initialize sub-clients
        self.employees = AsyncEmployeesClient(self._pipeline)
        self.auth = AsyncAuthClient(self._pipeline)
        if self.settings.backend_profile == BackendProfile.DOCUMENT_RESOURCE:
            self.document_types = AsyncDocumentTypesClient(self._pipeline)
            self.documents = AsyncEmployeeDocumentsClient(self._pipeline)
        else:
            self.document_types = AsyncStaticDocumentTypesClient()
            self.documents = AsyncLinkedFilesClient(self._pipeline)

        logger.info(
            f"AsyncStaffDocsClient initialized for {self._env.name} ({self._env.api_url}, "
            f"{self.settings.backend_profile.value})"
        )

    async def close(self):
        """Close the HTTP client."""
        await self._http.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
