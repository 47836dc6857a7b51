# staffdocs/client.py
"""
StaffDocs API Client

Main client for the employee records service.
Provides typed access to employees, document types, employee documents,
and authentication.
"""

import logging
import re
from typing import Any, Callable, Dict, List, Optional, Union
from urllib.parse import unquote

import httpx
from pydantic import ValidationError

from .adapters import (
    document_from_file_record,
    document_from_wire,
    document_type_from_wire,
    document_type_to_wire,
    employee_from_wire,
    employee_to_wire,
)
from .config import ClientSettings, load_settings
from .errors import ClientValidationError, NotFoundError, StaffDocsError
from .models import (
    GENERIC_MIME_TYPE,
    BackendProfile,
    Document,
    DocumentType,
    DownloadedFile,
    Employee,
    TokenPair,
    UploadFile,
)
from .pipeline import RequestPipeline
from .tokens import FileTokenStore, TokenStore
from .validation import (
    validate_credentials,
    validate_document_type,
    validate_employee,
    validate_registration,
    validate_upload,
)

logger = logging.getLogger(__name__)


DEFAULT_DOCUMENT_TYPES = (
    "Passport",
    "Employment record book",
    "Diploma",
    "Certificate",
    "Other",
)

_FILENAME_STAR = re.compile(r"filename\*\s*=\s*(?:[\w-]+'[\w-]*')?\"?([^\";]+)\"?", re.IGNORECASE)
_FILENAME = re.compile(r"filename\s*=\s*\"?([^\";]+)\"?", re.IGNORECASE)


# -------------------------
# Shared helpers
# -------------------------

def as_employee(employee: Union[Employee, Dict[str, Any]]) -> Employee:
    if isinstance(employee, Employee):
        return employee
    try:
        return Employee.model_validate(employee)
    except ValidationError as e:
        field_errors = {}
        for error in e.errors():
            field = str(error["loc"][0]) if error["loc"] else "employee"
            field_errors[field] = error["msg"]
        raise ClientValidationError(field_errors) from e


def json_or_none(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


def filename_from_disposition(header: Optional[str]) -> Optional[str]:
    if not header:
        return None
    match = _FILENAME_STAR.search(header)
    if match:
        return unquote(match.group(1).strip())
    match = _FILENAME.search(header)
    if match:
        return match.group(1).strip()
    return None


def downloaded_file(response: httpx.Response) -> DownloadedFile:
    return DownloadedFile(
        content=response.content,
        content_type=response.headers.get("content-type", GENERIC_MIME_TYPE),
        filename=filename_from_disposition(response.headers.get("content-disposition")),
    )


def ignore_missing(pipeline: RequestPipeline, path: str) -> bool:
    """DELETE ``path``; a 404 means it is already gone and returns False."""
    try:
        pipeline.request("DELETE", path)
    except NotFoundError:
        logger.info(f"Delete target already missing: {path}")
        return False
    return True


def linked_document_or_none(body: Any, employee_id: int) -> Optional[Document]:
    if isinstance(body, dict) and body.get("path"):
        return document_from_file_record(body, Employee(id=employee_id))
    return None


# -------------------------
# Sub-clients
# -------------------------

class EmployeesClient:
    """Client for employee operations."""

    def __init__(self, pipeline: RequestPipeline):
        self._pipeline = pipeline

    def list(self) -> List[Employee]:
        """List all employees in server order."""
        response = self._pipeline.request("GET", "/employees")
        return [employee_from_wire(e) for e in response.json()]

    def get(self, employee_id: int) -> Employee:
        """Get a single employee by ID."""
        response = self._pipeline.request("GET", f"/employees/{employee_id}")
        return employee_from_wire(response.json())

    def search(self, query: str) -> List[Employee]:
        """Search employees; a blank query lists everyone."""
        if not query or not query.strip():
            return self.list()
        response = self._pipeline.request("GET", "/employees/search", params={"q": query.strip()})
        return [employee_from_wire(e) for e in response.json()]

    def create(self, employee: Union[Employee, Dict[str, Any]]) -> Employee:
        """Create an employee; the result carries the server-assigned ID."""
        employee = as_employee(employee)
        validate_employee(employee)
        response = self._pipeline.request("POST", "/employees", json=employee_to_wire(employee))
        return employee_from_wire(response.json())

    def update(self, employee_id: int, employee: Union[Employee, Dict[str, Any]]) -> Employee:
        """Replace an employee. ``employee_id`` wins over any ID in the record."""
        employee = as_employee(employee).model_copy(update={"id": employee_id})
        validate_employee(employee)
        response = self._pipeline.request(
            "PUT", f"/employees/{employee_id}", json=employee_to_wire(employee)
        )
        body = json_or_none(response)
        return employee_from_wire(body) if body else employee

    def delete(self, employee_id: int) -> bool:
        """Delete an employee. Returns False if it was already gone."""
        return ignore_missing(self._pipeline, f"/employees/{employee_id}")


class StaticDocumentTypesClient:
    """
    In-memory document type catalog.

    Used with backends that have no document type resource. Changes live
    only as long as the client.
    """

    def __init__(self, type_names=DEFAULT_DOCUMENT_TYPES):
        self._types = [
            DocumentType(id=i, type_name=name)
            for i, name in enumerate(type_names, start=1)
        ]

    def _find(self, type_id: int) -> DocumentType:
        for document_type in self._types:
            if document_type.id == type_id:
                return document_type
        raise NotFoundError(status_code=404)

    def list(self) -> List[DocumentType]:
        return [t.model_copy() for t in self._types]

    def create(self, type_name: str) -> DocumentType:
        document_type = DocumentType(type_name=type_name)
        validate_document_type(document_type)
        document_type.id = max((t.id for t in self._types), default=0) + 1
        self._types.append(document_type)
        return document_type.model_copy()

    def update(self, type_id: int, type_name: str) -> DocumentType:
        validate_document_type(DocumentType(type_name=type_name))
        document_type = self._find(type_id)
        document_type.type_name = type_name
        return document_type.model_copy()

    def delete(self, type_id: int) -> bool:
        try:
            self._types.remove(self._find(type_id))
        except NotFoundError:
            return False
        return True


class DocumentTypesClient:
    """Client for the document type resource."""

    def __init__(self, pipeline: RequestPipeline):
        self._pipeline = pipeline

    def list(self) -> List[DocumentType]:
        response = self._pipeline.request("GET", "/documenttypes")
        return [document_type_from_wire(t) for t in response.json()]

    def create(self, type_name: str) -> DocumentType:
        document_type = DocumentType(type_name=type_name)
        validate_document_type(document_type)
        response = self._pipeline.request("POST", "/documenttypes", json=document_type_to_wire(document_type))
        return document_type_from_wire(response.json())

    def update(self, type_id: int, type_name: str) -> DocumentType:
        document_type = DocumentType(id=type_id, type_name=type_name)
        validate_document_type(document_type)
        response = self._pipeline.request(
            "PUT", f"/documenttypes/{type_id}", json=document_type_to_wire(document_type)
        )
        body = json_or_none(response)
        return document_type_from_wire(body) if body else document_type

    def delete(self, type_id: int) -> bool:
        return ignore_missing(self._pipeline, f"/documenttypes/{type_id}")


class LinkedFilesClient:
    """Documents for backends that link bare files to employees."""

    def __init__(self, pipeline: RequestPipeline):
        self._pipeline = pipeline

    def list_by_employee(self, employee_id: int) -> List[Document]:
        """Files linked to an employee, with placeholder metadata."""
        response = self._pipeline.request("GET", f"/employees/{employee_id}")
        data = response.json()
        employee = employee_from_wire(data)
        return [document_from_file_record(f, employee) for f in data.get("files") or []]

    def upload(
        self,
        employee_id: int,
        document_type_id: Optional[int],
        document_name: Optional[str],
        file: UploadFile,
    ) -> Optional[Document]:
        """
        Link a file to an employee.

        This backend stores only the file; type and name are not sent.
        """
        validate_upload(file, require_metadata=False)
        response = self._pipeline.request(
            "POST",
            f"/employees/{employee_id}/link-file",
            files={"file": file.as_multipart()},
        )
        logger.info(f"Uploaded {file.filename} ({file.size} bytes) for employee {employee_id}")
        return linked_document_or_none(json_or_none(response), employee_id)

    def download(self, file_id: int) -> DownloadedFile:
        response = self._pipeline.request("GET", f"/employees/files/{file_id}")
        return downloaded_file(response)

    def preview(self, file_id: int) -> DownloadedFile:
        response = self._pipeline.request("GET", f"/employees/files/{file_id}/preview")
        return downloaded_file(response)

    def delete(self, file_id: int) -> bool:
        return ignore_missing(self._pipeline, f"/employees/files/{file_id}")


class EmployeeDocumentsClient:
    """Documents for backends with a dedicated document resource."""

    def __init__(self, pipeline: RequestPipeline):
        self._pipeline = pipeline

    def list(self) -> List[Document]:
        response = self._pipeline.request("GET", "/employeedocuments")
        return [document_from_wire(d) for d in response.json()]

    def list_by_employee(self, employee_id: int) -> List[Document]:
        response = self._pipeline.request("GET", f"/employeedocuments/employee/{employee_id}")
        return [document_from_wire(d) for d in response.json()]

    def get(self, document_id: int) -> Document:
        response = self._pipeline.request("GET", f"/employeedocuments/{document_id}")
        return document_from_wire(response.json())

    def upload(
        self,
        employee_id: int,
        document_type_id: int,
        document_name: str,
        file: UploadFile,
    ) -> Document:
        """Upload a document as multipart form data."""
        validate_upload(file, employee_id, document_type_id, document_name)
        response = self._pipeline.request(
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

    def download(self, document_id: int) -> DownloadedFile:
        response = self._pipeline.request("GET", f"/employeedocuments/{document_id}/download")
        return downloaded_file(response)

    def preview(self, document_id: int) -> DownloadedFile:
        return self.download(document_id)

    def delete(self, document_id: int) -> bool:
        return ignore_missing(self._pipeline, f"/employeedocuments/{document_id}")


class AuthClient:
    """Client for registration and session operations."""

    def __init__(self, pipeline: RequestPipeline):
        self._pipeline = pipeline

    def register(self, email: str, password: str, confirm_password: Optional[str] = None) -> Any:
        validate_registration(email, password, confirm_password)
        response = self._pipeline.request(
            "POST",
            "/users/register",
            authenticated=False,
            json={"email": email.strip(), "password": password},
        )
        return json_or_none(response)

    def login(self, email: str, password: str) -> TokenPair:
        """Sign in and store the issued token pair."""
        validate_credentials(email, password)
        response = self._pipeline.request(
            "POST",
            "/users/login",
            authenticated=False,
            json={"email": email.strip(), "password": password},
        )
        pair = TokenPair.model_validate(response.json())
        self._pipeline.tokens.set(pair.access_token, pair.refresh_token)
        logger.info("Signed in")
        return pair

    def logout(self) -> None:
        """Sign out on the server when possible; local tokens are always cleared."""
        try:
            if self._pipeline.tokens.is_authenticated():
                self._pipeline.request("GET", "/users/logout", refresh=False)
        except StaffDocsError as e:
            logger.warning(f"Server logout failed: {e.message}")
        finally:
            self._pipeline.tokens.clear()
            logger.info("Signed out")

    def refresh(self) -> TokenPair:
        return self._pipeline.refresh_tokens()

    def is_authenticated(self) -> bool:
        return self._pipeline.tokens.is_authenticated()


# -------------------------
# Main client
# -------------------------

class StaffDocsClient:
    """
    Main StaffDocs API client.

    Provides typed access to all resources:
    - employees: Employee records
    - document_types: Document categories (static catalog or server resource)
    - documents: Employee documents and file transfer
    - auth: Registration, login, logout, refresh

    Example:
        ```python
        with StaffDocsClient(api_url="http://localhost:5055/api") as client:
            client.auth.login("admin@example.com", "Secret!1")
            for employee in client.employees.list():
                print(employee.full_name)
        ```
    """

    def __init__(
        self,
        environment: Optional[str] = None,
        api_url: Optional[str] = None,
        backend_profile: Optional[Union[BackendProfile, str]] = None,
        token_store: Optional[TokenStore] = None,
        on_session_expired: Optional[Callable[[], None]] = None,
        timeout: Optional[float] = None,
        settings: Optional[ClientSettings] = None,
    ):
        """
        Initialize the StaffDocs client.

        Args:
            environment: Name from ``ENVIRONMENTS`` (default "local")
            api_url: Override the API base URL (origin plus path prefix)
            backend_profile: Which document API the backend exposes
            token_store: Where tokens live (default: token file)
            on_session_expired: Called when the session cannot be recovered
            timeout: Request timeout in seconds
            settings: Pre-built settings; other arguments are ignored
        """
        self.settings = settings or load_settings(
            environment=environment,
            api_url=api_url,
            backend_profile=backend_profile,
            timeout=timeout,
        )
        self._env = self.settings.resolve_environment()
        self.tokens = token_store or FileTokenStore(self.settings.token_file)

        self._http = httpx.Client(
            base_url=self._env.api_url,
            headers={"Accept": "application/json"},
            timeout=self.settings.timeout,
        )
        self._pipeline = RequestPipeline(self._http, self.tokens, on_session_expired)

        # Initialize sub-clients
        self.employees = EmployeesClient(self._pipeline)
        self.auth = AuthClient(self._pipeline)
        if self.settings.backend_profile == BackendProfile.DOCUMENT_RESOURCE:
            self.document_types = DocumentTypesClient(self._pipeline)
            self.documents = EmployeeDocumentsClient(self._pipeline)
        else:
            self.document_types = StaticDocumentTypesClient()
            self.documents = LinkedFilesClient(self._pipeline)

        logger.info(
            f"StaffDocsClient initialized for {self._env.name} ({self._env.api_url}, "
            f"{self.settings.backend_profile.value})"
        )

    def close(self):
        """Close the HTTP client."""
        self._http.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
