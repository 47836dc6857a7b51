# staffdocs/tests/conftest.py
"""
Shared fixtures for the StaffDocs SDK tests.

HTTP traffic is mocked with respx.
"""

import pytest

from staffdocs import MemoryTokenStore, StaffDocsClient, BackendProfile


API_URL = "http://localhost:5055/api"


@pytest.fixture
def tokens():
    """Token store holding a signed-in session."""
    return MemoryTokenStore(access="access-1", refresh="refresh-1")


@pytest.fixture
def expired_calls():
    """Records every session-expired notification."""
    return []


@pytest.fixture
def client(tokens, expired_calls):
    """Sync client for the file-linking backend."""
    with StaffDocsClient(
        api_url=API_URL,
        token_store=tokens,
        on_session_expired=lambda: expired_calls.append(True),
    ) as c:
        yield c


@pytest.fixture
def documents_client(tokens):
    """Sync client for the dedicated document resource backend."""
    with StaffDocsClient(
        api_url=API_URL,
        backend_profile=BackendProfile.DOCUMENT_RESOURCE,
        token_store=tokens,
    ) as c:
        yield c


@pytest.fixture
def wire_employee():
    """Employee as the server sends it."""
    return {
        "id": 1,
        "firstName": "Ivan",
        "lastName": "Ivanov",
        "patronymic": "Ivanovich",
        "username": "ivanov",
        "birthday": "2000-09-05",
    }


@pytest.fixture
def wire_document():
    """Document from the dedicated document resource."""
    return {
        "id": 3,
        "documentName": "Diploma",
        "fileSize": 2048,
        "mimeType": "application/pdf",
        "documentType": {"id": 3, "typeName": "Diploma", "documentsCount": 4},
        "employee": {
            "id": 1,
            "firstName": "Ivan",
            "lastName": "Ivanov",
            "patronymic": "Ivanovich",
            "username": "ivanov",
            "birthday": "2000-09-05",
        },
        "createdAt": "2024-02-01T09:30:00",
    }
