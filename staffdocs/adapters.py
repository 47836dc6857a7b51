# staffdocs/adapters.py
"""
Wire <-> domain adapters.

The backend names some fields differently from the console:

    wire          domain
    patronymic    middleName
    birthday      dateOfBirth

Files linked to an employee come back as bare ``{id, path, created}``
records; ``document_from_file_record`` fills in placeholder metadata for
them. Consumers have to cope with that degraded metadata (size 0, generic
MIME type, generic document type).
"""

from typing import Any, Dict, Optional

from .models import (
    GENERIC_MIME_TYPE,
    Document,
    DocumentType,
    Employee,
)


DEFAULT_DOCUMENT_NAME = "File"
PLACEHOLDER_DOCUMENT_TYPE = DocumentType(id=1, type_name="Document")


def employee_from_wire(data: Dict[str, Any]) -> Employee:
    """Server employee -> domain ``Employee``."""
    return Employee(
        id=data.get("id"),
        first_name=data.get("firstName") or "",
        last_name=data.get("lastName") or "",
        middle_name=data.get("patronymic"),
        username=data.get("username"),
        date_of_birth=data.get("birthday"),
    )


def employee_to_wire(employee: Employee) -> Dict[str, Any]:
    """Domain ``Employee`` -> server payload. ``id`` only when assigned."""
    data = {
        "username": employee.username or "",
        "firstName": employee.first_name,
        "lastName": employee.last_name,
        "patronymic": employee.middle_name or "",
        "birthday": employee.date_of_birth,
    }
    if employee.id is not None:
        data["id"] = employee.id
    return data


def document_from_file_record(
    record: Dict[str, Any],
    employee: Optional[Employee] = None,
) -> Document:
    """Bare linked-file record -> ``Document`` with placeholder metadata."""
    path = record.get("path") or ""
    name = path.replace("\\", "/").split("/")[-1] or DEFAULT_DOCUMENT_NAME

    return Document(
        id=record.get("id"),
        document_name=name,
        file_size=record.get("fileSize") or 0,
        mime_type=record.get("mimeType") or GENERIC_MIME_TYPE,
        created_at=record.get("created"),
        employee=employee,
        document_type=PLACEHOLDER_DOCUMENT_TYPE.model_copy(),
    )


def document_from_wire(data: Dict[str, Any]) -> Document:
    """Full document record from the dedicated documents resource."""
    data = dict(data)
    if isinstance(data.get("employee"), dict):
        data["employee"] = employee_from_wire(data["employee"])
    return Document.model_validate(data)


def document_type_from_wire(data: Dict[str, Any]) -> DocumentType:
    return DocumentType.model_validate(data)


def document_type_to_wire(document_type: DocumentType) -> Dict[str, Any]:
    data = {"typeName": document_type.type_name}
    if document_type.id is not None:
        data["id"] = document_type.id
    return data
