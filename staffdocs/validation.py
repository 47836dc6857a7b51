# staffdocs/validation.py
"""
Client-side pre-validation.

These checks only save a round trip; the server validates everything again.
Each function raises ``ClientValidationError`` with one message per field.
"""

import re
from typing import Dict, Optional

from .config import MAX_UPLOAD_BYTES
from .errors import ClientValidationError
from .models import DocumentType, Employee, UploadFile


EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_PASSWORD_LENGTH = 6


def _raise_if_any(errors: Dict[str, str]) -> None:
    if errors:
        raise ClientValidationError(errors)


def validate_employee(employee: Employee) -> None:
    errors = {}
    if not employee.first_name.strip():
        errors["firstName"] = "First name is required"
    if not employee.last_name.strip():
        errors["lastName"] = "Last name is required"
    if not (employee.username or "").strip():
        errors["username"] = "Username is required"
    _raise_if_any(errors)


def validate_upload(
    file: Optional[UploadFile],
    employee_id: Optional[int] = None,
    document_type_id: Optional[int] = None,
    document_name: Optional[str] = None,
    require_metadata: bool = True,
) -> None:
    """
    Check an upload request.

    ``require_metadata`` is False for backends that only accept the file
    itself; employee, type and name are then not required.
    """
    errors = {}
    if require_metadata:
        if not employee_id:
            errors["employeeId"] = "Select an employee"
        if not document_type_id:
            errors["documentTypeId"] = "Select a document type"
        if not (document_name or "").strip():
            errors["documentName"] = "Enter a document name"

    if file is None:
        errors["file"] = "Select a file"
    elif file.size > MAX_UPLOAD_BYTES:
        errors["file"] = "File size must not exceed 10MB"

    _raise_if_any(errors)


def validate_document_type(document_type: DocumentType) -> None:
    if not document_type.type_name.strip():
        raise ClientValidationError({"typeName": "Type name is required"})


def validate_credentials(email: str, password: str) -> None:
    errors = {}
    if not (email or "").strip():
        errors["email"] = "Email is required"
    elif not EMAIL_PATTERN.match(email.strip()):
        errors["email"] = "Enter a valid email address"
    if not password:
        errors["password"] = "Password is required"
    _raise_if_any(errors)


def password_requirements(password: str) -> Dict[str, bool]:
    return {
        "length": len(password) >= MIN_PASSWORD_LENGTH,
        "lowercase": bool(re.search(r"[a-z]", password)),
        "uppercase": bool(re.search(r"[A-Z]", password)),
        "special": bool(re.search(r"[^a-zA-Z0-9]", password)),
    }


_REQUIREMENT_LABELS = {
    "length": f"at least {MIN_PASSWORD_LENGTH} characters",
    "lowercase": "a lowercase letter (a-z)",
    "uppercase": "an uppercase letter (A-Z)",
    "special": "a special character",
}


def validate_registration(email: str, password: str, confirm_password: Optional[str] = None) -> None:
    validate_credentials(email, password)

    if confirm_password is not None and password != confirm_password:
        raise ClientValidationError({"confirmPassword": "Passwords do not match"})

    missing = [
        _REQUIREMENT_LABELS[name]
        for name, ok in password_requirements(password).items()
        if not ok
    ]
    if missing:
        raise ClientValidationError({"password": f"Password must contain: {', '.join(missing)}"})
