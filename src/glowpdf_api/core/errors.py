from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class APIError(Exception):
    status_code: int
    code: str
    message: str
    details: dict[str, Any] | None = None


class PDFError(APIError):
    """Base for failures the user can act on; the code names the error kind."""

    status_code_default = 500
    code_default = "unknown_error"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            status_code=self.status_code_default,
            code=self.code_default,
            message=message,
            details=details,
        )

    def __str__(self) -> str:
        return self.message


class PasswordProtectedError(PDFError):
    status_code_default = 423
    code_default = "password_protected"


class CorruptedDocumentError(PDFError):
    status_code_default = 422
    code_default = "corrupted_or_invalid_format"


class RenderingEnvironmentError(PDFError):
    status_code_default = 503
    code_default = "rendering_environment_failure"


class UserConstraintError(PDFError):
    status_code_default = 400
    code_default = "user_constraint_violation"


class UnknownPDFError(PDFError):
    pass
