from dataclasses import dataclass
from typing import Any, Dict, List, Sequence


@dataclass(frozen=True)
class ValidationIssue:
    path: str
    message: str
    code: str

    def to_dict(self) -> Dict[str, str]:
        return {"path": self.path, "message": self.message, "code": self.code}


class QrLinkError(Exception):
    """Base class for errors raised while handling a QR code request."""

    message = "QR code request failed"

    def __init__(self, message: str = ""):
        super().__init__(message or self.message)


class RequestValidationError(QrLinkError):
    """
    One or more request fields were rejected.
    Carries every issue found, not just the first one.
    """

    message = "Validation error"

    def __init__(self, issues: Sequence[ValidationIssue]):
        super().__init__(self.message)
        self.issues: List[ValidationIssue] = list(issues)

    @property
    def field_errors(self) -> Dict[str, List[str]]:
        errors: Dict[str, List[str]] = {}
        for issue in self.issues:
            if not issue.path:
                continue
            field = issue.path.split(".", 1)[0]
            errors.setdefault(field, []).append(issue.message)
        return errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "issues": [issue.to_dict() for issue in self.issues],
            "fieldErrors": self.field_errors,
        }


class GenerationFailed(QrLinkError):
    """Encoding or rendering failed for reasons the caller cannot fix."""

    message = "Failed to generate QR code"

    def to_dict(self) -> Dict[str, str]:
        return {"message": self.message}
