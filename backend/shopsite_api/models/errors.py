"""Error models"""

from enum import Enum
from typing import Optional
import uuid


class ErrorCode(str, Enum):
    """Error codes"""
    INVALID_INPUT = "INVALID_INPUT"
    UPSTREAM_AUTH = "UPSTREAM_AUTH"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    GENERATION_FAILED = "GENERATION_FAILED"
    UPLOAD_FAILED = "UPLOAD_FAILED"
    DEPLOY_AUTH = "DEPLOY_AUTH"
    DEPLOY_PAYLOAD_TOO_LARGE = "DEPLOY_PAYLOAD_TOO_LARGE"
    DEPLOY_RATE_LIMITED = "DEPLOY_RATE_LIMITED"
    DEPLOY_FAILED = "DEPLOY_FAILED"


class ApplicationError(Exception):
    """Application error carrying a code, a user-facing message and an optional hint"""
    def __init__(self, code: ErrorCode, message: str, retryable: bool = False, hint: Optional[str] = None):
        self.error_id = str(uuid.uuid4())
        self.code = code
        self.message = message
        self.retryable = retryable
        self.hint = hint
        super().__init__(self.message)

    def model_dump(self):
        """Return dict representation for API responses"""
        return {
            "error_id": self.error_id,
            "code": self.code.value,
            "message": self.message,
            "hint": self.hint,
            "retryable": self.retryable,
        }

    @property
    def http_status(self) -> int:
        """Map error code to HTTP status"""
        mapping = {
            ErrorCode.INVALID_INPUT: 400,
            ErrorCode.UPSTREAM_AUTH: 401,
            ErrorCode.CONFIGURATION_ERROR: 500,
            ErrorCode.GENERATION_FAILED: 500,
            ErrorCode.UPLOAD_FAILED: 500,
            ErrorCode.DEPLOY_AUTH: 500,
            ErrorCode.DEPLOY_PAYLOAD_TOO_LARGE: 500,
            ErrorCode.DEPLOY_RATE_LIMITED: 500,
            ErrorCode.DEPLOY_FAILED: 500,
        }
        return mapping.get(self.code, 500)


def missing_field(field: str) -> ApplicationError:
    """Input validation error naming the missing request field"""
    return ApplicationError(
        code=ErrorCode.INVALID_INPUT,
        message=f"Missing required field: {field}",
        retryable=False,
    )
