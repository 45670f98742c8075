from sendlater.models.api import SuccessResponse
from sendlater.models.email import Email, EmailCreate, EmailRead, EmailStatus, EmailUpdate

__all__ = [
    "Email",
    "EmailCreate",
    "EmailRead",
    "EmailStatus",
    "EmailUpdate",
    "SuccessResponse",
]
