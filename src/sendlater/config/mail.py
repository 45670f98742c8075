from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, SecretStr


class MailConfig(BaseModel):
    """
    Configuration of the outbound mail transport
    """

    transport: Literal["sendgrid", "log"] = "log"
    """
    - `sendgrid`: send through the sendgrid v3 http api, requires ``sendgrid_api_key``
    - `log`: don't send anything, just log the message and report success.
      For development and testing.
    """
    sendgrid_api_key: Optional[SecretStr] = None
    """API key used to authenticate with sendgrid"""
    sendgrid_url: str = "https://api.sendgrid.com/v3/mail/send"
    """Endpoint that messages are POSTed to"""
    from_email: EmailStr = "noreply@example.com"
    """Sender address of all outgoing emails"""
    timeout: float = 10
    """Timeout (seconds) for a single send request"""
