"""
Demo Request Use Case DTOs

Command and Response classes of the verification gateway.
"""

from typing import Optional

from pydantic import BaseModel, Field


class RequestDemoCommand(BaseModel):
    """A prospect asking for a demo"""

    email: str = Field(min_length=3, max_length=255)
    name: str = Field(min_length=1, max_length=255)
    company: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    preferred_subdomain: Optional[str] = Field(default=None, max_length=63)
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


class RequestDemoResponse(BaseModel):
    pending: bool = True
    message: str
    email: str
    expires_at: str


class UnsubscribeResponse(BaseModel):
    unsubscribed: bool = True
    email: str
    message: str
