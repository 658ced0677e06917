"""
Demo Request Use Cases

The email verification gateway in front of demo creation, and the opt-out
from the follow-up emails sent after a demo ends.
"""

from .dtos import RequestDemoCommand, RequestDemoResponse, UnsubscribeResponse
from .request_demo_use_case import RequestDemoUseCase
from .unsubscribe_use_case import UnsubscribeUseCase
from .verify_demo_use_case import VerifyDemoUseCase

__all__ = [
    "RequestDemoUseCase",
    "VerifyDemoUseCase",
    "UnsubscribeUseCase",
    "RequestDemoCommand",
    "RequestDemoResponse",
    "UnsubscribeResponse",
]
