"""AI utilities: inference client, prompt building, response parsing and advisor chat."""

from .advisor import AdvisorChat, AdvisorSession
from .openai_client import InferenceClient, get_inference_client
from .response_parser import parse_audit_response

__all__ = [
    "AdvisorChat",
    "AdvisorSession",
    "InferenceClient",
    "get_inference_client",
    "parse_audit_response",
]
