"""Bot package - Discord listener module."""
from .client import HearBot, message_to_event

__all__ = ["HearBot", "message_to_event"]
