"""Language model helpers."""

from .assistant import AssistantUnavailableError, ProductivityAssistant, parse_suggestions

__all__ = ["AssistantUnavailableError", "ProductivityAssistant", "parse_suggestions"]
