"""Generative-AI collaborators."""

from .client import GenerativeAIClient, GeminiClient, DisabledAIClient, extract_json_block

__all__ = ["GenerativeAIClient", "GeminiClient", "DisabledAIClient", "extract_json_block"]
