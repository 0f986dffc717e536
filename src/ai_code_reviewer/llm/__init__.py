"""
LLM Review Engine

This module provides model-backed review generation: prompt building,
chat-completion providers and response parsing.
"""

from .prompts import PromptBuilder
from .parser import ResponseParser
from .generator import AIProvider, OpenAIProvider, ProviderType, create_provider

__all__ = ['PromptBuilder', 'ResponseParser', 'AIProvider', 'OpenAIProvider', 'ProviderType', 'create_provider']
