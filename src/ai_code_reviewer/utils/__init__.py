"""
Utilities

Language detection and review artifact storage.
"""

from .language import detect_language, display_language, language_for_prompt
from .files import TempFileManager

__all__ = ['detect_language', 'display_language', 'language_for_prompt', 'TempFileManager']
