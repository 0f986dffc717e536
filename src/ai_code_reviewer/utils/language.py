"""
Language Detection

Maps file extensions to canonical language tags and display names.
"""

from typing import Optional

from ..models.diff import CodeDiff


LANGUAGE_MAP = {
    # JavaScript / TypeScript
    'js': 'javascript',
    'jsx': 'javascript',
    'ts': 'typescript',
    'tsx': 'typescript',

    # Frontend
    'vue': 'vue',
    'html': 'html',
    'css': 'css',
    'scss': 'scss',
    'sass': 'sass',
    'less': 'less',

    # Backend
    'py': 'python',
    'rb': 'ruby',
    'php': 'php',
    'java': 'java',
    'go': 'go',
    'cs': 'csharp',

    # C / C++
    'cpp': 'cpp',
    'c': 'c',
    'h': 'c',
    'hpp': 'cpp',

    'rs': 'rust',
    'swift': 'swift',
    'kt': 'kotlin',
    'scala': 'scala',
    'dart': 'dart',

    # Data and config
    'md': 'markdown',
    'json': 'json',
    'yml': 'yaml',
    'yaml': 'yaml',
    'xml': 'xml',
    'sql': 'sql',

    # Shell
    'sh': 'shell',
    'bash': 'shell',
}

DISPLAY_LANGUAGE_MAP = {
    'javascript': 'JavaScript',
    'typescript': 'TypeScript',
    'vue': 'Vue',
    'html': 'HTML',
    'css': 'CSS',
    'scss': 'SCSS',
    'sass': 'Sass',
    'less': 'Less',
    'python': 'Python',
    'ruby': 'Ruby',
    'php': 'PHP',
    'java': 'Java',
    'go': 'Go',
    'csharp': 'C#',
    'cpp': 'C++',
    'c': 'C',
    'rust': 'Rust',
    'swift': 'Swift',
    'kotlin': 'Kotlin',
    'scala': 'Scala',
    'dart': 'Dart',
    'markdown': 'Markdown',
    'json': 'JSON',
    'yaml': 'YAML',
    'xml': 'XML',
    'sql': 'SQL',
    'shell': 'Shell',
}

UNKNOWN_LANGUAGE = 'unknown'


def detect_language(file_path: str) -> Optional[str]:
    """
    Detect the language tag of a file from its extension.

    Args:
        file_path: Path to file

    Returns:
        Canonical language tag or None if the extension is unknown
    """
    if '.' not in file_path:
        return None

    extension = file_path.rsplit('.', 1)[-1].lower()
    return LANGUAGE_MAP.get(extension)


def display_language(language: str) -> str:
    """Human readable name for a language tag."""
    return DISPLAY_LANGUAGE_MAP.get(language, language)


def language_for_prompt(diff: CodeDiff) -> str:
    """Display name used in review prompts for a diff."""
    language = diff.language or detect_language(diff.new_path)
    if language:
        return display_language(language)
    return UNKNOWN_LANGUAGE
