"""
Unit tests for language detection.
"""

import pytest

from ai_code_reviewer.models import CodeDiff
from ai_code_reviewer.utils import detect_language, display_language, language_for_prompt


class TestDetectLanguage:
    """Extension based detection."""

    @pytest.mark.parametrize("path,expected", [
        ("src/app.ts", "typescript"),
        ("src/App.TSX", "typescript"),
        ("main.py", "python"),
        ("lib/util.h", "c"),
        ("deploy/run.bash", "shell"),
        ("config.yml", "yaml"),
        ("archive.tar.gz", None),
        ("Makefile", None),
    ])
    def test_detect_language(self, path, expected):
        assert detect_language(path) == expected

    def test_display_language(self):
        assert display_language("csharp") == "C#"
        assert display_language("cobol") == "cobol"


class TestLanguageForPrompt:
    """Language name used in prompts."""

    def make_diff(self, path, language=None):
        return CodeDiff(old_path=path, new_path=path, old_content="", new_content="", diff_content="", language=language)

    def test_uses_diff_language(self):
        assert language_for_prompt(self.make_diff("x.txt", language="go")) == "Go"

    def test_detects_from_path(self):
        assert language_for_prompt(self.make_diff("x.rs")) == "Rust"

    def test_unknown(self):
        assert language_for_prompt(self.make_diff("LICENSE")) == "unknown"
