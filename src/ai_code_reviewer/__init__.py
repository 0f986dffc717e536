"""
AI Code Reviewer

대형 언어 모델 기반 코드 리뷰 도구 (GitHub Pull Request / 로컬 git 변경사항)
"""

__version__ = "1.0.0"

from .config import AppConfig, load_config
from .review.reviewer import CodeReviewer, ReviewState

__all__ = ["AppConfig", "load_config", "CodeReviewer", "ReviewState", "__version__"]
