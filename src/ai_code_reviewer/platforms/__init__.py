"""
Review Platforms

Diff sources and comment sinks: GitHub pull requests and local git
working trees.
"""

import logging
from typing import Optional

from ..config import AppConfig
from ..exceptions import ConfigurationError
from ..formatting.console import OutputFormatter
from ..formatting.github import GitHubCommentFormatter
from .base import Platform, PlatformOptions, PlatformType
from .github import GitHubPlatform
from .local import LocalPlatform


logger = logging.getLogger(__name__)


def create_platform(config: AppConfig, options: Optional[PlatformOptions] = None) -> Platform:
    """
    Create the platform selected in the config.

    Args:
        config: Application config
        options: Platform options from the command line

    Raises:
        ConfigurationError: For unknown platforms or missing settings
    """
    options = options or PlatformOptions()

    try:
        platform_type = PlatformType(config.platform.type)
    except ValueError:
        raise ConfigurationError(f"Unsupported platform: {config.platform.type}")

    logger.debug(f"Creating platform: {platform_type.value}")

    language = config.review.prompt_language

    if platform_type is PlatformType.GITHUB:
        return GitHubPlatform(config.platform, options, formatter=GitHubCommentFormatter(language))

    return LocalPlatform(options, formatter=OutputFormatter(language))


__all__ = [
    'Platform',
    'PlatformOptions',
    'PlatformType',
    'GitHubPlatform',
    'LocalPlatform',
    'create_platform',
]
