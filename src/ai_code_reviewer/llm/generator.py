"""
Review Generator

Calls a chat-completion model to review code diffs and to summarize
a whole review run. Responses are handed to the ResponseParser.
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Optional

from openai import OpenAI

from ..config import AIConfig, ReviewConfig
from ..exceptions import ConfigurationError, ModelResponseError
from ..models.diff import CodeDiff
from ..models.review import ReviewResult
from ..utils.language import language_for_prompt
from .parser import ResponseParser
from .prompts import PromptBuilder


logger = logging.getLogger(__name__)

OPENROUTER_HOST = "openrouter.ai"
OPENROUTER_API_SUFFIX = "/api/v1"
OPENROUTER_REFERER = "https://github.com/encode-studio-fe/ai-code-review"
OPENROUTER_TITLE = "Encode Studio Code Review"


class ProviderType(str, Enum):
    """Supported model providers."""
    OPENAI = "openai"


class AIProvider(ABC):
    """Model backend used by the reviewer."""

    @abstractmethod
    def review_code(self, diff: CodeDiff) -> ReviewResult:
        """Review one file diff."""

    @abstractmethod
    def generate_summary(self, results: List[ReviewResult]) -> str:
        """Summarize the results of a whole run."""


class OpenAIProvider(AIProvider):
    """
    OpenAI compatible chat-completion provider.

    Works with the OpenAI API and with compatible endpoints such as
    OpenRouter (selected through ``base_url``).
    """

    def __init__(
        self,
        config: AIConfig,
        review_config: Optional[ReviewConfig] = None,
        client: Optional[Any] = None,
        parser: Optional[ResponseParser] = None,
    ):
        """
        Initialize provider.

        Args:
            config: AI section of the app config
            review_config: Review section (custom prompts, prompt language)
            client: Preconfigured OpenAI client (tests inject a mock here)
            parser: Response parser to use
        """
        if not config.api_key and client is None:
            raise ConfigurationError("OpenAI API key is not configured")

        review_config = review_config or ReviewConfig()

        self.config = config
        self.prompt_builder = PromptBuilder(
            prompts=review_config.prompts,
            language=review_config.prompt_language,
        )
        self.parser = parser or ResponseParser()
        self.client = client or self._create_client()

        logger.info(f"Initialized {config.provider} provider: model={config.model}, base_url={config.base_url or 'default'}")

    def _create_client(self) -> OpenAI:
        options: Dict[str, Any] = {
            'api_key': self.config.api_key,
            'base_url': self.config.base_url,
        }

        if self.config.base_url and OPENROUTER_HOST in self.config.base_url:
            options.update(openrouter_options(self.config.base_url, self.config.model))
            logger.info(f"Using OpenRouter API at {options['base_url']}")

        return OpenAI(**options)

    def review_code(self, diff: CodeDiff) -> ReviewResult:
        """
        Review one file diff.

        Args:
            diff: Changed file

        Returns:
            Parsed ReviewResult

        Raises:
            ModelResponseError: If the API envelope has no content
        """
        language = language_for_prompt(diff)
        prompt = self.prompt_builder.build_review_prompt(diff, language)

        logger.debug(f"Requesting review for {diff.new_path} ({language})")

        content = self._complete(self.prompt_builder.build_system_prompt("review"), prompt)
        return self.parser.parse(content, diff.new_path)

    def generate_summary(self, results: List[ReviewResult]) -> str:
        """
        Generate an overall summary of all results.

        Args:
            results: Per-file review results

        Returns:
            Summary text as returned by the model
        """
        prompt = self.prompt_builder.build_summary_prompt(results)

        logger.debug(f"Requesting summary for {len(results)} files")

        return self._complete(self.prompt_builder.build_system_prompt("summary"), prompt)

    def _complete(self, system_prompt: str, prompt: str) -> str:
        """Send one chat completion and return the message content."""
        response = self.client.chat.completions.create(
            model=self.config.model,
            temperature=self.config.temperature,
            max_tokens=self.config.max_tokens,
            top_p=1,
            frequency_penalty=0,
            presence_penalty=0,
            messages=[
                {'role': 'system', 'content': system_prompt},
                {'role': 'user', 'content': prompt},
            ],
        )

        choices = getattr(response, 'choices', None)
        if not choices:
            raise ModelResponseError("API response has no choices")

        message = getattr(choices[0], 'message', None)
        if message is None:
            raise ModelResponseError("API response message is empty")

        content = getattr(message, 'content', None)
        if not content:
            raise ModelResponseError("API response content is empty")

        logger.debug(f"Received {len(content)} characters (finish_reason={getattr(choices[0], 'finish_reason', None)})")
        return content


def openrouter_options(base_url: str, model: str) -> Dict[str, Any]:
    """Client options required by OpenRouter endpoints."""
    url = base_url.rstrip('/')
    if not url.endswith(OPENROUTER_API_SUFFIX):
        url = f"{url}{OPENROUTER_API_SUFFIX}"

    referer = OPENROUTER_REFERER
    if '/' in model:
        referer = f"{OPENROUTER_REFERER} ({model})"

    return {
        'base_url': url,
        'default_headers': {
            'HTTP-Referer': referer,
            'X-Title': OPENROUTER_TITLE,
        },
    }


def create_provider(config: AIConfig, review_config: Optional[ReviewConfig] = None) -> AIProvider:
    """
    Create the provider selected in the config.

    Raises:
        ConfigurationError: For unknown providers
    """
    try:
        provider_type = ProviderType(config.provider)
    except ValueError:
        raise ConfigurationError(f"Unsupported AI provider: {config.provider}")

    logger.debug(f"Creating AI provider: {provider_type.value}, model: {config.model}")

    if provider_type is ProviderType.OPENAI:
        return OpenAIProvider(config, review_config)

    raise ConfigurationError(f"Unsupported AI provider: {config.provider}")
