"""
Configuration Management

시스템 설정 관리 (기본값 <- 설정 파일 <- 환경 변수 <- CLI 순으로 병합)
"""

import os
import json
import yaml
from dataclasses import dataclass, field, replace
from typing import Optional, Dict, Any, List
from pathlib import Path
import logging

from .exceptions import ConfigurationError


logger = logging.getLogger(__name__)

DEFAULT_MODEL = "deepseek/deepseek-chat-v3-0324:free"

DEFAULT_CONFIG_FILES = (
    ".encode_review.yml",
    ".encode_review.yaml",
    ".encode_review.json",
)

SUPPORTED_PROVIDERS = {"openai"}
SUPPORTED_PLATFORMS = {"github", "local"}
SUPPORTED_PROMPT_LANGUAGES = {"chinese", "english"}


@dataclass
class AIConfig:
    """AI 모델 설정"""
    provider: str = "openai"
    model: str = DEFAULT_MODEL
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    temperature: float = 0.1
    max_tokens: int = 4000


@dataclass
class PlatformConfig:
    """코드 호스팅 플랫폼 설정"""
    type: str = "local"
    token: Optional[str] = None
    url: Optional[str] = None
    timeout_seconds: int = 30


@dataclass
class PromptConfig:
    """사용자 정의 프롬프트 템플릿"""
    system: Optional[str] = None
    review: Optional[str] = None
    summary: Optional[str] = None


@dataclass
class ReviewConfig:
    """리뷰 대상 필터링 및 프롬프트 설정"""
    ignore_files: Optional[List[str]] = field(default_factory=lambda: [
        "*.lock",
        "package-lock.json",
        "yarn.lock",
        "pnpm-lock.yaml",
        "*.min.js",
        "*.min.css",
    ])
    ignore_paths: Optional[List[str]] = field(default_factory=lambda: [
        "node_modules/",
        "dist/",
        "build/",
        ".git/",
    ])
    include_patterns: Optional[List[str]] = None
    exclude_patterns: Optional[List[str]] = None
    prompts: PromptConfig = field(default_factory=PromptConfig)
    prompt_language: str = "chinese"


@dataclass
class LoggingConfig:
    """로깅 설정"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_path: Optional[str] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5


@dataclass
class AppConfig:
    """전체 애플리케이션 설정"""
    ai: AIConfig = field(default_factory=AIConfig)
    platform: PlatformConfig = field(default_factory=PlatformConfig)
    review: ReviewConfig = field(default_factory=ReviewConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    debug: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppConfig":
        """딕셔너리(파일 내용)에서 설정 생성"""
        return merge_config(cls(), data)

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "AppConfig":
        """환경 변수에서 설정 로드"""
        return merge_config(cls(), env_overrides(environ))

    @classmethod
    def from_file(cls, config_path: str) -> "AppConfig":
        """YAML/JSON 파일에서 설정 로드"""
        return cls.from_dict(read_config_file(config_path))

    def validate(self) -> None:
        """설정 유효성 검사"""
        errors = []

        if self.ai.provider not in SUPPORTED_PROVIDERS:
            errors.append(f"Unsupported AI provider: {self.ai.provider}")
        elif self.ai.provider == "openai" and not self.ai.api_key:
            errors.append("OpenAI API key is required (set AI_REVIEWER_OPENAI_KEY)")

        if self.platform.type not in SUPPORTED_PLATFORMS:
            errors.append(f"Unsupported platform: {self.platform.type}")
        elif self.platform.type != "local" and not self.platform.token:
            errors.append(f"{self.platform.type.upper()} token is required (set AI_REVIEWER_GITHUB_TOKEN)")

        if self.ai.max_tokens <= 0:
            errors.append("max_tokens must be positive")

        if self.review.prompt_language not in SUPPORTED_PROMPT_LANGUAGES:
            errors.append(f"Invalid prompt language: {self.review.prompt_language}")

        valid_log_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        if self.logging.level.upper() not in valid_log_levels:
            errors.append(f"Invalid log level: {self.logging.level}")

        if errors:
            raise ConfigurationError(f"Configuration validation failed: {'; '.join(errors)}")

    def to_dict(self) -> Dict[str, Any]:
        """설정을 딕셔너리로 변환"""
        return {
            'ai': {
                'provider': self.ai.provider,
                'model': self.ai.model,
                'base_url': self.ai.base_url,
                'temperature': self.ai.temperature,
                'max_tokens': self.ai.max_tokens,
                # 보안상 API 키는 제외
            },
            'platform': {
                'type': self.platform.type,
                'url': self.platform.url,
                'timeout_seconds': self.platform.timeout_seconds,
                # 보안상 토큰은 제외
            },
            'review': {
                'ignore_files': self.review.ignore_files,
                'ignore_paths': self.review.ignore_paths,
                'include_patterns': self.review.include_patterns,
                'exclude_patterns': self.review.exclude_patterns,
                'prompts': {
                    'system': self.review.prompts.system,
                    'review': self.review.prompts.review,
                    'summary': self.review.prompts.summary,
                },
                'prompt_language': self.review.prompt_language,
            },
            'logging': {
                'level': self.logging.level,
                'format': self.logging.format,
                'file_path': self.logging.file_path,
                'max_file_size': self.logging.max_file_size,
                'backup_count': self.logging.backup_count,
            },
            'debug': self.debug,
        }


def _split_list(value: Optional[str]) -> Optional[List[str]]:
    if not value:
        return None
    return [item.strip() for item in value.split(',') if item.strip()]


def _drop_none(data: Dict[str, Any]) -> Dict[str, Any]:
    """None 값과 빈 섹션 제거"""
    cleaned = {}
    for key, value in data.items():
        if isinstance(value, dict):
            value = _drop_none(value)
            if not value:
                continue
        if value is None:
            continue
        cleaned[key] = value
    return cleaned


def env_overrides(environ: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """AI_REVIEWER_* 환경 변수를 설정 딕셔너리로 변환"""
    env = os.environ if environ is None else environ

    temperature = env.get("AI_REVIEWER_TEMPERATURE")
    max_tokens = env.get("AI_REVIEWER_MAX_TOKENS")
    debug = env.get("AI_REVIEWER_DEBUG")

    return _drop_none({
        'ai': {
            'provider': env.get("AI_REVIEWER_PROVIDER"),
            'model': env.get("AI_REVIEWER_MODEL"),
            'api_key': env.get("AI_REVIEWER_OPENAI_KEY"),
            'base_url': env.get("AI_REVIEWER_BASE_URL"),
            'temperature': float(temperature) if temperature else None,
            'max_tokens': int(max_tokens) if max_tokens else None,
        },
        'platform': {
            'type': env.get("AI_REVIEWER_PLATFORM"),
            'token': env.get("AI_REVIEWER_GITHUB_TOKEN"),
            'url': env.get("AI_REVIEWER_PLATFORM_URL"),
        },
        'review': {
            'ignore_files': _split_list(env.get("AI_REVIEWER_IGNORE_FILES")),
            'ignore_paths': _split_list(env.get("AI_REVIEWER_IGNORE_PATHS")),
            'include_patterns': _split_list(env.get("AI_REVIEWER_INCLUDE_PATTERNS")),
            'exclude_patterns': _split_list(env.get("AI_REVIEWER_EXCLUDE_PATTERNS")),
            'prompts': {
                'system': env.get("AI_REVIEWER_PROMPT_SYSTEM"),
                'review': env.get("AI_REVIEWER_PROMPT_REVIEW"),
                'summary': env.get("AI_REVIEWER_PROMPT_SUMMARY"),
            },
            'prompt_language': env.get("AI_REVIEWER_PROMPT_LANGUAGE"),
        },
        'logging': {
            'level': env.get("AI_REVIEWER_LOG_LEVEL"),
            'file_path': env.get("AI_REVIEWER_LOG_FILE"),
        },
        'debug': debug.lower() == "true" if debug else None,
    })


def read_config_file(config_path: str) -> Dict[str, Any]:
    """YAML 또는 JSON 설정 파일 읽기"""
    config_file = Path(config_path)
    if not config_file.exists():
        raise ConfigurationError(f"Config file not found: {config_path}")

    with open(config_file, 'r', encoding='utf-8') as f:
        content = f.read()

    try:
        if config_file.suffix == '.json':
            data = json.loads(content)
        else:
            data = yaml.safe_load(content)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot parse config file {config_path}: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a mapping")
    return data


def find_config_file(config_path: Optional[str] = None, cwd: Optional[str] = None) -> Optional[Path]:
    """명시된 경로 또는 기본 설정 파일 탐색"""
    base = Path(cwd or os.getcwd())
    candidates = [config_path] if config_path else []
    candidates.extend(DEFAULT_CONFIG_FILES)

    for candidate in candidates:
        path = base / candidate
        if path.exists():
            return path

    if config_path:
        raise ConfigurationError(f"Config file not found: {config_path}")
    return None


def _camel_to_snake(key: str) -> str:
    return ''.join(f"_{c.lower()}" if c.isupper() else c for c in key)


def _normalize_keys(data: Any) -> Any:
    """includePatterns 같은 camelCase 키를 snake_case로 변환"""
    if isinstance(data, dict):
        return {_camel_to_snake(k): _normalize_keys(v) for k, v in data.items()}
    return data


def merge_config(base: AppConfig, overrides: Dict[str, Any]) -> AppConfig:
    """
    Merge a partial config mapping into an existing config.

    Ignore lists are concatenated, include/exclude patterns replace the
    previous value and prompts are merged key by key.

    Args:
        base: Config to start from (not modified)
        overrides: Partial mapping (file, env or CLI values)

    Returns:
        New merged AppConfig
    """
    overrides = _normalize_keys(overrides or {})

    ai = replace(base.ai, **_known(AIConfig, overrides.get('ai', {})))
    platform = replace(base.platform, **_known(PlatformConfig, overrides.get('platform', {})))
    logging_config = replace(base.logging, **_known(LoggingConfig, overrides.get('logging', {})))

    review_data = dict(overrides.get('review') or {})
    review = base.review

    prompts = review.prompts
    prompt_data = review_data.pop('prompts', None)
    if prompt_data:
        prompts = replace(prompts, **_known(PromptConfig, prompt_data))

    review_fields: Dict[str, Any] = {'prompts': prompts}
    for key in ('ignore_files', 'ignore_paths'):
        extra = review_data.get(key)
        if extra:
            review_fields[key] = list(getattr(review, key) or []) + list(extra)
    for key in ('include_patterns', 'exclude_patterns'):
        if review_data.get(key) is not None:
            review_fields[key] = list(review_data[key])
    if review_data.get('prompt_language'):
        review_fields['prompt_language'] = review_data['prompt_language']

    return AppConfig(
        ai=ai,
        platform=platform,
        review=replace(review, **review_fields),
        logging=logging_config,
        debug=overrides.get('debug', base.debug),
    )


def _known(section_cls, data: Dict[str, Any]) -> Dict[str, Any]:
    """dataclass에 정의된 필드만 남김"""
    if not data:
        return {}
    names = section_cls.__dataclass_fields__.keys()
    unknown = set(data) - set(names)
    if unknown:
        logger.warning(f"Ignoring unknown {section_cls.__name__} keys: {', '.join(sorted(unknown))}")
    return {k: v for k, v in data.items() if k in names and v is not None}


def load_config(
    config_path: Optional[str] = None,
    cli_overrides: Optional[Dict[str, Any]] = None,
    environ: Optional[Dict[str, str]] = None,
    cwd: Optional[str] = None,
) -> AppConfig:
    """
    Load and merge configuration from all sources.

    Args:
        config_path: Explicit config file path (optional)
        cli_overrides: Values given on the command line
        environ: Environment mapping (defaults to os.environ)
        cwd: Directory used for config file discovery

    Returns:
        Merged AppConfig (not yet validated)
    """
    config = AppConfig()

    config_file = find_config_file(config_path, cwd=cwd)
    if config_file:
        logger.info(f"Loading config file: {config_file}")
        config = merge_config(config, read_config_file(str(config_file)))

    config = merge_config(config, env_overrides(environ))
    config = merge_config(config, cli_overrides or {})

    logger.debug(f"Using model {config.ai.model} on platform {config.platform.type}")
    return config


def setup_logging(logging_config: LoggingConfig, debug: bool = False) -> None:
    """로깅 설정"""
    level = logging.DEBUG if debug else getattr(logging, logging_config.level.upper())

    logging.basicConfig(
        level=level,
        format=logging_config.format,
    )
    logging.getLogger().setLevel(level)

    # 파일 로깅이 설정된 경우 로테이션 설정
    if logging_config.file_path:
        from logging.handlers import RotatingFileHandler

        handler = RotatingFileHandler(
            logging_config.file_path,
            maxBytes=logging_config.max_file_size,
            backupCount=logging_config.backup_count,
        )
        handler.setFormatter(logging.Formatter(logging_config.format))

        # 루트 로거에 핸들러 추가
        root_logger = logging.getLogger()
        root_logger.addHandler(handler)
