"""
Configuration loader for the Fitness Wizard service.

Loads settings from config.yaml with environment variable overrides, and
exposes typed settings structs for the provider clients so they can be
constructed explicitly (and replaced by fakes in tests).
"""

import os
import re
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Set

import yaml


# Allowlist of environment variables that can be substituted
ALLOWED_ENV_VARS: Set[str] = {
    'OPENAI_API_KEY',
    'OPENAI_BASE_URL',
    'WIZARD_LLM_MODEL',
    'WIZARD_EMAIL_PROVIDER',
    'WIZARD_FROM_EMAIL',
    'WIZARD_EMAIL_PREVIEW_DIR',
    'WIZARD_LOG_FORMAT',
    'WIZARD_LOG_LEVEL',
    'SENDGRID_API_KEY',
    'SMTP_HOST',
    'SMTP_PORT',
    'SMTP_USER',
    'SMTP_PASS',
    'FLASK_ENV',
}

ENV_PATTERN = re.compile(r'\$\{([^}:]+)(?::-([^}]*))?\}')

PACKAGE_ROOT = Path(__file__).parent.parent.resolve()


@dataclass
class LLMSettings:
    """Connection settings for the OpenAI-compatible chat provider."""
    api_key: str = ''
    base_url: str = 'https://api.openai.com/v1'
    model: str = 'gpt-4o-mini'
    temperature: float = 0.7
    max_tokens: int = 10000
    json_mode: bool = True
    timeout: float = 120.0
    headers: Dict[str, str] = field(default_factory=dict)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)


@dataclass
class EmailSettings:
    """Email provider selection and credentials."""
    provider: str = 'none'
    from_email: str = 'hello@fitnesswizard.app'
    from_name: str = 'Fitness Wizard'
    reply_to: str = ''
    sendgrid_api_key: str = ''
    smtp_host: str = 'smtp.gmail.com'
    smtp_port: int = 587
    smtp_user: str = ''
    smtp_pass: str = ''
    preview_dir: str = ''

    @property
    def enabled(self) -> bool:
        return self.provider not in ('', 'none')


class Config:
    """Service configuration manager."""

    def __init__(self, path: Optional[Path] = None, data: Optional[Dict] = None):
        if data is not None:
            self._config = self._process_env_vars(data)
            self.source = None
        else:
            self._load_config(path)

    def _candidate_paths(self):
        explicit = os.environ.get('WIZARD_CONFIG')
        if explicit:
            yield Path(explicit)
        yield Path.cwd() / 'config.yaml'
        yield PACKAGE_ROOT / 'config.yaml'
        yield Path.home() / '.fitness-wizard' / 'config.yaml'

    def _load_config(self, path: Optional[Path] = None):
        """Load configuration from config.yaml."""
        config_path = None
        if path is not None:
            config_path = Path(path)
        else:
            for candidate in self._candidate_paths():
                if candidate.exists():
                    config_path = candidate
                    break

        self.source = config_path

        if config_path is None:
            # Use defaults if no config found
            self._config = self._process_env_vars(self._get_defaults())
            return

        with open(config_path, 'r') as f:
            raw_config = yaml.safe_load(f) or {}

        self._config = self._process_env_vars(raw_config)

    def _process_env_vars(self, obj: Any) -> Any:
        """
        Recursively process environment variable substitutions.

        SECURITY: Only allowlisted environment variables can be substituted.
        """
        if isinstance(obj, str):
            def replace(match):
                var_name = match.group(1)
                default = match.group(2) or ''

                if var_name not in ALLOWED_ENV_VARS:
                    return default

                return os.environ.get(var_name) or default

            return ENV_PATTERN.sub(replace, obj)

        elif isinstance(obj, dict):
            return {k: self._process_env_vars(v) for k, v in obj.items()}

        elif isinstance(obj, list):
            return [self._process_env_vars(item) for item in obj]

        return obj

    def _get_defaults(self) -> Dict:
        """Return default configuration (mirrors config.yaml)."""
        return {
            'app': {
                'environment': '${FLASK_ENV:-production}',
                'bonus_workers': 2,
            },
            'llm': {
                'api_key': '${OPENAI_API_KEY}',
                'base_url': '${OPENAI_BASE_URL:-https://api.openai.com/v1}',
                'model': '${WIZARD_LLM_MODEL:-gpt-4o-mini}',
                'temperature': 0.7,
                'max_tokens': 10000,
                'json_mode': True,
                'timeout': 120,
                'headers': {
                    'HTTP-Referer': 'http://localhost:3000',
                    'X-Title': 'AI Fitness Wizard',
                },
            },
            'email': {
                'provider': '${WIZARD_EMAIL_PROVIDER:-none}',
                'from_email': '${WIZARD_FROM_EMAIL:-hello@fitnesswizard.app}',
                'from_name': 'Fitness Wizard',
                'sendgrid': {'api_key': '${SENDGRID_API_KEY}'},
                'smtp': {
                    'host': '${SMTP_HOST:-smtp.gmail.com}',
                    'port': '${SMTP_PORT:-587}',
                    'username': '${SMTP_USER}',
                    'password': '${SMTP_PASS}',
                },
                'preview_dir': '${WIZARD_EMAIL_PREVIEW_DIR}',
            },
            'logging': {
                'format': '${WIZARD_LOG_FORMAT:-human}',
                'level': '${WIZARD_LOG_LEVEL:-INFO}',
            },
        }

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get a configuration value using dot notation.

        Example: config.get('llm.temperature', 0.7)
        """
        keys = key_path.split('.')
        value = self._config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    @property
    def is_development(self) -> bool:
        return str(self.get('app.environment', 'production')).lower() == 'development'

    @property
    def bonus_workers(self) -> int:
        return _as_int(self.get('app.bonus_workers'), 2)

    def llm_settings(self) -> LLMSettings:
        """Build the language-model settings struct."""
        defaults = LLMSettings()
        return LLMSettings(
            api_key=self.get('llm.api_key', '') or '',
            base_url=self.get('llm.base_url') or defaults.base_url,
            model=self.get('llm.model') or defaults.model,
            temperature=_as_float(self.get('llm.temperature'), defaults.temperature),
            max_tokens=_as_int(self.get('llm.max_tokens'), defaults.max_tokens),
            json_mode=_as_bool(self.get('llm.json_mode'), defaults.json_mode),
            timeout=_as_float(self.get('llm.timeout'), defaults.timeout),
            headers=dict(self.get('llm.headers') or {}),
        )

    def email_settings(self) -> EmailSettings:
        """Build the email settings struct."""
        defaults = EmailSettings()
        return EmailSettings(
            provider=str(self.get('email.provider') or 'none').lower(),
            from_email=self.get('email.from_email') or defaults.from_email,
            from_name=self.get('email.from_name') or defaults.from_name,
            reply_to=self.get('email.reply_to') or '',
            sendgrid_api_key=self.get('email.sendgrid.api_key') or '',
            smtp_host=self.get('email.smtp.host') or defaults.smtp_host,
            smtp_port=_as_int(self.get('email.smtp.port'), defaults.smtp_port),
            smtp_user=self.get('email.smtp.username') or '',
            smtp_pass=self.get('email.smtp.password') or '',
            preview_dir=self.get('email.preview_dir') or '',
        )

    @property
    def all(self) -> Dict:
        """Return the full configuration dictionary."""
        return self._config


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_float(value: Any, default: float) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _as_bool(value: Any, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value:
        return value.strip().lower() in ('1', 'true', 'yes', 'on')
    return default


# Thread-safe global config instance
_config: Optional[Config] = None
_config_lock = threading.Lock()


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        with _config_lock:
            if _config is None:
                _config = Config()
    return _config


def reset_config():
    """Drop the cached configuration so the next get_config() reloads it."""
    global _config
    with _config_lock:
        _config = None
