# File: hr_briefing/config/settings.py
"""Configuration management and validation"""
import os
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional

import yaml
from dotenv import load_dotenv

from hr_briefing.core.exceptions import ConfigurationError
from hr_briefing.utils.http_client import DEFAULT_USER_AGENT
from hr_briefing.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = "briefing_config.yaml"


@dataclass
class HTTPConfig:
    """HTTP client configuration"""
    timeout_seconds: float = 15
    max_retries: int = 3
    base_delay: float = 0.1
    max_delay: float = 10.0
    connection_pool_size: int = 20
    user_agent: str = DEFAULT_USER_AGENT

    def to_dict(self) -> Dict[str, Any]:
        return dict(self.__dict__)


@dataclass
class ScrapingConfig:
    """Scraping configuration"""
    max_concurrent_fetches: int = 4
    recent_days: int = 7
    min_content_length: int = 50
    min_line_length: int = 10


@dataclass
class SummarizerConfig:
    """Language model configuration"""
    model: str = "gpt-4o-mini"
    max_tokens: int = 1200
    temperature: float = 0.0
    api_key: Optional[str] = None
    base_url: Optional[str] = None


@dataclass
class DeliveryConfig:
    """KakaoWork delivery configuration"""
    api_base: str = "https://api.kakaowork.com/v1"
    max_message_length: int = 4000
    schedule_time: str = "07:00"
    app_key: Optional[str] = None
    recipients: List[str] = field(default_factory=list)
    conversation_id: Optional[str] = None

    @property
    def is_configured(self) -> bool:
        return bool(self.app_key and self.recipients)


class ConfigManager:
    """Configuration manager with validation.

    Tunables come from the YAML file; credentials come from the environment
    (or a .env file next to the process).
    """

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or os.getenv("BRIEFING_CONFIG", DEFAULT_CONFIG_PATH)
        self._config: Dict[str, Any] = {}
        self._validated = False

    def load_config(self) -> Dict[str, Any]:
        """Load and validate configuration"""
        load_dotenv()
        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                self._config = yaml.safe_load(f) or {}

            self._validate_config()
            self._apply_defaults()

            logger.info(f"Configuration loaded successfully from {self.config_path}")
            return self._config

        except FileNotFoundError:
            raise ConfigurationError(f"Configuration file not found: {self.config_path}")
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file: {e}")

    def _validate_config(self):
        """Validate configuration structure and values"""
        if not isinstance(self._config, dict):
            raise ConfigurationError("Configuration root must be a mapping")

        if 'sites' not in self._config:
            raise ConfigurationError("Missing required configuration key: sites")

        if not isinstance(self._config['sites'], list) or not self._config['sites']:
            raise ConfigurationError("'sites' must be a non-empty list")

        for i, site in enumerate(self._config['sites']):
            if not isinstance(site, dict):
                raise ConfigurationError(f"Site {i} must be a dictionary")
            if 'key' not in site:
                raise ConfigurationError(f"Site {i} missing required 'key' field")

        for section in ('http', 'scraping', 'summarizer', 'delivery', 'keywords', 'logging'):
            if section in self._config and not isinstance(self._config[section], dict):
                raise ConfigurationError(f"'{section}' must be a mapping")

        max_concurrent = self._config.get('scraping', {}).get('max_concurrent_fetches', 4)
        if not isinstance(max_concurrent, int) or max_concurrent < 1:
            raise ConfigurationError("'scraping.max_concurrent_fetches' must be a positive integer")

        self._validated = True
        logger.info("Configuration validation passed")

    def _apply_defaults(self):
        """Apply default values for optional configuration"""
        defaults = {
            'http': HTTPConfig().to_dict(),
            'scraping': dict(ScrapingConfig().__dict__),
            'summarizer': {'model': 'gpt-4o-mini', 'max_tokens': 1200, 'temperature': 0.0},
            'delivery': {
                'api_base': 'https://api.kakaowork.com/v1',
                'max_message_length': 4000,
                'schedule_time': '07:00'
            },
            'keywords': {'include_extra': [], 'exclude_extra': []},
            'logging': {
                'level': 'INFO',
                'file_enabled': False,
                'file_path': 'briefing.log',
                'console_enabled': True,
                'format': 'standard'
            }
        }

        for key, value in defaults.items():
            if key not in self._config or self._config[key] is None:
                self._config[key] = dict(value)
            elif isinstance(value, dict) and isinstance(self._config[key], dict):
                # Merge nested dictionaries
                for subkey, subvalue in value.items():
                    if subkey not in self._config[key]:
                        self._config[key][subkey] = subvalue

    def _require_validated(self):
        if not self._validated:
            raise ConfigurationError("Configuration not validated")

    @property
    def config(self) -> Dict[str, Any]:
        self._require_validated()
        return self._config

    def get_http_config(self) -> HTTPConfig:
        """Get HTTP configuration"""
        self._require_validated()
        http = self._config['http']
        return HTTPConfig(
            timeout_seconds=http.get('timeout_seconds', 15),
            max_retries=http.get('max_retries', 3),
            base_delay=http.get('base_delay', 0.1),
            max_delay=http.get('max_delay', 10.0),
            connection_pool_size=http.get('connection_pool_size', 20),
            user_agent=http.get('user_agent', DEFAULT_USER_AGENT)
        )

    def get_scraping_config(self) -> ScrapingConfig:
        """Get scraping configuration"""
        self._require_validated()
        scraping = self._config['scraping']
        return ScrapingConfig(
            max_concurrent_fetches=scraping.get('max_concurrent_fetches', 4),
            recent_days=scraping.get('recent_days', 7),
            min_content_length=scraping.get('min_content_length', 50),
            min_line_length=scraping.get('min_line_length', 10)
        )

    def get_summarizer_config(self) -> SummarizerConfig:
        """Get summarizer configuration; the API key comes from the environment"""
        self._require_validated()
        summarizer = self._config['summarizer']
        return SummarizerConfig(
            model=os.getenv('BRIEFING_MODEL') or summarizer.get('model', 'gpt-4o-mini'),
            max_tokens=summarizer.get('max_tokens', 1200),
            temperature=summarizer.get('temperature', 0.0),
            api_key=os.getenv('OPENAI_API_KEY'),
            base_url=os.getenv('OPENAI_BASE_URL') or summarizer.get('base_url')
        )

    def get_delivery_config(self) -> DeliveryConfig:
        """Get delivery configuration; credentials come from the environment"""
        self._require_validated()
        delivery = self._config['delivery']
        recipients = os.getenv('KWORK_TO_EMAIL', '')
        return DeliveryConfig(
            api_base=delivery.get('api_base', 'https://api.kakaowork.com/v1'),
            max_message_length=delivery.get('max_message_length', 4000),
            schedule_time=delivery.get('schedule_time', '07:00'),
            app_key=os.getenv('KWORK_APP_KEY') or None,
            recipients=[email.strip() for email in recipients.split(',') if email.strip()],
            conversation_id=os.getenv('KWORK_CONVERSATION_ID') or None
        )

    def get_enabled_sites(self) -> List[Dict[str, Any]]:
        """Get list of enabled sites"""
        self._require_validated()
        return [site for site in self._config['sites'] if site.get('enabled', True)]
