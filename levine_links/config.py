"""
Configuration loading for Levine Links.

Settings live in a YAML file (config/config.yaml by default) and are merged
over the defaults below. Secrets come from the environment, which is seeded
from a .env file when one is present.
"""

import os
import copy
import logging

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = os.path.join('config', 'config.yaml')

BROWSER_USER_AGENT = (
    'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) '
    'AppleWebKit/537.36 (KHTML, like Gecko) '
    'Chrome/122.0.0.0 Safari/537.36'
)


def get_default_config():
    """Return default configuration settings."""
    return {
        "crawler": {
            "user_agent": BROWSER_USER_AGENT,
            "request_timeout": 10,
            "max_redirect_depth": 5,
            "favicon_template": "https://www.google.com/s2/favicons?domain={domain}&sz=32",
        },
        "summarizer": {
            "api_key": "",
            "api_url": "https://api.perplexity.ai/chat/completions",
            "model": "sonar",
            "max_tokens": 250,
            "request_timeout": 30,
            "min_length": 30,
        },
        "archive": {
            "search_url": "https://archive.today/newest/",
            "request_timeout": 10,
        },
        "enrichment": {
            "worker_count": 3,
            "summary_limit": None,
            "og_image_samples": 5,
        },
        "logging": {
            "level": "INFO",
            "file": None,
        },
        "output": {
            "directory": os.path.join('data', 'newsletters'),
        },
    }


def _merge(base, override):
    """Recursively merge *override* into a copy of *base*."""
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path=None):
    """Load configuration from YAML and the environment.

    Args:
        config_path: Path to a YAML file. Falls back to $LEVINE_LINKS_CONFIG,
            then config/config.yaml.

    Returns:
        dict: The full configuration with defaults filled in.
    """
    load_dotenv()

    config_path = config_path or os.environ.get('LEVINE_LINKS_CONFIG', DEFAULT_CONFIG_PATH)
    file_config = {}

    if os.path.exists(config_path):
        try:
            with open(config_path, 'r') as file:
                file_config = yaml.safe_load(file) or {}
            if not isinstance(file_config, dict):
                logger.error(f"Configuration in {config_path} is not a mapping, using defaults")
                file_config = {}
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load configuration from {config_path}: {e}")
            file_config = {}
    else:
        logger.info(f"No configuration file at {config_path}, using defaults")

    config = _merge(get_default_config(), file_config)

    api_key = os.environ.get('PERPLEXITY_API_KEY')
    if api_key:
        config['summarizer']['api_key'] = api_key

    return config
