#!/usr/bin/env python3
"""
Configuration management for VibeCoder.
Handles the API credential, the optional compatible-service address and user
preferences with secure local storage.
"""

import os
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Dict, Any
from getpass import getpass

from .errors import ConfigurationError


DEFAULT_MODEL = 'gemini-2.5-flash'
DEFAULT_LANGUAGE = 'en'
SUPPORTED_LANGUAGES = ('en', 'zh')

# Checked in order, first non-empty wins
API_KEY_ENV_VARS = ('VIBECODER_API_KEY', 'API_KEY', 'GEMINI_API_KEY')
BASE_URL_ENV_VAR = 'GEMINI_BASE_URL'
MODEL_ENV_VAR = 'VIBECODER_MODEL'


@dataclass(frozen=True)
class Settings:
    """Resolved runtime settings"""
    api_key: str
    base_url: Optional[str] = None
    model: str = DEFAULT_MODEL
    language: str = DEFAULT_LANGUAGE

    @property
    def compatibility_mode(self) -> bool:
        """True when requests go to an OpenAI-compatible service"""
        return bool(self.base_url)


def get_config_dir() -> Path:
    """Get the VibeCoder config directory (~/.vibecoder)"""
    config_dir = Path.home() / '.vibecoder'
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def get_config_path() -> Path:
    """Get the config file path"""
    return get_config_dir() / 'config.json'


def load_config() -> Dict[str, Any]:
    """Load configuration from file"""
    config_path = get_config_path()
    if config_path.exists():
        try:
            with open(config_path, 'r') as f:
                return json.load(f)
        except (json.JSONDecodeError, IOError):
            return {}
    return {}


def save_config(config: Dict[str, Any]) -> None:
    """Save configuration to file"""
    config_path = get_config_path()
    with open(config_path, 'w') as f:
        json.dump(config, f, indent=2)
    # Secure the file (read/write only for owner)
    config_path.chmod(0o600)


def normalize_base_url(value: Optional[str]) -> Optional[str]:
    """Strip whitespace and a trailing slash; blank means 'not configured'"""
    if not value:
        return None
    value = value.strip().rstrip('/')
    return value or None


def get_api_key() -> Optional[str]:
    """
    Find the API credential.

    Priority:
    1. Environment variables (VIBECODER_API_KEY, API_KEY, GEMINI_API_KEY)
    2. The 'api_key' entry in ~/.vibecoder/config.json
    """
    for env_var in API_KEY_ENV_VARS:
        api_key = os.getenv(env_var)
        if api_key and api_key.strip():
            return api_key.strip()

    config = load_config()
    return config.get('api_key') or None


def get_base_url() -> Optional[str]:
    """Alternate service address, if one is configured"""
    env_value = normalize_base_url(os.getenv(BASE_URL_ENV_VAR))
    if env_value:
        return env_value
    return normalize_base_url(load_config().get('base_url'))


def load_settings(
    base_url: Optional[str] = None,
    model: Optional[str] = None,
    language: Optional[str] = None,
) -> Settings:
    """
    Resolve settings from arguments, environment and config file.

    Explicit arguments win over the environment, which wins over the file.

    Raises:
        ConfigurationError: no credential is configured, or the language is
            not supported.
    """
    api_key = get_api_key()
    if not api_key:
        raise ConfigurationError(
            "No API key configured. Run 'vibecoder --setup' or set VIBECODER_API_KEY."
        )

    config = load_config()
    language = language or config.get('language') or DEFAULT_LANGUAGE
    if language not in SUPPORTED_LANGUAGES:
        raise ConfigurationError(
            f"Unsupported language '{language}'. Choose one of: {', '.join(SUPPORTED_LANGUAGES)}"
        )

    return Settings(
        api_key=api_key,
        base_url=normalize_base_url(base_url) or get_base_url(),
        model=model or os.getenv(MODEL_ENV_VAR) or config.get('model') or DEFAULT_MODEL,
        language=language,
    )


def prompt_for_api_key() -> Optional[str]:
    """
    Interactively prompt user for API key and offer to save it.

    Returns:
        API key string or None if user declines
    """
    print("\n" + "=" * 60)
    print("VibeCoder API Key Setup")
    print("=" * 60)
    print("\nVibeCoder talks to Google Gemini by default.")
    print("Get your API key at: https://aistudio.google.com/app/apikey")
    print("\nYour key will be stored locally in ~/.vibecoder/config.json")
    print("(This file is private and never shared or committed)")
    print()

    try:
        api_key = getpass("Paste your API key (input hidden): ").strip()

        if not api_key:
            print("\nNo key provided. VibeCoder needs a key to run.")
            return None

        print("\nIf you use an OpenAI-compatible AI hub (LiteLLM, Zeabur, ...),")
        print("enter its base address. Leave empty to use Google directly.")
        base_url = normalize_base_url(input("Base URL [none]: "))

        save = input("\nSave settings to ~/.vibecoder/config.json for future sessions? [Y/n]: ").strip().lower()

        if save != 'n':
            config = load_config()
            config['api_key'] = api_key
            if base_url:
                config['base_url'] = base_url
            else:
                config.pop('base_url', None)
            save_config(config)
            print("Key saved!")
        else:
            print("Key will only be used for this session.")
            os.environ[API_KEY_ENV_VARS[0]] = api_key
            if base_url:
                os.environ[BASE_URL_ENV_VAR] = base_url

        return api_key

    except (KeyboardInterrupt, EOFError):
        print("\nCancelled.")
        return None


def clear_api_key() -> None:
    """Remove stored API key (and base URL) from config"""
    config = load_config()

    removed = [key for key in ('api_key', 'base_url') if key in config]
    if removed:
        for key in removed:
            del config[key]
        save_config(config)
        print(f"Removed from config: {', '.join(removed)}")
    else:
        print("No stored API key found.")


def get_config_value(key: str, default: Any = None) -> Any:
    """Get a specific config value"""
    config = load_config()
    return config.get(key, default)


def set_config_value(key: str, value: Any) -> None:
    """Set a specific config value"""
    config = load_config()
    config[key] = value
    save_config(config)
