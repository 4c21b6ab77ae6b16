#!/usr/bin/env python3
"""
Tests for settings resolution.
"""

import json
import stat

import pytest

from vibecoder import config
from vibecoder.errors import ConfigurationError


class TestConfigFile:

    def test_save_is_private(self, isolated_home):
        """Config is written owner-only"""
        config.save_config({'api_key': 'abc'})
        path = config.get_config_path()

        assert path == isolated_home / '.vibecoder' / 'config.json'
        assert json.loads(path.read_text()) == {'api_key': 'abc'}
        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    def test_corrupt_file_reads_as_empty(self, isolated_home):
        """A broken config file reads as empty"""
        config.get_config_path().write_text('{not json')
        assert config.load_config() == {}

    def test_config_values(self, isolated_home):
        """Single values round through the config file"""
        config.set_config_value('language', 'zh')
        assert config.get_config_value('language') == 'zh'
        assert config.get_config_value('missing', 'x') == 'x'


class TestApiKey:

    def test_env_var_priority(self, isolated_home, monkeypatch):
        """VIBECODER_API_KEY wins over other sources"""
        config.save_config({'api_key': 'from-file'})
        monkeypatch.setenv('GEMINI_API_KEY', 'from-gemini')
        monkeypatch.setenv('VIBECODER_API_KEY', 'from-vibecoder')

        assert config.get_api_key() == 'from-vibecoder'

    def test_falls_back_to_file(self, isolated_home):
        """The config file is used when no env var is set"""
        config.save_config({'api_key': 'from-file'})
        assert config.get_api_key() == 'from-file'

    def test_blank_env_ignored(self, isolated_home, monkeypatch):
        """Whitespace-only keys are ignored"""
        monkeypatch.setenv('API_KEY', '   ')
        assert config.get_api_key() is None

    def test_clear_api_key(self, isolated_home):
        """Clearing removes key and base URL only"""
        config.save_config({'api_key': 'k', 'base_url': 'https://hub', 'language': 'zh'})
        config.clear_api_key()

        assert config.load_config() == {'language': 'zh'}


class TestLoadSettings:

    def test_missing_key_raises(self, isolated_home):
        """No credential raises ConfigurationError"""
        with pytest.raises(ConfigurationError):
            config.load_settings()

    def test_defaults(self, isolated_home, monkeypatch):
        """Defaults apply when only a key is set"""
        monkeypatch.setenv('API_KEY', 'k')
        settings = config.load_settings()

        assert settings.api_key == 'k'
        assert settings.base_url is None
        assert not settings.compatibility_mode
        assert settings.model == config.DEFAULT_MODEL
        assert settings.language == 'en'

    def test_base_url_enables_compatibility(self, isolated_home, monkeypatch):
        """A base URL switches to compatible mode"""
        monkeypatch.setenv('API_KEY', 'k')
        monkeypatch.setenv('GEMINI_BASE_URL', ' https://hub.example.com/ ')
        settings = config.load_settings()

        assert settings.base_url == 'https://hub.example.com'
        assert settings.compatibility_mode

    def test_blank_base_url_is_native(self, isolated_home, monkeypatch):
        """A blank base URL is treated as unset"""
        monkeypatch.setenv('API_KEY', 'k')
        monkeypatch.setenv('GEMINI_BASE_URL', '  ')

        assert not config.load_settings().compatibility_mode

    def test_arguments_win(self, isolated_home, monkeypatch):
        """Explicit arguments beat environment and file"""
        monkeypatch.setenv('API_KEY', 'k')
        monkeypatch.setenv('VIBECODER_MODEL', 'env-model')
        config.save_config({'language': 'en', 'model': 'file-model'})

        settings = config.load_settings(base_url='https://arg.example.com', model='arg-model', language='zh')

        assert settings.base_url == 'https://arg.example.com'
        assert settings.model == 'arg-model'
        assert settings.language == 'zh'

    def test_unsupported_language_raises(self, isolated_home, monkeypatch):
        """Unknown languages raise ConfigurationError"""
        monkeypatch.setenv('API_KEY', 'k')
        with pytest.raises(ConfigurationError):
            config.load_settings(language='fr')
