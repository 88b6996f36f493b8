"""
Tests for settings loading.
"""

import os

from moviary.config import DEFAULT_TMDB_TOKEN, load_settings

ENV_VARS = (
	'SUPABASE_URL', 'SUPABASE_ANON_KEY', 'TMDB_API_KEY', 'MOVIARY_LOCALIZE_COUNTRY',
	'MOVIARY_LOCALE', 'MOVIARY_IMPORT_DELAY', 'MOVIARY_SEARCH_DEBOUNCE', 'LOG_LEVEL',
)


def clean_env(monkeypatch):
	for name in ENV_VARS:
		monkeypatch.delenv(name, raising=False)


def test_defaults_without_configuration(monkeypatch, tmp_path):
	clean_env(monkeypatch)
	settings = load_settings(tmp_path / 'missing.env')

	assert not settings.persistence_configured
	assert settings.tmdb_api_key == DEFAULT_TMDB_TOKEN
	assert settings.localize_country == 'ID'
	assert settings.locale == 'id'
	assert settings.import_delay_seconds == 0.5


def test_environment_values(monkeypatch, tmp_path):
	clean_env(monkeypatch)
	monkeypatch.setenv('SUPABASE_URL', 'https://demo.supabase.co/')
	monkeypatch.setenv('SUPABASE_ANON_KEY', 'anon')
	monkeypatch.setenv('TMDB_API_KEY', 'mine')
	monkeypatch.setenv('MOVIARY_LOCALIZE_COUNTRY', 'kr')
	monkeypatch.setenv('MOVIARY_IMPORT_DELAY', 'soon')

	settings = load_settings(tmp_path / 'missing.env')

	assert settings.persistence_configured
	assert settings.supabase_url == 'https://demo.supabase.co'
	assert settings.tmdb_api_key == 'mine'
	assert settings.localize_country == 'KR'
	assert settings.import_delay_seconds == 0.5  # invalid value ignored


def test_env_file_is_read(monkeypatch, tmp_path):
	clean_env(monkeypatch)
	env_file = tmp_path / '.env'
	env_file.write_text('SUPABASE_URL=https://file.supabase.co\nSUPABASE_ANON_KEY=from-file\n', encoding='utf-8')

	try:
		settings = load_settings(env_file)
		assert settings.supabase_key == 'from-file'
		assert settings.persistence_configured
	finally:
		# load_dotenv wrote straight into os.environ
		os.environ.pop('SUPABASE_URL', None)
		os.environ.pop('SUPABASE_ANON_KEY', None)
