"""
Configuration for Moviary.
Reads deployment variables from the environment (optionally from a .env file)
and sets up the loguru console sink.
"""

import os  # environment access
import sys  # stderr sink for the logger
from dataclasses import dataclass  # immutable settings container
from pathlib import Path  # project-relative .env lookup
from typing import Optional  # optional env file argument

from dotenv import load_dotenv  # .env support
from loguru import logger  # console logger


# Project root (one level above the package directory)
BASE_DIR = Path(__file__).resolve().parents[1]

# Read-only token used when TMDB_API_KEY is not provided by the deployment
DEFAULT_TMDB_TOKEN = (
	'eyJhbGciOiJIUzI1NiJ9.eyJhdWQiOiIzNDA2YTNlNDUxZjc0NjEzM2QzMjk5NmUzMGVlYjk4NSIsIm5iZiI6MTUzMTUwNjc0Mi42ODUs'
	'InN1YiI6IjViNDhmMDM2YzNhMzY4NDUyZDAwZTdlZiIsInNjb3BlcyI6WyJhcGlfcmVhZCJdLCJ2ZXJzaW9uIjoxfQ.'
	'Y79gp5dxM4slMHKuJZZQii7qu6aSHtcDYM53L9r2GD8'
)

MISSING_PERSISTENCE_WARNING = (
	'Persistence is not configured (SUPABASE_URL / SUPABASE_ANON_KEY missing). '
	'Your collection is empty and changes will not be saved.'
)


@dataclass(frozen=True)
class Settings:
	supabase_url: str = ''
	supabase_key: str = ''
	tmdb_api_key: str = DEFAULT_TMDB_TOKEN
	localize_country: str = 'ID'
	locale: str = 'id'
	import_delay_seconds: float = 0.5
	search_debounce_seconds: float = 0.3
	log_level: str = 'INFO'

	@property
	def persistence_configured(self) -> bool:
		return bool(self.supabase_url and self.supabase_key)


def _float_env(name: str, default: float) -> float:
	raw = os.getenv(name)
	if not raw:
		return default
	try:
		return float(raw)
	except ValueError:
		logger.warning(f"[Config] Ignoring non-numeric {name}={raw!r}, using {default}")
		return default


def load_settings(env_file: Optional[Path] = None) -> Settings:
	"""
	Build Settings from the process environment.
	A .env file at the project root (or `env_file`) is loaded first; existing
	environment variables win over values from the file.
	"""
	env_path = Path(env_file) if env_file else BASE_DIR / '.env'
	if env_path.exists():
		load_dotenv(env_path)
		logger.debug(f"[Config] Loaded environment from {env_path}")

	settings = Settings(
		supabase_url=(os.getenv('SUPABASE_URL') or '').strip().rstrip('/'),
		supabase_key=(os.getenv('SUPABASE_ANON_KEY') or '').strip(),
		tmdb_api_key=(os.getenv('TMDB_API_KEY') or '').strip() or DEFAULT_TMDB_TOKEN,
		localize_country=(os.getenv('MOVIARY_LOCALIZE_COUNTRY') or 'ID').strip().upper(),
		locale=(os.getenv('MOVIARY_LOCALE') or 'id').strip(),
		import_delay_seconds=_float_env('MOVIARY_IMPORT_DELAY', 0.5),
		search_debounce_seconds=_float_env('MOVIARY_SEARCH_DEBOUNCE', 0.3),
		log_level=(os.getenv('LOG_LEVEL') or 'INFO').strip().upper(),
	)

	if not settings.persistence_configured:
		logger.warning(f"[Config] {MISSING_PERSISTENCE_WARNING}")
	return settings


def configure_logging(level: str = 'INFO') -> None:
	"""Replace loguru's default sink with a single stderr sink at `level`."""
	logger.remove()
	logger.add(sys.stderr, level=level)
