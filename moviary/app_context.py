"""
Application context.
Builds and owns the long-lived objects (store, metadata client, localization
cache, collection view, library) so every entry point wires them the same way.
"""

from dataclasses import dataclass
from typing import Optional

from loguru import logger

from .config import MISSING_PERSISTENCE_WARNING, Settings, configure_logging, load_settings
from .filters import CollectionView
from .library import FilmLibrary
from .localization import LocalizationCache
from .scheduler import TickScheduler
from .store import create_store
from .tmdb_client import MetadataClient


@dataclass
class AppContext:
	settings: Settings
	store: object
	client: MetadataClient
	localization: LocalizationCache
	scheduler: TickScheduler
	view: CollectionView
	library: FilmLibrary

	@property
	def warning(self) -> Optional[str]:
		"""Banner text to show while persistence is not configured."""
		if self.settings.persistence_configured:
			return None
		return MISSING_PERSISTENCE_WARNING


def build_context(settings: Optional[Settings] = None, store=None, client: Optional[MetadataClient] = None) -> AppContext:
	settings = settings or load_settings()
	configure_logging(settings.log_level)

	store = store if store is not None else create_store(settings)
	client = client or MetadataClient(settings.tmdb_api_key)
	scheduler = TickScheduler()
	view = CollectionView(scheduler)
	library = FilmLibrary(store, client, view)
	localization = LocalizationCache(client, country=settings.localize_country, locale=settings.locale)

	logger.info(
		f"[Context] Ready | persistence={'on' if settings.persistence_configured else 'off'} "
		f"localize={settings.localize_country}/{settings.locale}"
	)
	return AppContext(
		settings=settings,
		store=store,
		client=client,
		localization=localization,
		scheduler=scheduler,
		view=view,
		library=library,
	)
