"""Catalog manager application wiring.

Builds the component graph (API client, query cache, toaster, view) from
settings and manages its lifespan.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass

import structlog

from catalog_manager import __version__
from catalog_manager.api_client import ProductAPIClient
from catalog_manager.config import Settings, settings as default_settings
from catalog_manager.logging_config import configure_logging
from catalog_manager.notifications import Toaster
from catalog_manager.query_cache import QueryCache
from catalog_manager.view import ProductCatalogView

logger = structlog.get_logger()


@dataclass
class CatalogApp:
    """Wired catalog manager components."""

    settings: Settings
    api: ProductAPIClient
    cache: QueryCache
    toaster: Toaster
    view: ProductCatalogView


def create_app(settings: Settings | None = None) -> CatalogApp:
    """Build the catalog manager.

    Args:
        settings: Settings to use; defaults to the environment settings.

    Returns:
        CatalogApp with an unmounted view.
    """
    settings = settings or default_settings
    api = ProductAPIClient(base_url=settings.api_base_url)
    cache = QueryCache()
    toaster = Toaster()
    view = ProductCatalogView(api=api, cache=cache, toaster=toaster)
    return CatalogApp(settings=settings, api=api, cache=cache, toaster=toaster, view=view)


@asynccontextmanager
async def lifespan(settings: Settings | None = None) -> AsyncGenerator[CatalogApp, None]:
    """Run the catalog manager: configure logging, mount, then clean up.

    Args:
        settings: Settings to use; defaults to the environment settings.

    Yields:
        The mounted CatalogApp.
    """
    settings = settings or default_settings
    configure_logging(settings.log_level, settings.log_json)

    app = create_app(settings)
    logger.info(
        "Starting catalog manager",
        version=__version__,
        api_base_url=settings.api_base_url,
    )

    try:
        await app.view.mount()
        yield app
    finally:
        app.view.unmount()
        await app.api.close()
        logger.info("Catalog manager stopped")
