"""Tests for settings and application wiring."""

from unittest.mock import AsyncMock, patch

import pytest

from catalog_manager.api_client import ProductAPIClient
from catalog_manager.config import Settings
from catalog_manager.main import create_app, lifespan
from catalog_manager.view import ViewPhase


class TestSettings:
    """Tests for environment configuration."""

    def test_defaults(self, monkeypatch) -> None:
        monkeypatch.delenv("CATALOG_API_BASE_URL", raising=False)
        settings = Settings(_env_file=None)

        assert settings.api_base_url == "http://localhost:8000/api/produtos"
        assert settings.log_level == "INFO"

    def test_env_override(self, monkeypatch) -> None:
        monkeypatch.setenv("CATALOG_API_BASE_URL", "http://catalog.test/api/produtos")

        assert Settings(_env_file=None).api_base_url == "http://catalog.test/api/produtos"


class TestCreateApp:
    """Tests for create_app and lifespan."""

    def test_components_are_wired(self) -> None:
        app = create_app(Settings(_env_file=None, api_base_url="http://catalog.test/p/"))

        assert app.api.base_url == "http://catalog.test/p"
        assert app.view.api is app.api
        assert app.view.cache is app.cache
        assert app.view.toaster is app.toaster

    @pytest.mark.asyncio
    async def test_lifespan_mounts_and_closes(self) -> None:
        settings = Settings(_env_file=None, log_json=False)

        with patch.object(
            ProductAPIClient, "list_products", new_callable=AsyncMock, return_value=[]
        ), patch.object(ProductAPIClient, "close", new_callable=AsyncMock) as close:
            async with lifespan(settings) as app:
                assert app.view.phase is ViewPhase.READY
                assert app.cache.has_observers(("products",))

            close.assert_awaited_once()
            assert not app.cache.has_observers(("products",))
