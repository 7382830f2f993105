import pytest
from hydra import compose, initialize
from hydra.core.global_hydra import GlobalHydra
from omegaconf import OmegaConf

from shopify_mcp.config import Settings
from shopify_mcp.errors import ConfigError


def compose_config():
    if GlobalHydra().is_initialized():
        GlobalHydra.instance().clear()
    with initialize(version_base=None, config_path="shopify_mcp/conf"):
        return compose(config_name="config")


def test_shipped_config_reads_environment(monkeypatch):
    monkeypatch.setenv("SHOPIFY_STORE_DOMAIN", "demo.myshopify.com")
    monkeypatch.setenv("SHOPIFY_ACCESS_TOKEN", "shpat_demo")
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.delenv("SHOPIFY_API_VERSION", raising=False)
    monkeypatch.delenv("MCP_PROTOCOL_VERSION", raising=False)

    settings = Settings.from_config(compose_config()).validate()
    assert settings.server.port == 8080
    assert settings.catalog.api_version == "2025-04"
    assert settings.server.protocol_version == "2024-11-05"
    assert settings.catalog.products_url == "https://demo.myshopify.com/admin/api/2025-04/products.json"


def test_missing_credentials_refuse_to_start(monkeypatch):
    monkeypatch.delenv("SHOPIFY_STORE_DOMAIN", raising=False)
    monkeypatch.delenv("SHOPIFY_ACCESS_TOKEN", raising=False)

    with pytest.raises(ConfigError) as excinfo:
        Settings.from_config(compose_config()).validate()
    assert "SHOPIFY_ACCESS_TOKEN" in str(excinfo.value)


def test_blank_token_and_bad_values():
    cfg = OmegaConf.create({"catalog": {"store_domain": "demo.myshopify.com", "access_token": "  "}})
    with pytest.raises(ConfigError):
        Settings.from_config(cfg).validate()

    cfg = OmegaConf.create({"catalog": {"store_domain": "d", "access_token": "t"}, "server": {"port": "not-a-port"}})
    with pytest.raises(ConfigError):
        Settings.from_config(cfg)

    cfg = OmegaConf.create({"catalog": {"store_domain": "d", "access_token": "t"}, "server": {"port": 70000}})
    with pytest.raises(ConfigError):
        Settings.from_config(cfg).validate()
