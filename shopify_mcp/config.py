# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: Apache-2.0
"""
Typed settings for the MCP server, built from the Hydra/OmegaConf config tree.
"""

from dataclasses import dataclass, field

from omegaconf import DictConfig

from shopify_mcp.errors import ConfigError

CATALOG_RESULT_LIMIT = 5


@dataclass
class CatalogConfig:
    """Shopify Admin API connection settings"""

    store_domain: str | None = None
    access_token: str | None = None
    api_version: str = "2025-04"
    scheme: str = "https"
    timeout: float = 30.0
    result_limit: int = CATALOG_RESULT_LIMIT

    @property
    def products_url(self) -> str:
        return f"{self.scheme}://{self.store_domain}/admin/api/{self.api_version}/products.json"


@dataclass
class ServerConfig:
    """MCP server identity and HTTP settings"""

    name: str = "shopify-mcp-server"
    version: str = "1.0.0"
    host: str = "0.0.0.0"
    port: int = 3000
    protocol_version: str = "2024-11-05"
    keepalive_interval: float = 15.0
    messages_path: str = "/messages"
    allow_origin: str = "*"


@dataclass
class Settings:
    """Main configuration for the MCP server"""

    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    log_level: str = "INFO"

    @classmethod
    def from_config(cls, cfg: DictConfig) -> "Settings":
        """Build settings from a composed config, coercing env-provided strings"""
        catalog_cfg = cfg.get("catalog") or {}
        server_cfg = cfg.get("server") or {}
        defaults = cls()

        try:
            catalog = CatalogConfig(
                store_domain=_optional_str(catalog_cfg.get("store_domain")),
                access_token=_optional_str(catalog_cfg.get("access_token")),
                api_version=str(catalog_cfg.get("api_version", defaults.catalog.api_version)),
                scheme=str(catalog_cfg.get("scheme", defaults.catalog.scheme)),
                timeout=float(catalog_cfg.get("timeout", defaults.catalog.timeout)),
            )
            server = ServerConfig(
                name=str(server_cfg.get("name", defaults.server.name)),
                version=str(server_cfg.get("version", defaults.server.version)),
                host=str(server_cfg.get("host", defaults.server.host)),
                port=int(server_cfg.get("port", defaults.server.port)),
                protocol_version=str(server_cfg.get("protocol_version", defaults.server.protocol_version)),
                keepalive_interval=float(server_cfg.get("keepalive_interval", defaults.server.keepalive_interval)),
                messages_path=str(server_cfg.get("messages_path", defaults.server.messages_path)),
                allow_origin=str(server_cfg.get("allow_origin", defaults.server.allow_origin)),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid configuration value: {e}") from e

        return cls(catalog=catalog, server=server, log_level=str(cfg.get("log_level", defaults.log_level)).upper())

    def validate(self) -> "Settings":
        """Raise ConfigError unless the server can start with these settings"""
        missing = []
        if not self.catalog.store_domain:
            missing.append("SHOPIFY_STORE_DOMAIN")
        if not self.catalog.access_token:
            missing.append("SHOPIFY_ACCESS_TOKEN")
        if missing:
            raise ConfigError(f"Missing Shopify credentials: {', '.join(missing)}")
        if not 0 < self.server.port < 65536:
            raise ConfigError(f"Invalid port: {self.server.port}")
        if self.catalog.timeout <= 0:
            raise ConfigError(f"Invalid catalog timeout: {self.catalog.timeout}")
        return self


def _optional_str(value) -> str | None:
    if value is None:
        return None
    value = str(value).strip()
    return value or None
