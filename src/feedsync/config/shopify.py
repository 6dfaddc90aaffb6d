"""Shopify Admin API configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from .env import optional_env, require_env_vars
from .http_resilience import RateLimit, ResilienceConfig

DEFAULT_API_VERSION: Final[str] = "2025-01"
# Admin GraphQL bucket refills at 50 points/s on standard plans.
DEFAULT_RATELIMIT: Final[RateLimit] = RateLimit(max_calls=2, per_seconds=1.0)


@dataclass(frozen=True, slots=True)
class ShopifyConfig:
    shop_domain: str
    access_token: str
    api_version: str = DEFAULT_API_VERSION

    @property
    def graphql_url(self) -> str:
        domain = self.shop_domain.removeprefix("https://").rstrip("/")
        return f"https://{domain}/admin/api/{self.api_version}/graphql.json"

    def resilience(self) -> ResilienceConfig:
        return ResilienceConfig(
            name="shopify",
            base_url=self.graphql_url,
            ratelimit=DEFAULT_RATELIMIT,
            default_headers={
                "X-Shopify-Access-Token": self.access_token,
                "Content-Type": "application/json",
            },
        )


def get_shopify_config() -> ShopifyConfig:
    values = require_env_vars(("SHOPIFY_SHOP_DOMAIN", "SHOPIFY_ACCESS_TOKEN"))
    return ShopifyConfig(
        shop_domain=values["SHOPIFY_SHOP_DOMAIN"],
        access_token=values["SHOPIFY_ACCESS_TOKEN"],
        api_version=optional_env("SHOPIFY_API_VERSION") or DEFAULT_API_VERSION,
    )
