from decimal import Decimal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Addresses, endpoints and tuning knobs loaded from environment variables."""

    model_config = SettingsConfigDict(env_prefix="YYJOE_APR_")

    rpc_url: str = "https://rpc.ankr.com/avalanche"
    rpc_timeout_seconds: float = 10.0
    rpc_max_attempts: int = Field(5, ge=1)
    rpc_backoff_seconds: float = 0.5

    graph_index_url: str = "https://api.thegraph.com/index-node/graphql"
    graph_timeout_seconds: float = 30.0
    graph_network: str = "avalanche"
    exchange_subgraph_name: str = "traderjoe-xyz/exchange"
    masterchef_subgraph_name: str = "traderjoe-xyz/boosted-master-chef"
    vejoe_subgraph_name: str = "traderjoe-xyz/vejoe"
    subgraph_base_url: str = "https://api.thegraph.com/subgraphs/name"

    yyjoe_address: str = "0xe7462905b79370389e8180e300f58f63d35b725f"
    yyjoe_staking_address: str = "0x2d53bdf5507e9ae283c114a8404b460c05f700cb"
    joe_yyjoe_pair_address: str = "0xe61dc1c6bb54262a7a24bd506cd50e8986af66c6"
    boosted_masterchef_address: str = "0x4483f0b6e2f5486d06958c20f8c39a7abe87bf8f"

    rewards_share_to_holders: Decimal = Decimal("0.15")
    token_decimals: int = 18

    api_title: str = "yyJOE APR API"

    def subgraph_url(self, name: str) -> str:
        return f"{self.subgraph_base_url.rstrip('/')}/{name}"

    @property
    def exchange_subgraph_url(self) -> str:
        return self.subgraph_url(self.exchange_subgraph_name)

    @property
    def masterchef_subgraph_url(self) -> str:
        return self.subgraph_url(self.masterchef_subgraph_name)

    @property
    def vejoe_subgraph_url(self) -> str:
        return self.subgraph_url(self.vejoe_subgraph_name)

    @property
    def subgraph_names(self) -> list[str]:
        return [
            self.exchange_subgraph_name,
            self.masterchef_subgraph_name,
            self.vejoe_subgraph_name,
        ]


settings = Settings()
