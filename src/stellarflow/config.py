from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    network: str = "testnet"
    metadata_api_url: str = ""
    metadata_api_key: str = ""
    metadata_rate_per_second: float = 5.0
    http_timeout: float = 30.0
    path_payment_lookahead: int = 100  # Max effects scanned past the debit of a path payment
    default_token_decimals: int = 7
    include_mint_credit: bool = False
    include_token_events: bool = False

    class Config:
        env_file = ".env"


settings = Settings()
