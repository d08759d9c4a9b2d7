from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # CoinGecko (prices, search, trending catalysts)
    coingecko_base_url: str = "https://api.coingecko.com/api/v3"
    vs_currency: str = "usd"
    http_timeout_seconds: float = 15.0

    # Assets shown when the search box is empty
    default_ids: list[str] = [
        "bitcoin",
        "ethereum",
        "solana",
        "unicorn-fart-dust",
        "dogecoin",
        "pepe",
        "sui",
        "shiba-inu",
    ]

    # Search: cap ids per query to keep /coins/markets requests small (429s)
    search_limit: int = 10
    search_debounce_seconds: float = 0.5

    # Scoring
    default_risk_bias: float = 0.5

    # Web
    web_host: str = "0.0.0.0"
    web_port: int = 8888

    log_level: str = "INFO"


settings = Settings()
