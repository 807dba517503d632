from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    APP_NAME: str = "Stock Ledger"
    DATABASE_URL: str = "sqlite:///./stockledger.db"
    DATABASE_ECHO: bool = False
    # How long a SQLite writer waits for another worker to commit
    SQLITE_BUSY_TIMEOUT_SECONDS: float = 30.0

    LOG_LEVEL: str = "INFO"

    # Movement tables are read in batches of this size until a short page
    LEDGER_PAGE_SIZE: int = 1000

    # Default page size for listings
    DEFAULT_PAGE_SIZE: int = 50

    # Color / brand / category names used to enrich responses
    REFERENCE_CACHE_TTL_SECONDS: float = 300.0

    # Size taxonomy
    CHILDREN_CATEGORY_ID: int = 3
    ADULT_SIZES: list[str] = ["XXS", "XS", "S", "M", "L", "XL", "XXL", "XXXL"]
    CHILDREN_SIZES: list[str] = [str(n) for n in range(92, 165, 6)]

    # Size labels with a height band (W101 line), stored verbatim
    GROWTH_BANDED_SIZES: list[str] = [
        "XS 160", "XS 170",
        "S 160", "S 170",
        "M 160", "M 170",
        "L 160", "L 170",
    ]

    model_config = {"env_file": ".env"}


settings = Settings()
