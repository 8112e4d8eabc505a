"""
Configuration settings for Alpha Vantage weekly price collection
"""

import os
from dataclasses import dataclass
from dotenv import load_dotenv
load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes"}


@dataclass
class CollectorConfig:
    """Configuration class for a collection run"""

    # API Configuration
    API_URL: str = (
        "https://www.alphavantage.co/query?function=DIGITAL_CURRENCY_WEEKLY"
        "&symbol={symbol}&market=EUR&apikey={api_key}"
    )
    API_KEY_FILE: str = "apikey.txt"
    REQUEST_TIMEOUT: int = 30

    # Input / state files
    DB_PATH: str = "./crypto.sqlite"
    SYMBOL_LIST_FILE: str = "digital_currency_list.csv"
    CHECKPOINT_PATH: str = "index.txt"

    # Rate Limiting: free tier allows 5 requests per minute
    BATCH_SIZE: int = 5
    PACING_SECONDS: float = 60.0
    LIMIT_BACKOFF_SECONDS: float = 24 * 60 * 60
    # When True, the pacing sleep between batches is skipped
    DISABLE_RATE_LIMITING: bool = False

    # Production keeps retrying across daily quota windows instead of stopping
    PRODUCTION: bool = False

    # Number of weekly points extracted per symbol
    WEEKS: int = 25

    def build_url(self, symbol: str, api_key: str) -> str:
        """Return the request URL for a symbol"""
        return self.API_URL.format(symbol=symbol, api_key=api_key)

    @classmethod
    def from_env(cls) -> 'CollectorConfig':
        """Create configuration from environment variables"""
        return cls(
            API_URL=os.getenv("COLLECTOR_API_URL", cls.API_URL),
            API_KEY_FILE=os.getenv("COLLECTOR_API_KEY_FILE", cls.API_KEY_FILE),
            REQUEST_TIMEOUT=int(os.getenv("COLLECTOR_REQUEST_TIMEOUT", str(cls.REQUEST_TIMEOUT))),
            DB_PATH=os.getenv("COLLECTOR_DB_PATH", cls.DB_PATH),
            SYMBOL_LIST_FILE=os.getenv("COLLECTOR_SYMBOL_LIST_FILE", cls.SYMBOL_LIST_FILE),
            CHECKPOINT_PATH=os.getenv("COLLECTOR_CHECKPOINT_PATH", cls.CHECKPOINT_PATH),
            BATCH_SIZE=int(os.getenv("COLLECTOR_BATCH_SIZE", str(cls.BATCH_SIZE))),
            PACING_SECONDS=float(os.getenv("COLLECTOR_PACING_SECONDS", str(cls.PACING_SECONDS))),
            LIMIT_BACKOFF_SECONDS=float(
                os.getenv("COLLECTOR_LIMIT_BACKOFF_SECONDS", str(cls.LIMIT_BACKOFF_SECONDS))
            ),
            DISABLE_RATE_LIMITING=_env_flag("DISABLE_RATE_LIMITING", "0"),
            PRODUCTION=_env_flag("COLLECTOR_PRODUCTION", "0"),
            WEEKS=int(os.getenv("COLLECTOR_WEEKS", str(cls.WEEKS))),
        )


# Global configuration instance
config = CollectorConfig.from_env()
