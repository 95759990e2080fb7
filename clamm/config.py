"""
Configuration settings for the CLAMM engine

Loads environment variables (.env supported) and provides engine defaults.
"""
import logging
import os
from typing import Optional

from dotenv import load_dotenv

from .constants import MAX_SWAP_STEPS
from .math.scaled import Percentage

# Load environment variables from .env file
load_dotenv()


class Settings:
    """Engine settings"""

    # Logging
    LOG_LEVEL: str = os.getenv("CLAMM_LOG_LEVEL", "WARNING").upper()
    LOG_FORMAT: str = os.getenv(
        "CLAMM_LOG_FORMAT",
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    # Swap simulation: 스텝 수가 이 값을 넘으면 멈춤 (최대 MAX_SWAP_STEPS + 1 스텝)
    MAX_SWAP_STEPS: int = int(os.getenv("CLAMM_MAX_SWAP_STEPS", MAX_SWAP_STEPS))

    # Protocol fee share of every swap fee (decimal string, e.g. "0.01" = 1%)
    DEFAULT_PROTOCOL_FEE: str = os.getenv("CLAMM_PROTOCOL_FEE", "0.01")

    def protocol_fee(self) -> Percentage:
        """Default protocol fee as Percentage"""
        return Percentage.from_decimal(self.DEFAULT_PROTOCOL_FEE)


# Create global settings instance
settings = Settings()


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging for scripts and applications using the engine"""
    logging.basicConfig(
        level=getattr(logging, (level or settings.LOG_LEVEL).upper(), logging.WARNING),
        format=settings.LOG_FORMAT,
    )
