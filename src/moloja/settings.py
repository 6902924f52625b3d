"""
Application settings using Pydantic.

Settings are loaded from environment variables with .env file support.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PrinterSettings(BaseSettings):
    """Receipt printer settings."""

    model_config = SettingsConfigDict(env_prefix="MOLOJA_PRINTER_", extra="ignore")

    # "spooler" prints through lp, "serial" talks ESC/POS to a thermal printer
    backend: Literal["spooler", "serial"] = "spooler"

    # Spooler destination (lp -d), system default when unset
    name: Optional[str] = None

    # Thermal printer UART
    port: str = "/dev/serial0"
    baudrate: int = Field(default=9600, gt=0)


class ShareSettings(BaseSettings):
    """Document sharing settings."""

    model_config = SettingsConfigDict(env_prefix="MOLOJA_SHARE_", extra="ignore")

    telegram_bot_token: str = ""
    telegram_chat_id: str = ""


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="MOLOJA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    debug: bool = False

    # Where downloaded receipts are written
    output_dir: Path = Field(default_factory=lambda: Path.cwd() / "receipts")

    # Nested settings
    printer: PrinterSettings = Field(default_factory=PrinterSettings)
    share: ShareSettings = Field(default_factory=ShareSettings)

    @property
    def can_share(self) -> bool:
        """Check if a sharing channel is configured."""
        return bool(self.share.telegram_bot_token and self.share.telegram_chat_id)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
