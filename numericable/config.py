"""Configuration management from environment variables."""
import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env file
load_dotenv()

# Project root
PROJECT_ROOT = Path(__file__).parent.parent
DATA_DIR = Path(os.getenv("DATA_DIR", str(PROJECT_ROOT / "data")))
BILLS_DIR = DATA_DIR / "bills"
STATE_DB = DATA_DIR / "state.db"


class Config:
    """Application configuration."""

    # Numericable portals
    ACCOUNT_URL: str = os.getenv("ACCOUNT_URL", "https://moncompte.numericable.fr")
    CONNECTION_URL: str = os.getenv("CONNECTION_URL", "https://connexion.numericable.fr")
    LOGIN: str | None = os.getenv("LOGIN")
    PASSWORD: str | None = os.getenv("PASSWORD")

    # HTTP
    TIMEOUT: int = int(os.getenv("TIMEOUT", "20"))

    # Storage
    BILLS_DIR: Path = Path(os.getenv("BILLS_DIR", str(BILLS_DIR)))
    STATE_DB: Path = Path(os.getenv("STATE_DB", str(STATE_DB)))
    DOWNLOAD_PDFS: bool = os.getenv("DOWNLOAD_PDFS", "1").lower() not in ("0", "false", "no")
    PDF_MAX_RETRIES: int = int(os.getenv("PDF_MAX_RETRIES", "3"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    def validate(self) -> None:
        """Validate required configuration."""
        errors = []
        if not self.LOGIN:
            errors.append("LOGIN is required")
        if not self.PASSWORD:
            errors.append("PASSWORD is required")
        if errors:
            raise ValueError(f"Configuration errors: {', '.join(errors)}")


config = Config()
