"""
Console settings, read from FUELWALE_CONSOLE_* environment variables or `.env`.
"""

from pydantic_settings import BaseSettings


class ConsoleSettings(BaseSettings):
    """Operator console settings."""

    base_url: str = "http://localhost:8000/v1"
    timeout: float = 30.0
    session_file: str = ".fuelwale_session.json"
    invoice_dir: str = "."

    class Config:
        env_prefix = "FUELWALE_CONSOLE_"
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


console_settings = ConsoleSettings()
