"""
Backend settings accessor for ScreenSort.
Reads settings from the settings database.
"""

import json
import sqlite3
from enum import Enum
from pathlib import Path
from typing import Any, Optional


class LogLevel(str, Enum):
    """Log level options."""
    NONE = "none"
    ERROR = "error"
    INFO = "info"
    DEBUG = "debug"


class BackendSettings:
    """Access persisted settings from the backend."""

    @staticmethod
    def get_setting(key: str, default: Any = None) -> Any:
        """Get a setting value from the settings database.

        Args:
            key: Setting key
            default: Default value if key not found or database unavailable

        Returns:
            Setting value or default
        """
        from ..storage.database import get_db_connection

        conn = None
        try:
            conn = get_db_connection()
            row = conn.execute('SELECT value FROM settings WHERE key = ?', (key,)).fetchone()
            if row is None:
                return default

            value = row[0]
            try:
                return json.loads(value) if value else default
            except (json.JSONDecodeError, TypeError):
                # Stored as a plain string
                return value
        except sqlite3.Error:
            # Database not reachable, fall back to the default
            return default
        finally:
            if conn is not None:
                conn.close()

    @staticmethod
    def set_setting(key: str, value: Any) -> bool:
        """Persist a setting value (JSON-encoded).

        Returns:
            True if the value was written, False if the database was unavailable
        """
        from ..storage.database import get_db_connection

        conn = None
        try:
            conn = get_db_connection()
            conn.execute(
                '''
                INSERT OR REPLACE INTO settings (key, value, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                ''',
                (key, json.dumps(value)),
            )
            conn.commit()
            return True
        except sqlite3.Error:
            return False
        finally:
            if conn is not None:
                conn.close()

    @staticmethod
    def get_log_level() -> LogLevel:
        """Get the current log level from settings."""
        level = BackendSettings.get_setting("log_level", LogLevel.INFO.value)
        try:
            return LogLevel(level.lower())
        except (ValueError, AttributeError):
            return LogLevel.INFO

    @staticmethod
    def set_log_level(level: LogLevel) -> bool:
        """Set the log level in settings."""
        serialized_value = level.value if isinstance(level, LogLevel) else str(level)
        return BackendSettings.set_setting("log_level", serialized_value)

    @staticmethod
    def get_semantic_provider() -> str:
        """Get the semantic model provider: ollama, openai, gemini or none."""
        return BackendSettings.get_setting("semantic_provider", "ollama")

    @staticmethod
    def get_ollama_base_url() -> str:
        """Get Ollama base URL from settings."""
        return BackendSettings.get_setting("ollama_base_url", "http://localhost:11434")

    @staticmethod
    def get_ollama_model() -> str:
        """Get Ollama model used for classification and extraction."""
        return BackendSettings.get_setting("ollama_model", "llama3.1:8b")

    @staticmethod
    def get_ollama_temperature() -> float:
        """Get Ollama temperature parameter."""
        return BackendSettings.get_setting("ollama_temperature", 0.1)

    @staticmethod
    def get_ollama_num_ctx() -> int:
        """Get Ollama num_ctx parameter."""
        return BackendSettings.get_setting("ollama_num_ctx", 8192)

    @staticmethod
    def get_openai_api_key() -> str:
        """Get OpenAI API key from settings."""
        return BackendSettings.get_setting("openai_api_key", "")

    @staticmethod
    def get_openai_model() -> str:
        """Get OpenAI model from settings."""
        return BackendSettings.get_setting("openai_model", "gpt-4.1-mini-2025-04-14")

    @staticmethod
    def get_gemini_api_key() -> str:
        """Get Gemini API key from settings."""
        return BackendSettings.get_setting("gemini_api_key", "")

    @staticmethod
    def get_gemini_model() -> str:
        """Get Gemini model from settings."""
        return BackendSettings.get_setting("gemini_model", "gemini-2.5-flash")

    @staticmethod
    def get_tmdb_api_key() -> str:
        """Get TMDb API key from settings."""
        return BackendSettings.get_setting("tmdb_api_key", "")

    @staticmethod
    def get_google_books_api_key() -> str:
        """Get Google Books API key from settings (optional for public search)."""
        return BackendSettings.get_setting("google_books_api_key", "")

    @staticmethod
    def get_youtube_api_key() -> str:
        """Get YouTube Data API key from settings."""
        return BackendSettings.get_setting("youtube_api_key", "")

    @staticmethod
    def get_state_dir() -> Path:
        """Directory holding the processed index, result cache and corrections."""
        from ..storage.database import get_home_dir

        configured = BackendSettings.get_setting("state_dir", None)
        if configured:
            return Path(configured).expanduser()
        return get_home_dir() / "state"

    @staticmethod
    def get_library_dir() -> Optional[Path]:
        """Root directory sorted screenshots are moved into, or None to leave files in place."""
        configured = BackendSettings.get_setting("library_dir", None)
        return Path(configured).expanduser() if configured else None


# Global instance
backend_settings = BackendSettings()
