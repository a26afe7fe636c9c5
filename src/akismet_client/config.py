"""Configuration management for the Akismet client."""

import os
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional
from dotenv import load_dotenv

from .client import AkismetClient, resolve_url
from .errors import ConfigurationError
from .transport import Transport


@dataclass
class Config:
    """Configuration settings for an Akismet client."""

    # API
    api_key: str
    blog: str
    base_url: str
    user_agent: str

    # Requests
    timeout: float

    # Logging
    log_level: str

    @classmethod
    def from_env(cls, env_path: str = ".env") -> "Config":
        """
        Load configuration from environment variables and a .env file.

        Args:
            env_path: Path to .env file (default: ".env")

        Returns:
            Config object with loaded settings
        """
        # Load .env file if found; real environment variables take precedence
        if Path(env_path).exists():
            load_dotenv(env_path)

        timeout_str = os.getenv("AKISMET_TIMEOUT", "30")
        try:
            timeout = float(timeout_str)
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid AKISMET_TIMEOUT: {timeout_str!r}"
            ) from e

        return cls(
            api_key=os.getenv("AKISMET_KEY", ""),
            blog=os.getenv("AKISMET_BLOG", ""),
            base_url=os.getenv("AKISMET_BASE_URL", AkismetClient.DEFAULT_BASE_URL),
            user_agent=os.getenv("AKISMET_USER_AGENT", ""),
            timeout=timeout,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )

    def validate(self) -> List[str]:
        """
        Validate configuration and return list of errors.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []

        if not self.api_key:
            errors.append("AKISMET_KEY not set. An Akismet API key is required.")

        try:
            resolve_url(self.base_url, "verify-key")
        except ConfigurationError as e:
            errors.append(str(e))

        valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.log_level.upper() not in valid_log_levels:
            errors.append(
                f"Invalid log level: {self.log_level}. "
                f"Must be one of: {', '.join(valid_log_levels)}"
            )

        if self.timeout <= 0:
            errors.append(
                f"Invalid timeout: {self.timeout}. "
                f"Must be greater than 0"
            )

        if not self.blog:
            logger = logging.getLogger(__name__)
            logger.warning(
                "AKISMET_BLOG not set. Pass the site URL explicitly to verify_key()."
            )

        return errors

    def create_client(self, transport: Optional[Transport] = None) -> AkismetClient:
        """
        Build a client from this configuration.

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        errors = self.validate()
        if errors:
            raise ConfigurationError("; ".join(errors))

        return AkismetClient(
            self.api_key,
            base_url=self.base_url,
            user_agent=self.user_agent or None,
            transport=transport,
        )

    def setup_logging(self):
        """Configure logging based on config settings."""
        logging.basicConfig(
            level=getattr(logging, self.log_level.upper()),
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
