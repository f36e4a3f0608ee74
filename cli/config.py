"""Configuration management for the chunkweave CLI."""

import json
import logging
import os
import shutil
from pathlib import Path
from typing import Optional

from gateway import config as gateway_config
from transfer import config as transfer_config

logger = logging.getLogger(__name__)


class Config:
    """Manages CLI configuration stored in JSON file."""

    DEFAULT_CONFIG = {
        "gateway_url": gateway_config.GATEWAY_URL,
        "upload_url": gateway_config.UPLOAD_URL,
        "graphql_url": gateway_config.GRAPHQL_URL,
        "timeout": gateway_config.REQUEST_TIMEOUT_SECONDS,
        "max_retries": gateway_config.MAX_RETRIES,
        "retry_backoff_multiplier": gateway_config.RETRY_BACKOFF_MULTIPLIER,
        "progress_db_path": transfer_config.PROGRESS_DATABASE_PATH,
        "author": os.environ.get("CHUNKWEAVE_AUTHOR", ""),
    }

    def __init__(self, config_path: Path):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to config JSON file (typically ~/.chunkweave/config.json)
        """
        self.config_path = config_path
        self.data = self._load()

    def _load(self) -> dict:
        """
        Load configuration from file, creating defaults if necessary.

        Returns:
            Configuration dictionary
        """
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    data = json.load(f)
                config = self.DEFAULT_CONFIG.copy()
                config.update(data)
                return config
            except (json.JSONDecodeError, IOError) as e:
                logger.warning(f"Unreadable config at {self.config_path}, using defaults: {e}")
                backup_path = self.config_path.with_suffix('.json.bak')
                try:
                    shutil.copy(self.config_path, backup_path)
                except OSError as copy_error:
                    logger.warning(f"Could not back up config to {backup_path}: {copy_error}")
                return self.DEFAULT_CONFIG.copy()

        config = self.DEFAULT_CONFIG.copy()
        try:
            with open(self.config_path, 'w') as f:
                json.dump(config, f, indent=2)
        except IOError as e:
            logger.warning(f"Could not write default config to {self.config_path}: {e}")
        return config

    def save(self) -> None:
        """Save current configuration to file."""
        try:
            with open(self.config_path, 'w') as f:
                json.dump(self.data, f, indent=2)
        except IOError as e:
            logger.warning(f"Could not save config to {self.config_path}: {e}")

    def get_author(self) -> Optional[str]:
        """
        Get the address used as Author tag on uploads.

        Returns:
            Address string or None if not set
        """
        return self.data.get('author') or None

    def set_author(self, address: str) -> None:
        """
        Set the author address and save to file.

        Args:
            address: Wallet address of the uploader
        """
        self.data['author'] = address
        self.save()

    def get_progress_db_path(self) -> str:
        return self.data.get('progress_db_path', transfer_config.PROGRESS_DATABASE_PATH)

    def get_gateway_settings(self) -> dict:
        """
        Get keyword arguments for GatewayBlobStore.

        Returns:
            Dictionary of URLs, timeout and retry settings
        """
        return {
            'gateway_url': self.data.get('gateway_url', gateway_config.GATEWAY_URL),
            'upload_url': self.data.get('upload_url', gateway_config.UPLOAD_URL),
            'graphql_url': self.data.get('graphql_url', gateway_config.GRAPHQL_URL),
            'timeout': float(self.data.get('timeout', gateway_config.REQUEST_TIMEOUT_SECONDS)),
            'max_retries': int(self.data.get('max_retries', gateway_config.MAX_RETRIES)),
            'retry_backoff_multiplier': float(
                self.data.get('retry_backoff_multiplier', gateway_config.RETRY_BACKOFF_MULTIPLIER)
            ),
        }
