"""Configuration management for the FileVault CLI."""

import json
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional

from common.constants import PREVIEW_HEIGHT, PREVIEW_WIDTH
from common.logging_config import get_logger

logger = get_logger(__name__)


class Config:
    """Manages CLI configuration stored in JSON file."""

    DEFAULT_CONFIG = {
        "endpoint": "https://cloud.appwrite.io/v1",
        "project_id": "",
        "bucket_id": "",
        "share_origin": "http://localhost:8080",
        "timeout": 30,
        "preview_width": PREVIEW_WIDTH,
        "preview_height": PREVIEW_HEIGHT,
    }

    # Environment variables seed the defaults; values in the file win
    ENV_DEFAULTS = {
        "endpoint": "FILEVAULT_ENDPOINT",
        "project_id": "FILEVAULT_PROJECT_ID",
        "bucket_id": "FILEVAULT_BUCKET_ID",
        "share_origin": "FILEVAULT_SHARE_ORIGIN",
    }

    def __init__(self, config_path: Path):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to config JSON file (typically ~/.filevault/config.json)
        """
        self.config_path = config_path
        self.data = self._load()

    def _defaults(self) -> dict:
        config = dict(self.DEFAULT_CONFIG)
        for key, env_var in self.ENV_DEFAULTS.items():
            value = os.environ.get(env_var)
            if value:
                config[key] = value
        return config

    def _ensure_directory(self) -> None:
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
        except PermissionError:
            fallback = Path(tempfile.gettempdir()) / '.filevault' / self.config_path.name
            logger.warning(f"Cannot create {self.config_path.parent}, using {fallback}")
            self.config_path = fallback
            self.config_path.parent.mkdir(parents=True, exist_ok=True)

    def _load(self) -> dict:
        """
        Load configuration, writing a default file on first run.

        An unreadable file is copied to config.json.bak and defaults are used.

        Returns:
            Configuration dictionary
        """
        self._ensure_directory()

        if not self.config_path.exists():
            self.data = self._defaults()
            self.save()
            return self.data

        try:
            with open(self.config_path, 'r') as f:
                stored = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Config file unreadable, falling back to defaults: {e}")
            try:
                shutil.copy(self.config_path, self.config_path.with_suffix('.json.bak'))
            except OSError as copy_error:
                logger.warning(f"Could not back up config file: {copy_error}")
            return self._defaults()

        config = self._defaults()
        config.update(stored)
        return config

    def save(self) -> None:
        """Save current configuration to file."""
        try:
            with open(self.config_path, 'w') as f:
                json.dump(self.data, f, indent=2)
        except IOError as e:
            logger.warning(f"Could not save config: {e}")

    def get_session_cookies(self) -> Optional[str]:
        """
        Get the stored session cookie header value.

        Returns:
            X-Fallback-Cookies value or None if logged out
        """
        return self.data.get('session_cookies')

    def set_session_cookies(self, cookies: Optional[str]) -> None:
        """
        Store or clear the session cookie and save to file.

        Args:
            cookies: X-Fallback-Cookies value, None to clear
        """
        if cookies is None:
            self.data.pop('session_cookies', None)
        else:
            self.data['session_cookies'] = cookies
        self.save()

    def get_endpoint(self) -> str:
        return self.data.get('endpoint', self.DEFAULT_CONFIG['endpoint']).rstrip('/')

    def get_project_id(self) -> str:
        return self.data.get('project_id', '')

    def get_bucket_id(self) -> str:
        return self.data.get('bucket_id', '')

    def get_share_origin(self) -> str:
        """
        Get the origin share links are built on.

        Returns:
            Origin string (e.g., "https://files.example.com")
        """
        return self.data.get('share_origin', self.DEFAULT_CONFIG['share_origin']).rstrip('/')

    def get_timeout(self) -> int:
        """
        Get request timeout in seconds.

        Returns:
            Timeout value in seconds
        """
        return self.data.get('timeout', 30)

    def get_preview_size(self) -> tuple[int, int]:
        return (
            self.data.get('preview_width', PREVIEW_WIDTH),
            self.data.get('preview_height', PREVIEW_HEIGHT),
        )

    def missing_settings(self) -> list[str]:
        """
        List the settings that must be filled in before connecting.

        Returns:
            Names of empty required keys
        """
        return [key for key in ('endpoint', 'project_id', 'bucket_id') if not self.data.get(key)]
