"""
API key management for DocTrans-LLMs.

Keys are looked up in order:
1. Environment variables (preferred for CI/production)
2. OS keychain via keyring (secure local storage)
3. Local config file (~/.doctrans/keys.json)

Keys are only resolved at the edges (CLI); the resolved value is passed to
providers through ProviderConfig, never read globally.

Usage:
    from doctrans_llms.keys import KeyManager

    km = KeyManager()
    km.set_key("openai", "sk-...")
    config = provider_config("openai")
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from doctrans_llms.config import CONFIG_DIR
from doctrans_llms.translate.llm import ProviderConfig

logger = logging.getLogger(__name__)

# Supported services and their env var names
SERVICES = {
    "openai": "OPENAI_API_KEY",
    "deepseek": "DEEPSEEK_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}

# Backend aliases that share a service key
SERVICE_ALIASES = {
    "gpt": "openai",
    "ds": "deepseek",
    "claude": "anthropic",
}


@dataclass
class KeyInfo:
    """Information about an API key."""
    service: str
    is_set: bool
    source: str  # 'env', 'keyring', 'config', 'none'
    masked_value: str  # e.g., "sk-a...wxyz"


def service_for_backend(backend: str) -> str:
    backend = backend.lower()
    return SERVICE_ALIASES.get(backend, backend)


class KeyManager:
    """Manage API keys.

    Priority order for key retrieval:
    1. Environment variable
    2. OS keychain (via keyring)
    3. Local config file
    """

    SERVICE_NAME = "DocTrans-LLMs"

    def __init__(self, config_dir: Path | None = None):
        self.config_dir = Path(config_dir) if config_dir else CONFIG_DIR
        self.config_file = self.config_dir / "keys.json"
        self._keyring = self._load_keyring()

    def _load_keyring(self):
        """Return the keyring module if a usable backend is configured."""
        try:
            import keyring
            from keyring.backends.fail import Keyring as FailKeyring
        except ImportError:
            return None
        if isinstance(keyring.get_keyring(), FailKeyring):
            logger.debug("No keyring backend available")
            return None
        return keyring

    def _read_config(self) -> dict:
        if not self.config_file.exists():
            return {}
        try:
            return json.loads(self.config_file.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable key file %s: %s", self.config_file, e)
            return {}

    def _write_config(self, config: dict) -> None:
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.config_file.write_text(json.dumps(config, indent=2), encoding="utf-8")
        self.config_file.chmod(0o600)  # Restrict permissions

    def _keyring_get(self, service: str) -> Optional[str]:
        if self._keyring is None:
            return None
        from keyring.errors import KeyringError
        try:
            return self._keyring.get_password(self.SERVICE_NAME, service)
        except KeyringError as e:
            logger.debug("Keyring lookup for %s failed: %s", service, e)
            return None

    def _lookup(self, service: str) -> tuple[Optional[str], str]:
        env_var = SERVICES.get(service, f"{service.upper()}_API_KEY")
        if env_val := os.getenv(env_var):
            return env_val, "env"
        if key := self._keyring_get(service):
            return key, "keyring"
        if key := self._read_config().get(service):
            return key, "config"
        return None, "none"

    def get_key(self, service: str) -> Optional[str]:
        """Get API key for a service.

        Args:
            service: Service name (openai, deepseek, anthropic)

        Returns:
            API key string or None if not found
        """
        key, _ = self._lookup(service_for_backend(service))
        return key

    def set_key(self, service: str, key: str, use_keyring: bool = True) -> str:
        """Store API key for a service.

        Returns:
            Storage location used ('keyring' or 'config')
        """
        service = service_for_backend(service)

        if use_keyring and self._keyring is not None:
            from keyring.errors import KeyringError
            try:
                self._keyring.set_password(self.SERVICE_NAME, service, key)
                return "keyring"
            except KeyringError as e:
                logger.warning("Keyring unavailable, storing key in %s: %s", self.config_file, e)

        config = self._read_config()
        config[service] = key
        self._write_config(config)
        return "config"

    def delete_key(self, service: str) -> bool:
        """Delete stored API key for a service."""
        service = service_for_backend(service)
        deleted = False

        if self._keyring is not None:
            from keyring.errors import PasswordDeleteError
            try:
                self._keyring.delete_password(self.SERVICE_NAME, service)
                deleted = True
            except PasswordDeleteError:
                pass  # nothing stored

        config = self._read_config()
        if service in config:
            del config[service]
            self._write_config(config)
            deleted = True

        return deleted

    def get_key_info(self, service: str) -> KeyInfo:
        """Get information about a stored key."""
        service = service_for_backend(service)
        key, source = self._lookup(service)
        return KeyInfo(
            service=service,
            is_set=key is not None,
            source=source,
            masked_value=mask_key(key) if key else "",
        )

    def list_keys(self) -> list[KeyInfo]:
        """List all configured services and their key status."""
        return [self.get_key_info(service) for service in SERVICES]


def mask_key(key: str) -> str:
    """Mask a key for display (show first 4 and last 4 chars)."""
    if len(key) <= 12:
        return "*" * len(key)
    return f"{key[:4]}...{key[-4:]}"


def require_key(service: str, manager: KeyManager | None = None) -> str:
    """Get API key or raise error if not found."""
    manager = manager or KeyManager()
    key = manager.get_key(service)
    if not key:
        service = service_for_backend(service)
        raise ValueError(
            f"API key for '{service}' not found. "
            f"Set {SERVICES.get(service, service.upper() + '_API_KEY')} environment variable "
            f"or run: doctrans keys set {service}"
        )
    return key


def provider_config(
    backend: str,
    model: Optional[str] = None,
    timeout: Optional[float] = None,
    manager: KeyManager | None = None,
) -> ProviderConfig:
    """Build a ProviderConfig carrying the resolved key for a backend."""
    config = ProviderConfig()
    if service_for_backend(backend) in SERVICES:
        config.api_key = require_key(backend, manager)
    if model:
        config.model = model
    if timeout is not None:
        config.timeout = timeout
    return config
