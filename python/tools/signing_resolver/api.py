#!/usr/bin/env python3
"""
Signing resolver API.

Dictionary based interface for callers embedding the resolver, such as build
scripts or other tools that exchange plain data.
"""

from typing import Any, Dict, Optional

from loguru import logger

from .config import load_settings
from .exceptions import SigningResolverError
from .resolver import BuildConfigResolver, resolve_signing


class SigningResolverAPI:
    """
    Stable facade over the resolver returning plain dictionaries.

    Resolver errors are reported as ``{"success": False, ...}`` instead of being
    raised, so callers get no partial configuration and the error details.
    """

    def __init__(self, show_secrets: bool = False) -> None:
        self.show_secrets = show_secrets

    @staticmethod
    def _handle_exception(e: SigningResolverError, operation: str) -> Dict[str, Any]:
        """Centralized exception handling for API methods."""
        logger.error(f"Error during {operation}: {e}")
        return {"success": False, "error": str(e), "details": e.to_dict()}

    def resolve_signing(self, key_properties: str) -> Dict[str, Any]:
        """Resolve one signing properties file."""
        try:
            identity = resolve_signing(key_properties)
            return {
                "success": True,
                "usable": identity.has_store_file,
                "identity": identity.to_dict(self.show_secrets),
            }
        except SigningResolverError as e:
            return self._handle_exception(e, "signing resolution")

    def resolve_config(
        self,
        config_path: Optional[str] = None,
        **overrides: Any,
    ) -> Dict[str, Any]:
        """
        Resolve the full build configuration.

        Args:
            config_path: Settings file, defaults are used when it does not exist.
            **overrides: Settings fields overriding the file, e.g. ``project_root``.
        """
        try:
            settings = load_settings(config_path).with_overrides(**overrides)
            resolved = BuildConfigResolver.from_settings(settings).resolve()
            return {"success": True, "config": resolved.to_dict(self.show_secrets)}
        except SigningResolverError as e:
            return self._handle_exception(e, "build configuration resolution")
