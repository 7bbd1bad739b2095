#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Exception hierarchy for the signing resolver.

Missing property files and missing keystores are not errors; they degrade to
empty sources and the debug signing identity. Everything defined here is fatal
for the configuration pass that raised it.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional, Union


class SigningResolverError(Exception):
    """Base exception for signing resolver operations with structured context."""

    def __init__(
        self,
        message: str,
        *,
        error_code: Optional[str] = None,
        file_path: Optional[Union[str, Path]] = None,
        original_error: Optional[Exception] = None,
        **context: Any,
    ) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.file_path = Path(file_path) if file_path is not None else None
        self.original_error = original_error
        self.context = context

    def __str__(self) -> str:
        parts = [super().__str__()]
        if self.error_code:
            parts.append(f"Code: {self.error_code}")
        if self.file_path:
            parts.append(f"File: {self.file_path}")
        if self.original_error:
            parts.append(f"Cause: {self.original_error}")
        return " | ".join(parts)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for structured logging."""
        return {
            "message": str(self.args[0]) if self.args else "",
            "error_code": self.error_code,
            "file_path": str(self.file_path) if self.file_path else None,
            "original_error": str(self.original_error) if self.original_error else None,
            "context": self.context,
            "exception_type": self.__class__.__name__,
        }


class PropertyFileError(SigningResolverError):
    """Raised when an existing property file cannot be read."""

    pass


class MalformedPropertiesError(SigningResolverError):
    """Raised when a property file has invalid syntax."""

    def __init__(
        self,
        message: str,
        *,
        line_number: Optional[int] = None,
        **kwargs: Any,
    ) -> None:
        kwargs.setdefault("error_code", "MALFORMED_PROPERTIES")
        super().__init__(message, line_number=line_number, **kwargs)
        self.line_number = line_number

    def __str__(self) -> str:
        base = super().__str__()
        if self.line_number is not None:
            base += f" | Line: {self.line_number}"
        return base


class InvalidPropertyError(SigningResolverError):
    """Raised when a recognised property holds a value that cannot be used."""

    def __init__(
        self,
        message: str,
        *,
        key: Optional[str] = None,
        value: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        kwargs.setdefault("error_code", "INVALID_PROPERTY")
        super().__init__(message, key=key, value=value, **kwargs)
        self.key = key
        self.value = value


class KeystoreNotFoundError(SigningResolverError):
    """Raised in strict mode when the release keystore is not available."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        kwargs.setdefault("error_code", "KEYSTORE_NOT_FOUND")
        super().__init__(message, **kwargs)


class SettingsError(SigningResolverError):
    """Raised when the resolver settings file is invalid or cannot be loaded."""

    def __init__(self, message: str, **kwargs: Any) -> None:
        kwargs.setdefault("error_code", "INVALID_SETTINGS")
        super().__init__(message, **kwargs)
