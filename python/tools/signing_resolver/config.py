#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Settings for the signing resolver.

Settings are read from a TOML file and validated with Pydantic v2. They say
where the property files live, which toolchain values to inject and whether a
missing release keystore is fatal.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any, Optional, Union

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .exceptions import SettingsError
from .models import (
    DEBUG_KEY_ALIAS,
    DEBUG_KEYSTORE,
    DEBUG_PASSWORD,
    DEFAULT_COMPILE_SDK,
    DEFAULT_MIN_SDK,
    DEFAULT_NDK_VERSION,
    DEFAULT_TARGET_SDK,
    SigningIdentity,
    ToolchainContext,
)
from .resolver import (
    DEFAULT_APPLICATION_ID,
    DEFAULT_KEY_PROPERTIES,
    DEFAULT_LOCAL_PROPERTIES,
    DEFAULT_NAMESPACE,
)

DEFAULT_SETTINGS_FILE = Path("signing_resolver.toml")

_PACKAGE_NAME_PATTERN = r"^[A-Za-z][A-Za-z0-9_]*(\.[A-Za-z][A-Za-z0-9_]*)+$"


class DebugSigningSettings(BaseModel):
    """Debug signing identity supplied by the toolchain."""

    # passwords are taken verbatim, no whitespace stripping here
    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    store_file: Path = Field(default=DEBUG_KEYSTORE, description="Debug keystore")
    key_alias: Optional[str] = Field(default=DEBUG_KEY_ALIAS, description="Key alias")
    key_password: Optional[str] = Field(default=DEBUG_PASSWORD, description="Key password")
    store_password: Optional[str] = Field(
        default=DEBUG_PASSWORD, description="Keystore password"
    )

    def to_identity(self) -> SigningIdentity:
        return SigningIdentity(
            name="debug",
            store_file=self.store_file.expanduser(),
            key_alias=self.key_alias,
            key_password=self.key_password,
            store_password=self.store_password,
        )


class ToolchainSettings(BaseModel):
    """SDK and NDK versions normally provided by the Flutter Gradle plugin."""

    model_config = ConfigDict(
        extra="forbid", validate_assignment=True, str_strip_whitespace=True
    )

    compile_sdk_version: int = Field(default=DEFAULT_COMPILE_SDK, ge=1)
    min_sdk_version: int = Field(default=DEFAULT_MIN_SDK, ge=1)
    target_sdk_version: int = Field(default=DEFAULT_TARGET_SDK, ge=1)
    ndk_version: str = Field(default=DEFAULT_NDK_VERSION, min_length=1)
    debug_signing: DebugSigningSettings = Field(default_factory=DebugSigningSettings)

    @model_validator(mode="after")
    def validate_sdk_range(self) -> ToolchainSettings:
        if self.min_sdk_version > self.target_sdk_version:
            raise ValueError(
                f"min_sdk_version ({self.min_sdk_version}) cannot exceed "
                f"target_sdk_version ({self.target_sdk_version})"
            )
        if self.target_sdk_version > self.compile_sdk_version:
            logger.warning(
                f"target_sdk_version {self.target_sdk_version} is newer than "
                f"compile_sdk_version {self.compile_sdk_version}"
            )
        return self

    def to_context(self) -> ToolchainContext:
        return ToolchainContext(
            compile_sdk_version=self.compile_sdk_version,
            min_sdk_version=self.min_sdk_version,
            target_sdk_version=self.target_sdk_version,
            ndk_version=self.ndk_version,
            debug_signing=self.debug_signing.to_identity(),
        )


class ResolverSettings(BaseModel):
    """Complete resolver settings."""

    model_config = ConfigDict(
        extra="forbid", validate_assignment=True, str_strip_whitespace=True
    )

    project_root: Path = Field(default=Path("."), description="Flutter project root")
    local_properties: Path = Field(
        default=DEFAULT_LOCAL_PROPERTIES,
        description="Local build properties, relative to the project root",
    )
    key_properties: Path = Field(
        default=DEFAULT_KEY_PROPERTIES,
        description="Signing properties, relative to the project root",
    )
    namespace: str = Field(default=DEFAULT_NAMESPACE, pattern=_PACKAGE_NAME_PATTERN)
    application_id: str = Field(
        default=DEFAULT_APPLICATION_ID, pattern=_PACKAGE_NAME_PATTERN
    )
    strict: bool = Field(
        default=False, description="Fail instead of falling back to debug signing"
    )
    toolchain: ToolchainSettings = Field(default_factory=ToolchainSettings)

    def with_overrides(self, **overrides: Any) -> ResolverSettings:
        """Return a validated copy with the non-None overrides applied."""
        updates = {k: v for k, v in overrides.items() if v is not None}
        if not updates:
            return self
        try:
            return ResolverSettings.model_validate({**self.model_dump(), **updates})
        except ValidationError as e:
            raise SettingsError(f"Invalid settings override: {e}", original_error=e) from e


def load_settings(config_path: Optional[Union[Path, str]] = None) -> ResolverSettings:
    """
    Load resolver settings from a TOML file.

    A missing file yields the defaults. A relative ``project_root`` or debug
    ``store_file`` is resolved against the directory containing the settings file.

    Raises:
        SettingsError: If the file cannot be read, parsed or validated.
    """
    path = Path(config_path) if config_path is not None else DEFAULT_SETTINGS_FILE
    if not path.exists():
        logger.debug(f"Settings file not found, using defaults: {path}")
        return ResolverSettings()

    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise SettingsError(
            f"Invalid TOML in settings file: {e}", file_path=path, original_error=e
        ) from e
    except OSError as e:
        raise SettingsError(
            f"Failed to read settings file: {e}", file_path=path, original_error=e
        ) from e

    try:
        settings = ResolverSettings.model_validate(data)
    except ValidationError as e:
        logger.error(f"Invalid settings in {path}: {e}")
        raise SettingsError(
            f"Invalid settings: {e}", file_path=path, original_error=e
        ) from e

    if not settings.project_root.is_absolute():
        settings = settings.with_overrides(project_root=path.parent / settings.project_root)

    debug_signing = settings.toolchain.debug_signing
    debug_store_file = debug_signing.store_file.expanduser()
    if not debug_store_file.is_absolute():
        debug_signing.store_file = path.parent / debug_store_file

    logger.info(f"Settings loaded from {path}")
    return settings
