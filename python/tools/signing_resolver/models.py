#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Data models for the signing resolver.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

SECRET_MASK = "********"

DEFAULT_COMPILE_SDK = 35
DEFAULT_MIN_SDK = 21
DEFAULT_TARGET_SDK = 35
DEFAULT_NDK_VERSION = "27.0.12077973"
DEFAULT_JAVA_VERSION = "11"

# generated by the Android SDK on the first debug build
DEBUG_KEYSTORE = Path("~/.android/debug.keystore")
DEBUG_KEY_ALIAS = "androiddebugkey"
DEBUG_PASSWORD = "android"


class SigningSource(str, Enum):
    """Where the signing identity of a build variant came from."""

    RELEASE_KEYSTORE = "release_keystore"
    DEBUG_KEYSTORE = "debug_keystore"


def _mask(value: Optional[str], show_secrets: bool) -> Optional[str]:
    if value is None or show_secrets:
        return value
    return SECRET_MASK


@dataclass(frozen=True)
class SigningIdentity:
    """
    Credential material used to sign a build artifact.

    Every field is optional. ``None`` means the value was not supplied, which is
    distinct from an empty string. ``store_file`` is only set when the keystore
    existed when the identity was resolved.
    """

    name: str = "release"
    store_file: Optional[Path] = None
    key_alias: Optional[str] = None
    key_password: Optional[str] = field(default=None, repr=False)
    store_password: Optional[str] = field(default=None, repr=False)

    @property
    def has_store_file(self) -> bool:
        return self.store_file is not None

    @property
    def is_empty(self) -> bool:
        """True when no field at all was supplied."""
        return all(
            value is None
            for value in (
                self.store_file,
                self.key_alias,
                self.key_password,
                self.store_password,
            )
        )

    def to_dict(self, show_secrets: bool = False) -> Dict[str, Any]:
        """Convert to a dictionary, masking passwords unless requested."""
        return {
            "name": self.name,
            "store_file": str(self.store_file) if self.store_file else None,
            "key_alias": self.key_alias,
            "key_password": _mask(self.key_password, show_secrets),
            "store_password": _mask(self.store_password, show_secrets),
        }


def default_debug_identity() -> SigningIdentity:
    """The debug identity every Android SDK installation generates on first build."""
    return SigningIdentity(
        name="debug",
        store_file=DEBUG_KEYSTORE.expanduser(),
        key_alias=DEBUG_KEY_ALIAS,
        key_password=DEBUG_PASSWORD,
        store_password=DEBUG_PASSWORD,
    )


@dataclass(frozen=True)
class ToolchainContext:
    """Values supplied by the Android/Flutter toolchain rather than by this project."""

    compile_sdk_version: int = DEFAULT_COMPILE_SDK
    min_sdk_version: int = DEFAULT_MIN_SDK
    target_sdk_version: int = DEFAULT_TARGET_SDK
    ndk_version: str = DEFAULT_NDK_VERSION
    debug_signing: SigningIdentity = field(default_factory=default_debug_identity)


@dataclass(frozen=True)
class BuildVariantConfig:
    """Signing choice resolved for one build variant."""

    variant: str
    signing: SigningIdentity
    source: SigningSource

    @property
    def uses_debug_signing(self) -> bool:
        return self.source is SigningSource.DEBUG_KEYSTORE

    def to_dict(self, show_secrets: bool = False) -> Dict[str, Any]:
        return {
            "variant": self.variant,
            "source": self.source.value,
            "signing": self.signing.to_dict(show_secrets),
        }


@dataclass(frozen=True)
class VersionInfo:
    """Version code and name taken from ``local.properties``."""

    version_code: int = 1
    version_name: str = "1.0"


@dataclass(frozen=True)
class ResolvedBuildConfig:
    """Complete configuration for the Android application module."""

    namespace: str
    application_id: str
    toolchain: ToolchainContext
    version: VersionInfo
    signing_configs: Dict[str, SigningIdentity]
    build_types: Dict[str, BuildVariantConfig]
    java_version: str = DEFAULT_JAVA_VERSION
    local_properties: Optional[Path] = None
    key_properties: Optional[Path] = None

    @property
    def release(self) -> BuildVariantConfig:
        return self.build_types["release"]

    def to_dict(self, show_secrets: bool = False) -> Dict[str, Any]:
        """Convert to a JSON-serialisable dictionary."""
        return {
            "namespace": self.namespace,
            "application_id": self.application_id,
            "compile_sdk": self.toolchain.compile_sdk_version,
            "min_sdk": self.toolchain.min_sdk_version,
            "target_sdk": self.toolchain.target_sdk_version,
            "ndk_version": self.toolchain.ndk_version,
            "java_version": self.java_version,
            "version_code": self.version.version_code,
            "version_name": self.version.version_name,
            "local_properties": str(self.local_properties) if self.local_properties else None,
            "key_properties": str(self.key_properties) if self.key_properties else None,
            "signing_configs": {
                name: identity.to_dict(show_secrets)
                for name, identity in self.signing_configs.items()
            },
            "build_types": {
                name: variant.to_dict(show_secrets)
                for name, variant in self.build_types.items()
            },
        }
