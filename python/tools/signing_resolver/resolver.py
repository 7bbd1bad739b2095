#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Build configuration resolver for the Android application module.

Reads the optional ``local.properties`` and ``key.properties`` files, merges
them with defaults and the injected toolchain values, and decides which signing
identity the release variant uses.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

from loguru import logger

from .exceptions import InvalidPropertyError, KeystoreNotFoundError
from .models import (
    BuildVariantConfig,
    ResolvedBuildConfig,
    SigningIdentity,
    SigningSource,
    ToolchainContext,
    VersionInfo,
)
from .properties import PropertySource, load_properties

if TYPE_CHECKING:
    from .config import ResolverSettings

STORE_FILE_KEY = "storeFile"
KEY_ALIAS_KEY = "keyAlias"
KEY_PASSWORD_KEY = "keyPassword"
STORE_PASSWORD_KEY = "storePassword"

VERSION_CODE_KEY = "flutter.versionCode"
VERSION_NAME_KEY = "flutter.versionName"
DEFAULT_VERSION_CODE = "1"
DEFAULT_VERSION_NAME = "1.0"
INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1
_INT32_PATTERN = re.compile(r"[+-]?[0-9]+")

DEFAULT_LOCAL_PROPERTIES = Path("local.properties")
DEFAULT_KEY_PROPERTIES = Path("android") / "key.properties"
DEFAULT_NAMESPACE = "com.example.myapp"
DEFAULT_APPLICATION_ID = "com.example.doacoesapp"


def signing_identity_from_source(
    source: PropertySource, name: str = "release"
) -> SigningIdentity:
    """Build a signing identity from an already loaded signing property source."""
    if not source.exists:
        return SigningIdentity(name=name)

    store_file: Optional[Path] = None
    store_file_prop = source.get_property(STORE_FILE_KEY)
    if store_file_prop is not None and store_file_prop.strip():
        # relative to the properties file, not the working directory
        candidate = source.directory / store_file_prop
        if candidate.is_file():
            store_file = candidate.resolve()
            logger.debug(f"Keystore for '{name}' found at {store_file}")
        else:
            logger.warning(f"Keystore for '{name}' not found at {candidate}")

    return SigningIdentity(
        name=name,
        store_file=store_file,
        key_alias=source.get_property(KEY_ALIAS_KEY),
        key_password=source.get_property(KEY_PASSWORD_KEY),
        store_password=source.get_property(STORE_PASSWORD_KEY),
    )


def resolve_signing(
    property_file_path: Union[Path, str], name: str = "release"
) -> SigningIdentity:
    """
    Resolve the signing identity described by a signing property file.

    Args:
        property_file_path: Path to ``key.properties``. It may not exist.
        name: Name given to the resulting identity.

    Returns:
        The identity. Every field is ``None`` when the file does not exist, and
        ``store_file`` is ``None`` when the referenced keystore does not exist.

    Raises:
        MalformedPropertiesError: If the property file has invalid syntax.
    """
    return signing_identity_from_source(load_properties(property_file_path), name)


def choose_release_signing(
    resolved: SigningIdentity,
    debug_fallback: SigningIdentity,
    *,
    strict: bool = False,
    source_path: Optional[Path] = None,
) -> BuildVariantConfig:
    """
    Choose the signing identity of the release variant.

    The resolved identity is used when its keystore was found, otherwise the
    toolchain's debug identity signs the release artifact so local and CI builds
    without secrets still produce an installable package.

    Args:
        resolved: Identity read from the signing properties file.
        debug_fallback: Debug identity supplied by the toolchain.
        strict: Fail instead of falling back.
        source_path: Signing properties file ``resolved`` was read from,
            reported in the strict mode error.

    Raises:
        KeystoreNotFoundError: In strict mode, instead of falling back.
    """
    if resolved.has_store_file:
        logger.info(f"Release variant signed with keystore {resolved.store_file}")
        return BuildVariantConfig(
            variant="release",
            signing=resolved,
            source=SigningSource.RELEASE_KEYSTORE,
        )

    if strict:
        raise KeystoreNotFoundError(
            "No release keystore available and debug signing fallback is disabled",
            file_path=source_path,
        )

    logger.warning(
        "No release keystore available, release variant falls back to debug signing. "
        "Store builds must provide a keystore."
    )
    return BuildVariantConfig(
        variant="release",
        signing=debug_fallback,
        source=SigningSource.DEBUG_KEYSTORE,
    )


def load_version_info(local_properties: PropertySource) -> VersionInfo:
    """
    Read the Flutter version code and name from ``local.properties``.

    Raises:
        InvalidPropertyError: If the version code is not an integer.
    """
    raw_code = local_properties.get_property(VERSION_CODE_KEY, DEFAULT_VERSION_CODE)
    version_name = local_properties.get_property(VERSION_NAME_KEY, DEFAULT_VERSION_NAME)

    # same inputs as Kotlin String.toInt(): ASCII digits, optional sign, Int32 range
    version_code = int(raw_code) if _INT32_PATTERN.fullmatch(raw_code) else None
    if version_code is None or not INT32_MIN <= version_code <= INT32_MAX:
        raise InvalidPropertyError(
            f"{VERSION_CODE_KEY} must be a 32-bit integer, got '{raw_code}'",
            key=VERSION_CODE_KEY,
            value=raw_code,
            file_path=local_properties.path,
        )
    return VersionInfo(version_code=version_code, version_name=version_name)


class BuildConfigResolver:
    """
    Resolves the complete build configuration of the application module.

    Each call to :meth:`resolve` reads the property files afresh; nothing is
    cached between calls.

    Attributes:
        toolchain: Injected SDK/NDK versions and debug signing identity.
        project_root: Directory relative paths are resolved against.
        local_properties: Path of the local build properties file.
        key_properties: Path of the signing properties file.
        namespace: Android namespace of the module.
        application_id: Application id of the produced artifact.
        strict: Fail instead of falling back to debug signing.
    """

    def __init__(
        self,
        toolchain: Optional[ToolchainContext] = None,
        *,
        project_root: Union[Path, str] = ".",
        local_properties: Optional[Union[Path, str]] = None,
        key_properties: Optional[Union[Path, str]] = None,
        namespace: str = DEFAULT_NAMESPACE,
        application_id: str = DEFAULT_APPLICATION_ID,
        strict: bool = False,
    ) -> None:
        self.toolchain = toolchain or ToolchainContext()
        self.project_root = Path(project_root)
        self.local_properties = self.project_root / (
            local_properties if local_properties is not None else DEFAULT_LOCAL_PROPERTIES
        )
        self.key_properties = self.project_root / (
            key_properties if key_properties is not None else DEFAULT_KEY_PROPERTIES
        )
        self.namespace = namespace
        self.application_id = application_id
        self.strict = strict

        logger.debug(
            f"Initialized {self.__class__.__name__}",
            extra={
                "project_root": str(self.project_root),
                "local_properties": str(self.local_properties),
                "key_properties": str(self.key_properties),
                "strict": self.strict,
            },
        )

    @classmethod
    def from_settings(cls, settings: ResolverSettings) -> BuildConfigResolver:
        """Create a resolver from a validated settings object."""
        return cls(
            settings.toolchain.to_context(),
            project_root=settings.project_root,
            local_properties=settings.local_properties,
            key_properties=settings.key_properties,
            namespace=settings.namespace,
            application_id=settings.application_id,
            strict=settings.strict,
        )

    def resolve_signing(self) -> SigningIdentity:
        """Resolve the release signing identity from the signing properties file."""
        return resolve_signing(self.key_properties, name="release")

    def resolve(self) -> ResolvedBuildConfig:
        """
        Resolve the full build configuration in a single pass.

        Raises:
            MalformedPropertiesError: If either property file has invalid syntax.
            InvalidPropertyError: If the version code is not an integer.
            KeystoreNotFoundError: In strict mode without a release keystore.
        """
        logger.debug(f"Resolving build configuration under {self.project_root}")
        local = load_properties(self.local_properties)
        version = load_version_info(local)

        release_identity = self.resolve_signing()
        debug_identity = self.toolchain.debug_signing
        release = choose_release_signing(
            release_identity,
            debug_identity,
            strict=self.strict,
            source_path=self.key_properties,
        )
        debug = BuildVariantConfig(
            variant="debug",
            signing=debug_identity,
            source=SigningSource.DEBUG_KEYSTORE,
        )

        return ResolvedBuildConfig(
            namespace=self.namespace,
            application_id=self.application_id,
            toolchain=self.toolchain,
            version=version,
            signing_configs={"debug": debug_identity, "release": release_identity},
            build_types={"debug": debug, "release": release},
            local_properties=self.local_properties,
            key_properties=self.key_properties,
        )
