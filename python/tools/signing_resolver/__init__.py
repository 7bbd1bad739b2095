"""
Android Signing Configuration Resolver.

This package resolves the build configuration of a Flutter Android application
module: local build properties, signing secrets, injected toolchain versions and
the signing identity used for release builds.
"""

from .api import SigningResolverAPI
from .config import ResolverSettings, ToolchainSettings, load_settings
from .exceptions import (
    InvalidPropertyError, KeystoreNotFoundError, MalformedPropertiesError,
    PropertyFileError, SettingsError, SigningResolverError
)
from .models import (
    BuildVariantConfig, ResolvedBuildConfig, SigningIdentity, SigningSource,
    ToolchainContext, VersionInfo
)
from .properties import PropertySource, load_properties, parse_properties
from .resolver import (
    BuildConfigResolver, choose_release_signing, load_version_info,
    resolve_signing
)
import sys
from loguru import logger

# Module metadata
__version__ = "1.0.0"
__author__ = "Max Qian"
__license__ = "GPL-3.0-or-later"

# Configure default logger
logger.configure(handlers=[
    {
        "sink": sys.stderr,
        "format": "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
        "level": "INFO"
    }
])


def get_tool_info() -> dict:
    """
    Get metadata and information about the signing_resolver module.

    Returns:
        Dictionary containing module metadata, capabilities, and available functions.
    """
    return {
        "name": "signing_resolver",
        "version": __version__,
        "description": "Resolver for Flutter Android build properties and release signing configuration",
        "author": __author__,
        "license": __license__,
        "supported": True,
        "platform": ["windows", "linux", "macos"],
        "functions": [
            "load_properties",
            "resolve_signing",
            "choose_release_signing",
            "load_version_info",
            "load_settings",
        ],
        "requirements": [
            "loguru",
            "pydantic",
            "typer",
            "rich"
        ],
        "capabilities": [
            "Parse Java .properties files",
            "Resolve keystores relative to the signing properties file",
            "Fall back to debug signing when no release keystore exists",
            "Optional strict mode failing without a release keystore",
            "Inject SDK and NDK versions from settings"
        ],
        "classes": {
            "BuildConfigResolver": "Single-pass resolver for the application module configuration",
            "SigningResolverAPI": "Dictionary based interface for embedding callers",
            "SigningIdentity": "Keystore path, alias and passwords",
            "BuildVariantConfig": "Signing choice of a build variant",
            "ToolchainContext": "Injected SDK/NDK versions and debug identity",
            "ResolverSettings": "Pydantic settings loaded from TOML"
        }
    }


__all__ = [
    'PropertySource', 'load_properties', 'parse_properties',
    'SigningIdentity', 'BuildVariantConfig', 'SigningSource',
    'ToolchainContext', 'VersionInfo', 'ResolvedBuildConfig',
    'BuildConfigResolver', 'resolve_signing', 'choose_release_signing',
    'load_version_info',
    'ResolverSettings', 'ToolchainSettings', 'load_settings',
    'SigningResolverError', 'PropertyFileError', 'MalformedPropertiesError',
    'InvalidPropertyError', 'KeystoreNotFoundError', 'SettingsError',
    'SigningResolverAPI', 'get_tool_info'
]
