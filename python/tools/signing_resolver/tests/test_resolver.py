#!/usr/bin/env python3
"""
Tests for signing resolution and the build configuration resolver.
"""

from pathlib import Path

import pytest

from signing_resolver.exceptions import (
    InvalidPropertyError,
    KeystoreNotFoundError,
    MalformedPropertiesError,
)
from signing_resolver.models import (
    SigningIdentity,
    SigningSource,
    ToolchainContext,
)
from signing_resolver.properties import PropertySource, parse_properties
from signing_resolver.resolver import (
    BuildConfigResolver,
    choose_release_signing,
    load_version_info,
    resolve_signing,
)

KEY_PROPERTIES = """\
storeFile=../keys/app.keystore
keyAlias=upload
keyPassword=pw1
storePassword=pw2
"""


@pytest.fixture
def debug_identity(tmp_path: Path) -> SigningIdentity:
    return SigningIdentity(
        name="debug",
        store_file=tmp_path / "debug.keystore",
        key_alias="androiddebugkey",
        key_password="android",
        store_password="android",
    )


@pytest.fixture
def toolchain(debug_identity: SigningIdentity) -> ToolchainContext:
    return ToolchainContext(
        compile_sdk_version=34,
        min_sdk_version=23,
        target_sdk_version=34,
        ndk_version="26.1.10909125",
        debug_signing=debug_identity,
    )


class TestResolveSigning:
    """Tests for resolve_signing."""

    @pytest.mark.parametrize(
        "relative", ["key.properties", "android/key.properties", "no/such/dir/key.properties"]
    )
    def test_missing_file_gives_empty_identity(self, tmp_path: Path, relative: str):
        identity = resolve_signing(tmp_path / relative)
        assert identity.is_empty
        assert identity.store_file is None
        assert identity.key_alias is None
        assert identity.key_password is None
        assert identity.store_password is None

    def test_store_file_next_to_properties(self, tmp_path: Path, write_file):
        keystore = tmp_path / "android" / "release.keystore"
        write_file(keystore, "binary")
        properties = write_file(tmp_path / "android" / "key.properties", "storeFile=release.keystore\n")

        identity = resolve_signing(properties)

        assert identity.store_file == keystore.resolve()
        assert identity.store_file.is_file()

    def test_store_file_resolved_against_properties_dir(
        self, project_dir: Path, write_file, monkeypatch
    ):
        """The working directory plays no part in resolving storeFile."""
        write_file(project_dir / "android" / "release.keystore", "binary")
        write_file(project_dir / "release.keystore", "decoy")
        properties = write_file(
            project_dir / "android" / "key.properties", "storeFile=release.keystore\n"
        )
        monkeypatch.chdir(project_dir)

        identity = resolve_signing(properties)

        assert identity.store_file == (project_dir / "android" / "release.keystore").resolve()

    def test_missing_keystore_keeps_other_fields(self, project_dir: Path, write_file):
        properties = write_file(project_dir / "android" / "key.properties", KEY_PROPERTIES)

        identity = resolve_signing(properties)

        assert identity.store_file is None
        assert identity.key_alias == "upload"
        assert identity.key_password == "pw1"
        assert identity.store_password == "pw2"

    def test_full_identity(self, project_dir: Path, keystore: Path, write_file):
        properties = write_file(project_dir / "android" / "key.properties", KEY_PROPERTIES)

        identity = resolve_signing(properties)

        assert identity.store_file == keystore.resolve()
        assert identity.key_alias == "upload"
        assert identity.key_password == "pw1"
        assert identity.store_password == "pw2"

    @pytest.mark.parametrize("value", ["", "   "])
    def test_blank_store_file_is_absent(self, tmp_path: Path, write_file, value: str):
        properties = write_file(tmp_path / "key.properties", f"storeFile={value}\nkeyAlias=\n")

        identity = resolve_signing(properties)

        assert identity.store_file is None
        # an empty alias is a value, not an absence
        assert identity.key_alias == ""

    def test_directory_is_not_a_keystore(self, tmp_path: Path, write_file):
        (tmp_path / "keys").mkdir()
        properties = write_file(tmp_path / "key.properties", "storeFile=keys\n")
        assert resolve_signing(properties).store_file is None

    def test_absolute_store_file(self, tmp_path: Path, write_file):
        keystore = write_file(tmp_path / "elsewhere" / "upload.jks", "binary")
        properties = write_file(
            tmp_path / "android" / "key.properties", f"storeFile={keystore.as_posix()}\n"
        )
        assert resolve_signing(properties).store_file == keystore.resolve()

    def test_idempotent(self, project_dir: Path, keystore: Path, write_file):
        properties = write_file(project_dir / "android" / "key.properties", KEY_PROPERTIES)
        assert resolve_signing(properties) == resolve_signing(properties)

    def test_malformed_file_raises(self, tmp_path: Path, write_file):
        properties = write_file(tmp_path / "key.properties", "keyAlias=\\uXYZW\n")
        with pytest.raises(MalformedPropertiesError):
            resolve_signing(properties)

    def test_passwords_not_in_repr(self, project_dir: Path, write_file):
        properties = write_file(project_dir / "android" / "key.properties", KEY_PROPERTIES)
        text = repr(resolve_signing(properties))
        assert "pw1" not in text
        assert "pw2" not in text


class TestChooseReleaseSigning:
    """Tests for choose_release_signing over every field combination."""

    @pytest.mark.parametrize("with_store_file", [True, False])
    @pytest.mark.parametrize("with_other_fields", [True, False])
    def test_selection(
        self,
        tmp_path: Path,
        debug_identity: SigningIdentity,
        with_store_file: bool,
        with_other_fields: bool,
    ):
        resolved = SigningIdentity(
            store_file=tmp_path / "upload.jks" if with_store_file else None,
            key_alias="upload" if with_other_fields else None,
            key_password="pw1" if with_other_fields else None,
            store_password="pw2" if with_other_fields else None,
        )

        variant = choose_release_signing(resolved, debug_identity)

        assert variant.variant == "release"
        if with_store_file:
            assert variant.signing is resolved
            assert variant.source is SigningSource.RELEASE_KEYSTORE
            assert not variant.uses_debug_signing
        else:
            assert variant.signing is debug_identity
            assert variant.source is SigningSource.DEBUG_KEYSTORE
            assert variant.uses_debug_signing

    def test_fallback_is_logged(self, debug_identity: SigningIdentity, log_messages):
        choose_release_signing(SigningIdentity(), debug_identity)
        assert any("falls back to debug signing" in message for message in log_messages)

    def test_strict_raises_without_keystore(self, debug_identity: SigningIdentity):
        with pytest.raises(KeystoreNotFoundError) as exc_info:
            choose_release_signing(SigningIdentity(key_alias="upload"), debug_identity, strict=True)
        assert exc_info.value.error_code == "KEYSTORE_NOT_FOUND"

    def test_strict_error_names_signing_file(
        self, tmp_path: Path, debug_identity: SigningIdentity
    ):
        key_properties = tmp_path / "key.properties"
        with pytest.raises(KeystoreNotFoundError) as exc_info:
            choose_release_signing(
                SigningIdentity(), debug_identity, strict=True, source_path=key_properties
            )
        assert exc_info.value.file_path == key_properties
        assert exc_info.value.to_dict()["file_path"] == str(key_properties)

    def test_strict_accepts_keystore(self, tmp_path: Path, debug_identity: SigningIdentity):
        resolved = SigningIdentity(store_file=tmp_path / "upload.jks")
        variant = choose_release_signing(resolved, debug_identity, strict=True)
        assert variant.signing is resolved


class TestVersionInfo:
    def test_defaults(self):
        version = load_version_info(PropertySource())
        assert version.version_code == 1
        assert version.version_name == "1.0"

    def test_values(self):
        source = PropertySource({"flutter.versionCode": "42", "flutter.versionName": "3.2.1"})
        version = load_version_info(source)
        assert version.version_code == 42
        assert version.version_name == "3.2.1"

    def test_invalid_version_code(self):
        source = PropertySource({"flutter.versionCode": "1.0.3"}, path=Path("local.properties"))
        with pytest.raises(InvalidPropertyError) as exc_info:
            load_version_info(source)
        assert exc_info.value.key == "flutter.versionCode"
        assert exc_info.value.file_path == Path("local.properties")

    @pytest.mark.parametrize(
        "raw", ["1_0", "12 ", "\u0665", "3000000000", "-2147483649", "", "+", "0x10"]
    )
    def test_rejects_what_kotlin_to_int_rejects(self, raw: str):
        source = PropertySource(parse_properties(f"flutter.versionCode={raw}\n"))
        with pytest.raises(InvalidPropertyError) as exc_info:
            load_version_info(source)
        assert exc_info.value.value == raw

    @pytest.mark.parametrize(
        "raw, expected",
        [("2147483647", 2147483647), ("-2147483648", -2147483648), ("+5", 5), ("007", 7)],
    )
    def test_int32_boundaries(self, raw: str, expected: int):
        source = PropertySource({"flutter.versionCode": raw})
        assert load_version_info(source).version_code == expected


class TestBuildConfigResolver:
    def test_full_resolution(
        self, project_dir: Path, keystore: Path, write_file, toolchain: ToolchainContext
    ):
        write_file(project_dir / "android" / "key.properties", KEY_PROPERTIES)
        write_file(
            project_dir / "local.properties",
            "sdk.dir=/opt/android\nflutter.versionCode=12\nflutter.versionName=1.4.0\n",
        )
        resolver = BuildConfigResolver(
            toolchain,
            project_root=project_dir,
            namespace="com.example.myapp",
            application_id="com.example.doacoesapp",
        )

        config = resolver.resolve()

        assert config.namespace == "com.example.myapp"
        assert config.application_id == "com.example.doacoesapp"
        assert config.toolchain.compile_sdk_version == 34
        assert config.toolchain.min_sdk_version == 23
        assert config.java_version == "11"
        assert config.version.version_code == 12
        assert config.version.version_name == "1.4.0"
        assert config.release.source is SigningSource.RELEASE_KEYSTORE
        assert config.release.signing.store_file == keystore.resolve()
        assert config.signing_configs["debug"] is toolchain.debug_signing
        assert config.build_types["debug"].signing is toolchain.debug_signing

    def test_without_any_files(self, project_dir: Path, toolchain: ToolchainContext):
        config = BuildConfigResolver(toolchain, project_root=project_dir).resolve()

        assert config.version.version_code == 1
        assert config.version.version_name == "1.0"
        assert config.release.signing is toolchain.debug_signing
        assert config.release.uses_debug_signing
        assert config.signing_configs["release"].is_empty
        assert config.namespace == "com.example.myapp"
        assert config.application_id == "com.example.doacoesapp"

    def test_absent_signing_file_always_falls_back(
        self, project_dir: Path, keystore: Path, write_file, toolchain: ToolchainContext
    ):
        """A keystore on disk is ignored when no signing file points to it."""
        write_file(project_dir / "local.properties", "flutter.versionCode=3\n")
        config = BuildConfigResolver(toolchain, project_root=project_dir).resolve()
        assert config.release.signing is toolchain.debug_signing

    def test_custom_paths(self, project_dir: Path, keystore: Path, write_file, toolchain):
        write_file(project_dir / "secrets" / "signing.properties", "storeFile=../keys/app.keystore\n")
        resolver = BuildConfigResolver(
            toolchain,
            project_root=project_dir,
            key_properties="secrets/signing.properties",
        )
        assert resolver.resolve().release.source is SigningSource.RELEASE_KEYSTORE

    def test_malformed_local_properties_produces_nothing(
        self, project_dir: Path, write_file, toolchain
    ):
        write_file(project_dir / "local.properties", "flutter.versionName=\\u00\n")
        with pytest.raises(MalformedPropertiesError):
            BuildConfigResolver(toolchain, project_root=project_dir).resolve()

    def test_strict_mode(self, project_dir: Path, toolchain):
        resolver = BuildConfigResolver(toolchain, project_root=project_dir, strict=True)
        with pytest.raises(KeystoreNotFoundError) as exc_info:
            resolver.resolve()
        assert exc_info.value.file_path == project_dir / "android" / "key.properties"

    def test_reads_files_on_every_call(
        self, project_dir: Path, keystore: Path, write_file, toolchain
    ):
        resolver = BuildConfigResolver(toolchain, project_root=project_dir)
        assert resolver.resolve().release.uses_debug_signing

        write_file(project_dir / "android" / "key.properties", KEY_PROPERTIES)
        assert not resolver.resolve().release.uses_debug_signing

    def test_to_dict_masks_passwords(self, project_dir: Path, keystore: Path, write_file, toolchain):
        write_file(project_dir / "android" / "key.properties", KEY_PROPERTIES)
        config = BuildConfigResolver(toolchain, project_root=project_dir).resolve()

        masked = config.to_dict()
        assert masked["build_types"]["release"]["signing"]["key_password"] == "********"
        assert masked["signing_configs"]["release"]["store_password"] == "********"
        assert masked["build_types"]["release"]["source"] == "release_keystore"

        revealed = config.to_dict(show_secrets=True)
        assert revealed["build_types"]["release"]["signing"]["key_password"] == "pw1"
