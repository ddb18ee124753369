"""Tests for build metadata and the identity header."""

from unittest.mock import patch

from master_sdk.models import DEFAULT_PRODUCT, BuildInfo
from master_sdk.version import (
    BUILD_INFO,
    ENV_COMMIT_ID,
    ENV_PRODUCT,
    ENV_VERSION,
    FALLBACK_COMMIT,
    FALLBACK_VERSION,
    REQ_HEADER_UA,
    format_user_agent,
    load_build_info,
)


class TestFormatUserAgent:
    def test_format(self) -> None:
        assert format_user_agent("cubefs-sdk", "3.3.0", "abc1234") == "cubefs-sdk/3.3.0 (commit abc1234)"

    def test_build_info_user_agent(self) -> None:
        info = BuildInfo(version="1.0", commit_id="c0ffee")
        assert info.user_agent() == f"{DEFAULT_PRODUCT}/1.0 (commit c0ffee)"


class TestLoadBuildInfo:
    def test_from_environment(self) -> None:
        info = load_build_info({
            ENV_PRODUCT: "blobstore-sdk",
            ENV_VERSION: "2.0.1",
            ENV_COMMIT_ID: "feedface",
        })
        assert info == BuildInfo(product="blobstore-sdk", version="2.0.1", commit_id="feedface")

    def test_defaults_without_environment(self) -> None:
        with patch("master_sdk.version._installed_version", return_value="0.1.0"):
            info = load_build_info({})
        assert info.product == DEFAULT_PRODUCT
        assert info.version == "0.1.0"
        assert info.commit_id == FALLBACK_COMMIT

    def test_empty_values_fall_back(self) -> None:
        with patch("master_sdk.version._installed_version", return_value="0.1.0"):
            info = load_build_info({ENV_VERSION: "", ENV_COMMIT_ID: ""})
        assert info.version == "0.1.0"
        assert info.commit_id == FALLBACK_COMMIT

    def test_not_installed_uses_fallback_version(self) -> None:
        from importlib import metadata

        with patch(
            "master_sdk.version.metadata.version",
            side_effect=metadata.PackageNotFoundError("master-sdk"),
        ):
            info = load_build_info({})
        assert info.version == FALLBACK_VERSION


class TestProcessConstant:
    def test_header_matches_build_info(self) -> None:
        assert REQ_HEADER_UA == BUILD_INFO.user_agent()

    def test_header_shape(self) -> None:
        assert REQ_HEADER_UA.startswith(f"{BUILD_INFO.product}/")
        assert REQ_HEADER_UA.endswith(f"(commit {BUILD_INFO.commit_id})")
