"""Build metadata and the process-wide identity header.

REQ_HEADER_UA is computed once at import and injected into every new
RequestBuilder. Version and commit come from MASTER_SDK_VERSION and
MASTER_SDK_COMMIT_ID when set (release builds export them), otherwise from
the installed distribution metadata.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from importlib import metadata

from master_sdk.models import DEFAULT_PRODUCT, BuildInfo

DISTRIBUTION_NAME = "master-sdk"
FALLBACK_VERSION = "0.0.0"
FALLBACK_COMMIT = "unknown"

ENV_PRODUCT = "MASTER_SDK_PRODUCT"
ENV_VERSION = "MASTER_SDK_VERSION"
ENV_COMMIT_ID = "MASTER_SDK_COMMIT_ID"


def format_user_agent(product: str, version: str, commit_id: str) -> str:
    """Format the identity header value."""
    return BuildInfo(product=product, version=version, commit_id=commit_id).user_agent()


def _installed_version() -> str:
    try:
        return metadata.version(DISTRIBUTION_NAME)
    except metadata.PackageNotFoundError:
        return FALLBACK_VERSION


def load_build_info(environ: Mapping[str, str] | None = None) -> BuildInfo:
    """Collect build metadata from the environment, falling back to package metadata."""
    env = os.environ if environ is None else environ
    return BuildInfo(
        product=env.get(ENV_PRODUCT) or DEFAULT_PRODUCT,
        version=env.get(ENV_VERSION) or _installed_version(),
        commit_id=env.get(ENV_COMMIT_ID) or FALLBACK_COMMIT,
    )


BUILD_INFO = load_build_info()
REQ_HEADER_UA = BUILD_INFO.user_agent()
