"""Stub templates and their resolution."""

from packsmith.stubs.base import StubProvider
from packsmith.stubs.loader import (
    StubStore,
    get_global_stubs_path,
    get_local_stubs_path,
    get_package_stubs_path,
    get_stub_providers,
    publish_default_stubs,
)

__all__ = [
    "StubProvider",
    "StubStore",
    "get_global_stubs_path",
    "get_local_stubs_path",
    "get_package_stubs_path",
    "get_stub_providers",
    "publish_default_stubs",
]
