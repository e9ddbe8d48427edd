"""Library signature catalogs and how they reach an execution context."""
import logging
import os
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional

from core.cache import get_cache
from fetch.execution_context import ScriptDependency
from fetch.http_client import fetch_text
from models.signature import SignatureTest

logger = logging.getLogger(__name__)

# Identifier the js-library-detector catalog source declares. The
# d41d8cd98f00b204e9800998ecf8427e_ prefix is the one HTTP Archive and
# Lighthouse settled on for injected detector globals; it is kept verbatim so
# stock catalog builds can be loaded without patching.
CATALOG_BINDING = "d41d8cd98f00b204e9800998ecf8427e_LibraryDetectorTests"
# Catalog layout the binding refers to: Record<name, {id, icon, url, npm, test}>
CATALOG_BINDING_VERSION = 1

CATALOG_CACHE_TTL = 3600


@dataclass(frozen=True)
class SignatureCatalog:
    """A signature catalog as JS source, in-process tests, or both."""
    source: str = ""
    tests: Mapping[str, SignatureTest] = field(default_factory=dict)
    binding: str = CATALOG_BINDING

    @classmethod
    def from_tests(cls, tests: Mapping[str, SignatureTest]) -> "SignatureCatalog":
        # Read-only view; insertion order is the probe order
        return cls(tests=MappingProxyType(dict(tests)))

    def as_dependency(self) -> ScriptDependency:
        return ScriptDependency(binding=self.binding, source=self.source, value=self.tests)


def _is_url(location: str) -> bool:
    return location.startswith("http://") or location.startswith("https://")


async def load_catalog_source(location: str) -> str:
    """Read catalog source text from a file path or an http(s) URL.

    URL fetches are cached for an hour.
    """
    if not _is_url(location):
        with open(os.path.expanduser(location), "r", encoding="utf-8") as f:
            return f.read()

    cache = get_cache()
    cache_key = f"catalog_source:{location}"
    cached = cache.get(cache_key)
    if cached is not None:
        logger.debug(f"Using cached catalog source for {location}")
        return cached

    source = await fetch_text(location)
    cache.set(cache_key, source, ttl_seconds=CATALOG_CACHE_TTL)
    return source


async def load_catalog(location: str, binding: Optional[str] = None) -> SignatureCatalog:
    source = await load_catalog_source(location)
    logger.info(f"Loaded signature catalog from {location} ({len(source)} bytes)")
    return SignatureCatalog(source=source, binding=binding or CATALOG_BINDING)
