"""Client-side library detection by running signature probes in a page."""
import asyncio
import inspect
import numbers
import logging
from typing import Any, Dict, List, Mapping

from core.catalog import SignatureCatalog
from fetch.execution_context import ExecutionContext, RemoteFunction
from models.signature import ProbeResult, SignatureTest
from models.stack import DetectedLibrary

logger = logging.getLogger(__name__)

# Some probes wait on events that never fire; each one gets at most this long.
PROBE_TIMEOUT_MS = 1000


def _is_match(result: Any) -> bool:
    # An empty mapping still means "present, version unknown"
    return isinstance(result, Mapping) or bool(result)


def _result_version(result: Any) -> Any:
    if not isinstance(result, Mapping):
        return None
    version = result.get("version")
    # Only strings and numbers survive the trip back; anything else is dropped
    if isinstance(version, bool) or not isinstance(version, (str, numbers.Real)):
        return None
    return version


async def run_probe(test: SignatureTest, global_object: Any, timeout: float) -> ProbeResult:
    """Run one probe, treating a timeout or any exception as no match."""
    try:
        result = test.test(global_object)
        if inspect.isawaitable(result):
            result = await asyncio.wait_for(result, timeout=timeout)
        return result
    except asyncio.TimeoutError:
        logger.debug(f"Probe {test.id} timed out after {timeout}s")
        return False
    except Exception as e:
        logger.debug(f"Probe {test.id} failed: {e!r}")
        return False


async def detect_libraries(
    global_object: Any,
    catalog: Mapping[str, SignatureTest],
    timeout_ms: int = PROBE_TIMEOUT_MS,
) -> List[Dict[str, Any]]:
    """Probe every catalog entry in order and collect the ones that matched."""
    libraries: List[Dict[str, Any]] = []
    timeout = timeout_ms / 1000

    for name, test in catalog.items():
        if not test.id:
            logger.debug(f"Skipping catalog entry {name!r} without an id")
            continue
        result = await run_probe(test, global_object, timeout)
        if _is_match(result):
            libraries.append({
                "id": test.id,
                "name": name,
                "version": _result_version(result),
                "npm": test.npm_name if isinstance(test.npm_name, str) else None,
            })

    return libraries


# Same pass for a browser page. The catalog arrives as the first argument.
DETECT_LIBRARIES_SCRIPT = """
async (libraryDetectorTests, timeoutMs) => {
  const libraries = [];
  for (const [name, lib] of Object.entries(libraryDetectorTests)) {
    if (!lib || !lib.id) continue;
    let timeout;
    try {
      const timeoutPromise = new Promise(r => timeout = setTimeout(() => r(false), timeoutMs));
      const result = await Promise.race([lib.test(window), timeoutPromise]);
      if (result) {
        libraries.push({
          id: lib.id,
          name: name,
          version: typeof result.version === "string" || typeof result.version === "number" ? result.version : null,
          npm: typeof lib.npm === "string" ? lib.npm : null,
        });
      }
    } catch (e) {
    } finally {
      if (timeout) clearTimeout(timeout);
    }
  }
  return libraries;
}
"""

DETECT_LIBRARIES = RemoteFunction(
    name="detectLibraries",
    javascript=DETECT_LIBRARIES_SCRIPT,
    python=detect_libraries,
)


class LibraryDetector:
    def __init__(self, catalog: SignatureCatalog):
        self.catalog = catalog

    async def detect(self, execution_context: ExecutionContext) -> List[DetectedLibrary]:
        """Run the catalog inside the execution context.

        Failures of the context itself (e.g. the page is gone) propagate.
        """
        results = await execution_context.evaluate(
            DETECT_LIBRARIES,
            args=[PROBE_TIMEOUT_MS],
            deps=[self.catalog.as_dependency()],
        )
        libraries = []
        for result in results:
            if not result.get("id"):
                logger.debug(f"Dropping detected library without an id: {result.get('name')!r}")
                continue
            libraries.append(DetectedLibrary.from_result(result))
        logger.debug(f"LibraryDetector: {len(libraries)} libraries detected")
        return libraries
