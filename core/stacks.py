"""Collects the detected JS libraries and server software of a page."""
import logging
import time
from typing import Iterable, List, Optional, Sequence

from core.catalog import SignatureCatalog
from core.devtools_log import DevtoolsLogEntry, get_document_headers
from detectors.library import LibraryDetector
from detectors.server import ServerDetector
from fetch.execution_context import ExecutionContext
from models.signature import ServerSignature
from models.stack import StackEntry
from rules.rules_loader import load_server_signatures


class Stacks:
    def __init__(self, catalog: SignatureCatalog, server_signatures: Optional[Sequence[ServerSignature]] = None):
        """Set up both detectors.

        Args:
            catalog: Library signature catalog shipped into the page
            server_signatures: Ordered server table; the bundled one when omitted
        """
        self.logger = logging.getLogger(__name__)
        if server_signatures is None:
            server_signatures = load_server_signatures()
        self.logger.info(f"Loaded {len(server_signatures)} server signatures")

        self.library_detector = LibraryDetector(catalog)
        self.server_detector = ServerDetector(server_signatures)

    async def collect_stacks(
        self,
        execution_context: ExecutionContext,
        devtools_log: Iterable[DevtoolsLogEntry],
    ) -> List[StackEntry]:
        """Run library detection, then server detection, and merge the results.

        Exceptions propagate; see get_artifact for the public entry point.
        """
        self.logger.debug("Collect stacks")
        started = time.perf_counter()

        libraries = await self.library_detector.detect(execution_context)
        stacks = [StackEntry.from_library(lib) for lib in libraries]

        detected_server = self.server_detector.detect(get_document_headers(devtools_log))
        if detected_server:
            stacks.append(detected_server)

        self.logger.info(
            f"Collected {len(stacks)} stacks ({len(libraries)} js, "
            f"server={detected_server.id if detected_server else None}) in {time.perf_counter() - started:.2f}s"
        )
        return stacks

    async def get_artifact(
        self,
        execution_context: ExecutionContext,
        devtools_log: Iterable[DevtoolsLogEntry],
    ) -> List[StackEntry]:
        """Like collect_stacks, but never raises: any failure yields []."""
        try:
            return await self.collect_stacks(execution_context, devtools_log)
        except Exception as e:
            self.logger.warning(f"Stack detection unavailable: {e!r}", exc_info=True)
            return []
