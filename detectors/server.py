from typing import Mapping, Optional, Sequence
import logging
from models.signature import ServerSignature
from models.stack import StackEntry

class ServerDetector:
    def __init__(self, signatures: Sequence[ServerSignature]):
        self.signatures = tuple(signatures)

    def detect(self, headers: Mapping[str, str]) -> Optional[StackEntry]:
        """Identify the server from the document response headers.

        The first signature, in table order, with any satisfied header
        matcher wins.
        """
        logger = logging.getLogger(__name__)
        document_headers = {str(k).lower(): str(v).lower() for k, v in headers.items()}

        for server in self.signatures:
            # Any one matcher is enough; see DESIGN.md on OR vs AND
            matched = any(
                header in document_headers and document_headers[header].startswith(prefix)
                for header, prefix in server.headers.items()
            )
            if matched:
                logger.debug(f"ServerDetector matched {server.id}")
                return StackEntry(detector="server", id=server.id, name=server.name)

        logger.debug(f"ServerDetector: no match among {len(document_headers)} headers")
        return None
