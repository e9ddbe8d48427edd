"""Helpers for reading a captured DevTools protocol network log."""
from typing import Any, Dict, Iterable, Mapping

RESPONSE_RECEIVED = "Network.responseReceived"
DOCUMENT_TYPE = "Document"

DevtoolsLogEntry = Mapping[str, Any]


def get_document_headers(devtools_log: Iterable[DevtoolsLogEntry]) -> Dict[str, str]:
    """Return the response headers of the first Document response in the log.

    Entries are assumed to be in capture order. Returns an empty dict when no
    document response was recorded.
    """
    for entry in devtools_log:
        if entry.get("method") != RESPONSE_RECEIVED:
            continue
        params = entry["params"]
        if params.get("type") != DOCUMENT_TYPE:
            continue
        return dict(params["response"]["headers"])
    return {}
