from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Union

# A probe reports False when its library is absent, otherwise a mapping that
# may carry a "version" (string, number or None).
ProbeResult = Union[bool, Mapping[str, Any], None]
ProbeFunction = Callable[[Any], Union[ProbeResult, Awaitable[ProbeResult]]]

@dataclass(frozen=True)
class SignatureTest:
    """One entry of a library signature catalog."""
    id: str
    test: ProbeFunction
    icon: Optional[str] = None
    url: Optional[str] = None
    npm_name: Optional[str] = None # npm module name, if the library ships on npm

@dataclass(frozen=True)
class ServerSignature:
    """A known server and the response headers that identify it."""
    id: str
    name: str
    # header name -> required value prefix, both lowercase; "" matches on presence
    headers: Dict[str, str] = field(default_factory=dict)
