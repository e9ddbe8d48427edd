from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional
from core.version_utils import normalize_version

@dataclass(frozen=True)
class DetectedLibrary:
    """A client-side library whose probe matched."""
    id: str
    name: str
    version: Optional[str] = None
    npm_name: Optional[str] = None

    @classmethod
    def from_result(cls, result: Mapping[str, Any]) -> "DetectedLibrary":
        """Build from the plain dict returned by a probe pass."""
        return cls(
            id=result["id"],
            name=result["name"],
            version=normalize_version(result.get("version")),
            npm_name=result.get("npm") or None,
        )

@dataclass(frozen=True)
class StackEntry:
    """One normalized detection result, either a library or a server."""
    detector: str # "js" or "server"
    id: str
    name: str
    version: Optional[str] = None
    npm_name: Optional[str] = None

    def __post_init__(self):
        if self.detector not in ("js", "server"):
            raise ValueError(f"detector must be 'js' or 'server', got {self.detector}")
        if not self.id:
            raise ValueError("StackEntry id must be non-empty")

    @classmethod
    def from_library(cls, library: DetectedLibrary) -> "StackEntry":
        return cls(
            detector="js",
            id=library.id,
            name=library.name,
            version=library.version,
            npm_name=library.npm_name,
        )

    def to_dict(self) -> Dict[str, str]:
        data = {"detector": self.detector, "id": self.id, "name": self.name}
        if self.version is not None:
            data["version"] = self.version
        if self.npm_name is not None:
            data["npm"] = self.npm_name
        return data
