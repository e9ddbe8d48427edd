import os
import logging
import yaml
from typing import Optional, Tuple
from models.signature import ServerSignature

logger = logging.getLogger(__name__)

RULES_DIR = os.path.dirname(os.path.abspath(__file__))
DEFAULT_SERVERS_FILE = os.path.join(RULES_DIR, "servers.yaml")

def load_server_signatures(path: Optional[str] = None) -> Tuple[ServerSignature, ...]:
    """
    Loads the ordered server signature table from a YAML file.

    Header names and value prefixes are lowercased so matching can compare
    against lowercased response headers. Entries missing an id, a name or at
    least one header are skipped.
    """
    filepath = path or DEFAULT_SERVERS_FILE
    with open(filepath, "r", encoding="utf-8") as f:
        rules_data = yaml.safe_load(f)

    signatures = []
    for rule_data in rules_data or []:
        if not isinstance(rule_data, dict) or not all(k in rule_data for k in ["id", "name", "headers"]):
            logger.warning(f"Skipping invalid server signature in {filepath}: {rule_data}")
            continue

        headers = rule_data["headers"]
        if not isinstance(headers, dict) or not headers:
            logger.warning(f"Skipping server signature {rule_data['id']} without header matchers")
            continue

        signatures.append(
            ServerSignature(
                id=str(rule_data["id"]),
                name=str(rule_data["name"]),
                headers={
                    str(name).lower(): ("" if value is None else str(value)).lower()
                    for name, value in headers.items()
                },
            )
        )

    logger.debug(f"Loaded {len(signatures)} server signatures from {filepath}")
    return tuple(signatures)

# Example usage (for testing)
if __name__ == "__main__":
    for signature in load_server_signatures():
        print(f"  - {signature.id} ({signature.name})")
        for header, prefix in signature.headers.items():
            print(f"    - {header}: {prefix or '<present>'}")
