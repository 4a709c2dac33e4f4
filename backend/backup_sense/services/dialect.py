# Dialect detection and hostname extraction for firewall config exports.
# Detection is a cheap substring probe; strict validation happens in extract_config.

from __future__ import annotations
import logging
from typing import Any, Dict, List, Tuple

import xmltodict

from ..schemas.firewall import Dialect, FirewallConfig, OPNsenseConfig, PfSenseConfig
from .errors import MalformedConfig, MissingHostname, UnsupportedDialect

logger = logging.getLogger(__name__)

# Checked in order; first match wins.
MARKERS: List[Tuple[bytes, Dialect]] = [
    (b"<pfsense>", Dialect.PFSENSE),
    (b"<opnsense>", Dialect.OPNSENSE),
]

LABELS: Dict[Dialect, str] = {
    Dialect.PFSENSE: "pfSense",
    Dialect.OPNSENSE: "OPNsense",
}


def detect_dialect(payload: bytes) -> Dialect:
    for marker, dialect in MARKERS:
        if marker in payload:
            return dialect
    raise UnsupportedDialect("unsupported XML type")


def _text(node: Any) -> str:
    """Leaf text of an xmltodict node ('' for empty/missing)."""
    if node is None:
        return ""
    if isinstance(node, list):
        return _text(node[0]) if node else ""
    if isinstance(node, dict):
        return _text(node.get("#text"))
    return str(node).strip()


def _system(doc: Dict[str, Any], dialect: Dialect) -> Dict[str, Any]:
    root_name = dialect.value
    if not isinstance(doc, dict) or root_name not in doc:
        found = next(iter(doc), None) if isinstance(doc, dict) else None
        raise MalformedConfig(
            f"{LABELS[dialect]} parse error: expected element <{root_name}> but have <{found}>"
        )
    root = doc[root_name]
    if not isinstance(root, dict):
        return {}
    system = root.get("system")
    if isinstance(system, list):
        system = system[0] if system else None
    return system if isinstance(system, dict) else {}


def extract_config(payload: bytes, dialect: Dialect) -> FirewallConfig:
    """Decode `payload` as `dialect` and return its identity fields.

    Raises MalformedConfig on any decode error or wrong root element and
    MissingHostname when system/hostname is absent or blank.
    """
    label = LABELS[dialect]
    try:
        doc = xmltodict.parse(payload, disable_entities=True)
    except Exception as e:
        logger.debug("xml decode failed for %s payload: %s", label, e)
        raise MalformedConfig(f"{label} parse error: {e}") from e

    system = _system(doc, dialect)
    hostname = _text(system.get("hostname"))
    if not hostname:
        raise MissingHostname(f"missing hostname in {label} config")

    if dialect is Dialect.PFSENSE:
        return PfSenseConfig(hostname=hostname, domain=_text(system.get("domain")) or None)
    return OPNsenseConfig(hostname=hostname)


def detect_and_extract(payload: bytes) -> FirewallConfig:
    return extract_config(payload, detect_dialect(payload))
