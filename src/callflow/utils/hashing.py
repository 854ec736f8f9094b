"""Hashing utilities for compiled flow fingerprints"""

import hashlib
import json
from typing import Any


def generate_fingerprint_from_dict(data: dict[str, Any], sort_keys: bool = True) -> str:
    """
    Generate SHA-256 fingerprint from dictionary.

    Args:
        data: Dictionary to hash
        sort_keys: Whether to sort keys for consistent hashing (default: True)

    Returns:
        64-character hexadecimal SHA-256 hash
    """
    key_data = json.dumps(data, sort_keys=sort_keys, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(key_data.encode()).hexdigest()


def fingerprint_document(document: dict[str, Any]) -> str:
    """
    Fingerprint a serialized flow, ignoring its Metadata block.

    Two builds of the same flow against the same registry share a fingerprint.
    """
    content = {key: value for key, value in document.items() if key != "Metadata"}
    return generate_fingerprint_from_dict(content)
