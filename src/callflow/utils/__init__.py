"""Utilities: fingerprints and the path tracer."""

from callflow.utils.hashing import fingerprint_document, generate_fingerprint_from_dict
from callflow.utils.tracer import Trace, trace

__all__ = ["Trace", "fingerprint_document", "generate_fingerprint_from_dict", "trace"]
