# services/hash_service.py
"""
Content addressing for certificate documents.

A content reference is the SHA-256 hex digest of the document bytes. The
registry only keeps the reference; the bytes live wherever the issuer keeps
them.
"""
import hashlib
import json
from typing import Dict, Any

def sha256_of_bytes(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()

def sha256_of_stream(stream) -> str:
    """
    Computes the SHA-256 hex digest of a binary stream, reading it in chunks.
    """
    h = hashlib.sha256()
    for chunk in iter(lambda: stream.read(8192), b""):
        h.update(chunk)
    return h.hexdigest()

def sha256_of_data(data: Dict[str, Any]) -> str:
    """
    Computes a deterministic SHA-256 hash of a Python dictionary.
    """
    canonical_string = json.dumps(data, sort_keys=True, separators=(',', ':'))
    return sha256_of_bytes(canonical_string.encode('utf-8'))
