from __future__ import annotations
import json
import os
import struct
from showdown.config import settings
from showdown.errors import InvalidInput

MIME_FOR_EXT = {".glb": "model/gltf-binary", ".gltf": "model/gltf+json"}
GLB_MAGIC = b"glTF"


def _check_glb(data: bytes) -> None:
    # 12-byte header: magic, uint32 version, uint32 total length
    if len(data) < 12 or data[:4] != GLB_MAGIC:
        raise InvalidInput("Invalid GLB file")
    version, length = struct.unpack_from("<II", data, 4)
    if version != 2:
        raise InvalidInput(f"Unsupported glTF version {version}")
    if length != len(data):
        raise InvalidInput("Truncated GLB file")


def _check_gltf(data: bytes) -> None:
    try:
        doc = json.loads(data)
    except (UnicodeDecodeError, ValueError):
        raise InvalidInput("Invalid glTF file")
    if not isinstance(doc, dict) or "asset" not in doc:
        raise InvalidInput("Invalid glTF file")


def analyze_artifact(filename: str, data: bytes) -> tuple[str, str]:
    """
    Validate an uploaded part and return (extension, mime).
    Only .glb / .gltf are accepted, non-empty and within the upload limit.
    """
    ext = os.path.splitext(filename or "")[1].lower()
    if ext not in settings.allowed_extensions:
        raise InvalidInput("Only .glb and .gltf files are allowed!")
    if not data:
        raise InvalidInput("No file uploaded")
    if len(data) > settings.max_upload_bytes:
        raise InvalidInput("File too large")
    if ext == ".glb":
        _check_glb(data)
    else:
        _check_gltf(data)
    return ext, MIME_FOR_EXT[ext]
