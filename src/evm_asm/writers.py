from __future__ import annotations
from .utils import to_hex

def to_hex_text(code: bytes) -> str:
    return to_hex(code) + "\n"

def write_hex(code: bytes, path: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        f.write(to_hex_text(code))

def write_bin(code: bytes, path: str) -> None:
    with open(path, "wb") as f:
        f.write(code)
