'''
bytes big-endian, anchos mínimos y formato hexadecimal
'''

from __future__ import annotations

# Ancho máximo de un inmediato EVM (push32)
MAX_WIDTH = 32

def min_width(value: int) -> int:
    """Mínimo número de bytes (>= 1) que representan value sin signo."""
    if value < 0:
        raise ValueError("valor negativo no representable")
    return max(1, (value.bit_length() + 7) // 8)

def fits_width(value: int, width: int) -> bool:
    """Devuelve True si value está en [0, 2^(8*width))."""
    if width <= 0:
        raise ValueError("width debe ser positivo")
    return 0 <= value < (1 << (8 * width))

def to_be_bytes(value: int, width: int) -> bytes:
    """value en big-endian, rellenado a la izquierda hasta width bytes."""
    return value.to_bytes(width, "big")

def to_hex(data: bytes, *, prefix: bool = False) -> str:
    """Representación hexadecimal (minúsculas), con o sin prefijo 0x."""
    s = data.hex()
    return ("0x" + s) if prefix else s
