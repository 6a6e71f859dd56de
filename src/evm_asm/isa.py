'''
tabla de opcodes EVM (nombre -> byte) y familias numeradas push/dup/swap/log
'''

from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Dict, Optional

@dataclass(frozen=True)
class OpSpec:
    """Especificación de un mnemónico EVM.

    - opcode: byte de la instrucción
    - width: bytes de inmediato (sólo pushN, 1..32)
    """
    name: str
    opcode: int
    width: int = 0

# Opcodes sin familia numerada (Cancun)
SPEC: Dict[str, int] = {
    "stop": 0x00, "add": 0x01, "mul": 0x02, "sub": 0x03, "div": 0x04,
    "sdiv": 0x05, "mod": 0x06, "smod": 0x07, "addmod": 0x08, "mulmod": 0x09,
    "exp": 0x0a, "signextend": 0x0b,

    "lt": 0x10, "gt": 0x11, "slt": 0x12, "sgt": 0x13, "eq": 0x14,
    "iszero": 0x15, "and": 0x16, "or": 0x17, "xor": 0x18, "not": 0x19,
    "byte": 0x1a, "shl": 0x1b, "shr": 0x1c, "sar": 0x1d,

    "keccak256": 0x20,

    "address": 0x30, "balance": 0x31, "origin": 0x32, "caller": 0x33,
    "callvalue": 0x34, "calldataload": 0x35, "calldatasize": 0x36,
    "calldatacopy": 0x37, "codesize": 0x38, "codecopy": 0x39,
    "gasprice": 0x3a, "extcodesize": 0x3b, "extcodecopy": 0x3c,
    "returndatasize": 0x3d, "returndatacopy": 0x3e, "extcodehash": 0x3f,

    "blockhash": 0x40, "coinbase": 0x41, "timestamp": 0x42, "number": 0x43,
    "prevrandao": 0x44, "gaslimit": 0x45, "chainid": 0x46,
    "selfbalance": 0x47, "basefee": 0x48, "blobhash": 0x49,
    "blobbasefee": 0x4a,

    "pop": 0x50, "mload": 0x51, "mstore": 0x52, "mstore8": 0x53,
    "sload": 0x54, "sstore": 0x55, "jump": 0x56, "jumpi": 0x57, "pc": 0x58,
    "msize": 0x59, "gas": 0x5a, "jumpdest": 0x5b, "tload": 0x5c,
    "tstore": 0x5d, "mcopy": 0x5e, "push0": 0x5f,

    "create": 0xf0, "call": 0xf1, "callcode": 0xf2, "return": 0xf3,
    "delegatecall": 0xf4, "create2": 0xf5, "staticcall": 0xfa,
    "revert": 0xfd, "invalid": 0xfe, "selfdestruct": 0xff,
}

ALIASES: Dict[str, str] = {
    "sha3": "keccak256",
    "difficulty": "prevrandao",
    "getpc": "pc",
}

# Familias: base + índice, con el rango de índices válido
PUSH_BASE = 0x5f   # push1 = 0x60 ... push32 = 0x7f
DUP_BASE = 0x7f    # dup1  = 0x80 ... dup16  = 0x8f
SWAP_BASE = 0x8f   # swap1 = 0x90 ... swap16 = 0x9f
LOG_BASE = 0xa0    # log0  = 0xa0 ... log4   = 0xa4

FAMILIES = {
    "push": (PUSH_BASE, 1, 32),
    "dup": (DUP_BASE, 1, 16),
    "swap": (SWAP_BASE, 1, 16),
    "log": (LOG_BASE, 0, 4),
}

FAMILY_RE = re.compile(r"^(push|dup|swap|log)(\d+)$")

class FamilyRangeError(ValueError):
    """Sufijo numérico fuera del rango de su familia (p.ej. swap17)."""

def lookup(word: str) -> Optional[OpSpec]:
    """Devuelve la especificación de un mnemónico, o None si no es un opcode.

    La búsqueda es por palabra completa, así 'call', 'callcode' y
    'calldataload' nunca se confunden. Lanza FamilyRangeError si el
    mnemónico es de una familia numerada con índice fuera de rango.
    """
    w = word.lower()
    w = ALIASES.get(w, w)
    if w in SPEC:
        return OpSpec(w, SPEC[w])
    m = FAMILY_RE.match(w)
    if not m:
        return None
    family, digits = m.group(1), m.group(2)
    base, lo, hi = FAMILIES[family]
    n = int(digits)
    if digits != str(n):
        return None   # 'push01' no es un mnemónico
    if not (lo <= n <= hi):
        raise FamilyRangeError(f"{family}{digits}: índice fuera de rango ({lo}..{hi})")
    return OpSpec(f"{family}{n}", base + n, width=n if family == "push" else 0)

