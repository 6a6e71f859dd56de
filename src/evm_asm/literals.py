'''
evaluador de literales: números (bin/oct/hex/dec), cadenas, selector("f(t1,t2)")
'''

from __future__ import annotations
import re
from typing import List

from Crypto.Hash import keccak

from .ast import Imm, Sym, Str, Selector, FunctionSig, Operand, Instruction, AutoPush, Op

BIN_RE = re.compile(r"^0b[01]+$")
OCT_RE = re.compile(r"^0o[0-7]+$")
HEX_RE = re.compile(r"^0x[0-9a-fA-F]{2,}$")   # un solo nibble no es válido
DEC_RE = re.compile(r"^[0-9]+$")
LABEL_REF_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")
STRING_RE = re.compile(r'^"((?:[^"\\]|\\.)*)"$')
SELECTOR_RE = re.compile(r'^selector\(\s*"(.*)"\s*\)$')
SIG_RE = re.compile(r"^([A-Za-z_][A-Za-z0-9_]*)\(([A-Za-z0-9]+(?:,[A-Za-z0-9]+)*)?\)$")

_ESCAPES = {'"': '"', '\\': '\\', 'n': '\n', 't': '\t'}

# Selector de función: primeros 4 bytes del keccak-256 de la firma
SELECTOR_WIDTH = 4

def parse_number(token: str) -> Imm | None:
    """Convierte '0b..', '0o..', '0x..' o decimal a Imm; None si no es un número válido."""
    t = token.strip()
    if BIN_RE.match(t):
        return Imm(int(t[2:], 2), base=2)
    if OCT_RE.match(t):
        return Imm(int(t[2:], 8), base=8)
    if HEX_RE.match(t):
        return Imm(int(t[2:], 16), base=16)
    if DEC_RE.match(t):
        return Imm(int(t, 10), base=10)
    return None

def parse_string(token: str) -> Str:
    m = STRING_RE.match(token.strip())
    if not m:
        raise ValueError(f"Cadena inválida: {token}")
    out = []
    chars = iter(m.group(1))
    for ch in chars:
        if ch == '\\':
            esc = next(chars)
            if esc not in _ESCAPES:
                raise ValueError(f"Secuencia de escape inválida: \\{esc}")
            out.append(_ESCAPES[esc])
        else:
            out.append(ch)
    return Str("".join(out))

def parse_signature(text: str) -> FunctionSig:
    """'transfer(address,uint256)' -> FunctionSig('transfer', ('address', 'uint256'))."""
    m = SIG_RE.match(text)
    if not m:
        raise ValueError(f"Firma de función inválida: '{text}'")
    params = tuple(m.group(2).split(",")) if m.group(2) else ()
    return FunctionSig(m.group(1), params)

def parse_operand(token: str) -> Operand:
    """Número, selector(...), cadena o referencia a etiqueta. Lanza ValueError si no encaja."""
    t = token.strip()
    if not t:
        raise ValueError("Operando vacío")
    num = parse_number(t)
    if num is not None:
        return num
    m = SELECTOR_RE.match(t)
    if m:
        return Selector(parse_signature(m.group(1)))
    if t.startswith('"'):
        return parse_string(t)
    if LABEL_REF_RE.match(t):
        return Sym(t)
    if t[0].isdigit():
        raise ValueError(f"Literal numérico inválido: '{t}'")
    raise ValueError(f"Operando inválido: '{t}'")

# ---------- keccak-256 y selectores ----------

def keccak256(data: bytes) -> bytes:
    h = keccak.new(digest_bits=256)
    h.update(data)
    return h.digest()

def selector_bytes(sig: FunctionSig, width: int = SELECTOR_WIDTH) -> bytes:
    """Primeros `width` bytes del hash de la firma canónica (UTF-8)."""
    return keccak256(sig.canonical().encode("utf-8"))[:width]

def selector_value(sig: FunctionSig, width: int = SELECTOR_WIDTH) -> int:
    return int.from_bytes(selector_bytes(sig, width), "big")

# ---------- Anotación del flujo expandido ----------

def evaluate(ops: List[Op]) -> List[Op]:
    """Sustituye cada operando Selector por su Imm.

    En pushN se toman los primeros N bytes del hash; en %push, el selector de 4 bytes.
    """
    out: List[Op] = []
    for op in ops:
        if isinstance(op, Instruction) and isinstance(op.operand, Selector):
            imm = Imm(selector_value(op.operand.sig, op.width), base=16)
            op = Instruction(op.mnemonic, op.opcode, op.line, op.col, op.file, op.width, imm)
        elif isinstance(op, AutoPush) and isinstance(op.operand, Selector):
            op = AutoPush(Imm(selector_value(op.operand.sig), base=16), op.line, op.col, op.file)
        out.append(op)
    return out
