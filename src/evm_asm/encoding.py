# src/evm_asm/encoding.py
from __future__ import annotations
from typing import Dict, List, Optional

from .ast import Label, Instruction, AutoPush, Raw, Imm, Sym, Op, Operand, loc
from .isa import PUSH_BASE
from .linker import Layout, operand_value
from .utils import fits_width, to_be_bytes
from .diagnostics import (
    UndefinedLabelError, ValueTooLargeError, ResolutionError, UnresolvedMacroError,
)

# ---------------- Helpers ----------------

def _immediate(operand: Optional[Operand], width: int, labels: Dict[str, int], op: Op) -> bytes:
    if isinstance(operand, Sym) and operand.name not in labels:
        # el resolvedor debió detectarlo: error interno, no recuperable
        raise UndefinedLabelError(operand.name, **loc(op))
    value = operand_value(operand, labels)
    if not fits_width(value, width):
        base = operand.base if isinstance(operand, Imm) else 16
        raise ValueTooLargeError(value, width, base=base, **loc(op))
    return to_be_bytes(value, width)

# ---------------- Emisor principal ----------------

def encode(ops: List[Op], layout: Layout) -> bytes:
    """Serializa el flujo resuelto: opcode + inmediato big-endian, o bytes crudos.

    No toma decisiones: los anchos vienen del propio opcode (pushN) o del
    resolvedor (%push).
    """
    out = bytearray()
    for i, op in enumerate(ops):
        if isinstance(op, Label):
            continue
        if isinstance(op, Instruction):
            out.append(op.opcode)
            if op.width:
                out += _immediate(op.operand, op.width, layout.labels, op)
            continue
        if isinstance(op, AutoPush):
            width = layout.widths.get(i)
            if width is None:
                raise UnresolvedMacroError("%push sin ancho asignado", **loc(op))
            out.append(PUSH_BASE + width)
            out += _immediate(op.operand, width, layout.labels, op)
            continue
        if isinstance(op, Raw):
            out += op.data
            continue
        raise UnresolvedMacroError(f"Nodo no emitible: {type(op).__name__}", **loc(op))

    if len(out) != layout.size:
        raise ResolutionError(f"Tamaño emitido {len(out)} distinto del calculado {layout.size}")
    return bytes(out)
