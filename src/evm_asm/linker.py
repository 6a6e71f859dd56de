# src/evm_asm/linker.py
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .ast import Label, Instruction, AutoPush, Raw, Imm, Sym, Op, Operand, MACRO_TYPES, loc
from .utils import MAX_WIDTH, min_width
from .diagnostics import (
    DuplicateLabelError, UndefinedLabelError, ResolutionError, UnresolvedMacroError,
)

log = logging.getLogger(__name__)

# ---------- Resultado del resolvedor ----------

@dataclass(frozen=True)
class Layout:
    labels: Dict[str, int]     # etiqueta -> offset final
    offsets: List[int]         # offset de cada op del flujo
    widths: Dict[int, int]     # índice de AutoPush -> ancho convergido
    size: int                  # longitud total del bytecode
    passes: int

# ---------- Helpers internos ----------

def _check_stream(ops: List[Op]) -> Dict[str, Label]:
    """Verifica que no queden macros, que no haya etiquetas repetidas ni referencias colgantes."""
    defs: Dict[str, Label] = {}
    for op in ops:
        if isinstance(op, MACRO_TYPES):
            raise UnresolvedMacroError(f"Macro sin expandir: {type(op).__name__}", **loc(op))
        if isinstance(op, Label):
            if op.name in defs:
                raise DuplicateLabelError(op.name, first_line=defs[op.name].line, **loc(op))
            defs[op.name] = op

    for op in ops:
        operand = getattr(op, "operand", None)
        if isinstance(operand, Sym) and operand.name not in defs:
            raise UndefinedLabelError(operand.name, **loc(op))
    return defs

def operand_value(operand: Optional[Operand], labels: Dict[str, int]) -> int:
    """Valor entero de un operando ya evaluado (Imm) o de una etiqueta resuelta (Sym)."""
    if isinstance(operand, Imm):
        return operand.value
    if isinstance(operand, Sym):
        return labels[operand.name]
    raise UnresolvedMacroError(f"Operando sin evaluar: {operand!r}")

def _op_size(op: Op, index: int, widths: Dict[int, int]) -> int:
    if isinstance(op, Label):
        return 0
    if isinstance(op, Instruction):
        return op.size
    if isinstance(op, AutoPush):
        return 1 + widths[index]
    if isinstance(op, Raw):
        return len(op.data)
    raise UnresolvedMacroError(f"Nodo desconocido en el resolvedor: {op!r}")

def _layout_pass(ops: List[Op], widths: Dict[int, int]) -> Tuple[List[int], Dict[str, int], int]:
    """Una pasada hacia delante con los anchos actuales -> (offsets, labels, tamaño)."""
    offsets: List[int] = []
    labels: Dict[str, int] = {}
    lc = 0
    for i, op in enumerate(ops):
        offsets.append(lc)
        if isinstance(op, Label):
            # la etiqueta apunta a la siguiente instrucción (o al final del programa)
            labels[op.name] = lc
            continue
        lc += _op_size(op, i, widths)
    return offsets, labels, lc

# ---------- Punto fijo ----------

def resolve_layout(ops: List[Op], *, max_passes: Optional[int] = None) -> Layout:
    """Asigna offsets a cada instrucción y etiqueta.

    Los %push de ancho automático empiezan en 1 byte; tras cada pasada se
    recalcula el ancho mínimo de cada uno con las direcciones ya conocidas y,
    si alguno crece, se repite la pasada. Los anchos sólo crecen, así que el
    proceso termina; `max_passes` acota el número de pasadas (por defecto
    32 * número de %push + 2).
    """
    _check_stream(ops)

    auto = [i for i, op in enumerate(ops) if isinstance(op, AutoPush)]
    widths: Dict[int, int] = {i: 1 for i in auto}
    limit = max_passes if max_passes is not None else MAX_WIDTH * len(auto) + 2

    for n in range(1, limit + 1):
        offsets, labels, size = _layout_pass(ops, widths)
        changed = 0
        for i in auto:
            value = operand_value(ops[i].operand, labels)
            # un valor > 32 bytes queda en 32 y lo rechaza el emisor
            need = min(min_width(value), MAX_WIDTH)
            if need > widths[i]:
                widths[i] = need
                changed += 1
        log.debug("pasada %d: %d bytes, %d ancho(s) ampliado(s)", n, size, changed)
        if not changed:
            return Layout(labels=labels, offsets=offsets, widths=dict(widths), size=size, passes=n)

    raise ResolutionError(f"Las direcciones no convergen tras {limit} pasada(s)",
                          hint="aumente max_passes")
