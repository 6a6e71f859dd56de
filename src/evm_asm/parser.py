# src/evm_asm/parser.py
from __future__ import annotations
from typing import List, Optional

from .lexer import (
    strip_comment,
    split_statements,
    split_label,
    split_mnemonic_operands,
    split_macro,
    split_operands,
)
from .ast import (
    Label, Instruction, Import, Include, IncludeHex, PushMacro,
    Imm, Sym, Str, Selector, Node, Operand,
)
from .isa import lookup, FamilyRangeError
from .literals import parse_operand
from .diagnostics import (
    AsmSyntaxError, MissingArgumentError, ExtraArgumentError, ArgumentTypeError,
)

# macro -> (nodo, tipos de argumento aceptados, descripción para el error)
MACROS = {
    "import": (Import, (Str,), "una cadena"),
    "include": (Include, (Str,), "una cadena"),
    "include_hex": (IncludeHex, (Str,), "una cadena"),
    "push": (PushMacro, (Imm, Sym, Selector), "un número, selector o etiqueta"),
}

def _operand(token: str, loc: dict) -> Operand:
    try:
        return parse_operand(token)
    except ValueError as ex:
        raise AsmSyntaxError(str(ex), **loc) from ex

def _parse_macro(stmt: str, loc: dict) -> Node:
    parts = split_macro(stmt)
    if parts is None:
        raise AsmSyntaxError(f"Invocación de macro mal formada: '{stmt}'",
                             hint="se esperaba %nombre(args)", **loc)
    name, arg_str = parts
    if name not in MACROS:
        raise AsmSyntaxError(f"Macro desconocida: %{name}", **loc)
    node_cls, accepted, what = MACROS[name]

    args = [_operand(tok, loc) for tok in split_operands(arg_str)]
    if len(args) < 1:
        raise MissingArgumentError(name, len(args), 1, **loc)
    if len(args) > 1:
        raise ExtraArgumentError(name, len(args), 1, **loc)
    arg = args[0]
    if not isinstance(arg, accepted):
        raise ArgumentTypeError(name, 0, what, **loc)

    if node_cls is PushMacro:
        return PushMacro(operand=arg, **loc)
    return node_cls(path=arg.value, **loc)

def _parse_instruction(stmt: str, loc: dict) -> Instruction:
    mnemonic, op_str = split_mnemonic_operands(stmt)
    try:
        spec = lookup(mnemonic)
    except FamilyRangeError as ex:
        raise AsmSyntaxError(str(ex), **loc) from ex
    if spec is None:
        raise AsmSyntaxError(f"Mnemónico desconocido: '{mnemonic}'", **loc)

    if spec.width == 0:
        if op_str:
            raise AsmSyntaxError(f"{spec.name} no admite operandos", **loc)
        return Instruction(mnemonic=spec.name, opcode=spec.opcode, **loc)

    # pushN: un único operando separado por espacio
    if not op_str:
        raise AsmSyntaxError(f"{spec.name} requiere un operando", **loc)
    operand = _operand(op_str, loc)
    if isinstance(operand, Str):
        raise AsmSyntaxError(f"{spec.name} no admite cadenas",
                             hint="use un número, selector(...) o una etiqueta", **loc)
    return Instruction(mnemonic=spec.name, opcode=spec.opcode, width=spec.width,
                       operand=operand, **loc)

def parse(text: str, *, filename: Optional[str] = None) -> List[Node]:
    """
    Devuelve la lista de nodos del programa, en orden:
      - Label(name, ...)
      - Instruction(mnemonic, opcode, ..., width, operand)
      - Import / Include / IncludeHex / PushMacro

    Reglas:
      - Comentarios: '#' hasta fin de línea (fuera de cadenas).
      - Sentencias separadas por salto de línea o ';'.
      - Etiquetas: 'name:' al inicio de la sentencia (permite 'name: jumpdest').
      - Macros: '%nombre(args)'.
      - Instrucciones: mnemónico (+ operando en pushN).
    Lanza AsmSyntaxError (con línea y columna) en la primera sentencia inválida.
    """
    nodes: List[Node] = []

    for lineno, raw in enumerate(text.split("\n"), start=1):
        core = strip_comment(raw.rstrip("\r"))
        if not core:
            continue

        for col, stmt in split_statements(core):
            # 1) 'label:' y 'label: <resto>'
            label, rest, offset = split_label(stmt)
            if label:
                nodes.append(Label(name=label, line=lineno, col=col, file=filename))
                if not rest:
                    continue
                stmt = rest
                col += offset

            loc = {"line": lineno, "col": col, "file": filename}

            # 2) %macro(args)
            if stmt.startswith('%'):
                nodes.append(_parse_macro(stmt, loc))
                continue

            # 3) Instrucción
            nodes.append(_parse_instruction(stmt, loc))

    return nodes
