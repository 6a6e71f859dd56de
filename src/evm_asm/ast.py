'''
dataclases de AST (Label, Instruction, macros, operandos)
'''

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple, Union, Literal

# ---- Operandos ----

@dataclass(frozen=True)
class Imm:
    """Literal numérico de precisión arbitraria, con la base en que se escribió."""
    value: int
    base: Literal[2, 8, 10, 16] = 10

@dataclass(frozen=True)
class Sym:
    """Referencia a una etiqueta."""
    name: str

@dataclass(frozen=True)
class Str:
    """Cadena entre comillas (sólo como argumento de macro)."""
    value: str

@dataclass(frozen=True)
class FunctionSig:
    """Declaración de función para selector(...): nombre + tipos de parámetros."""
    name: str
    params: Tuple[str, ...] = ()

    def canonical(self) -> str:
        return f"{self.name}({','.join(self.params)})"

@dataclass(frozen=True)
class Selector:
    """Expresión selector("f(t1,t2)"); su valor se calcula en literals.evaluate."""
    sig: FunctionSig

Operand = Union[Imm, Sym, Str, Selector]

# ---- Nodos a nivel de fuente ----

@dataclass(frozen=True)
class Label:
    """Definición de etiqueta (p.ej., 'loop:')."""
    name: str
    line: int
    col: int
    file: Optional[str] = None

@dataclass(frozen=True)
class Instruction:
    """Opcode con su byte y, para pushN, el ancho e inmediato.

    - plano / dupN / swapN / logN: width == 0, operand None
    - pushN: 1 <= width <= 32 y operand Imm, Sym o Selector
    """
    mnemonic: str
    opcode: int
    line: int
    col: int
    file: Optional[str] = None
    width: int = 0
    operand: Optional[Operand] = None

    @property
    def size(self) -> int:
        return 1 + self.width

@dataclass(frozen=True)
class AutoPush:
    """push de ancho mínimo; el ancho lo fija el resolvedor de direcciones."""
    operand: Operand
    line: int
    col: int
    file: Optional[str] = None

@dataclass(frozen=True)
class Raw:
    """Bytes opacos (%include_hex o unidad %include ya ensamblada)."""
    data: bytes
    line: int
    col: int
    file: Optional[str] = None
    source: Optional[str] = None

# ---- Invocaciones de macro (desaparecen tras la expansión) ----

@dataclass(frozen=True)
class Import:
    path: str
    line: int
    col: int
    file: Optional[str] = None

@dataclass(frozen=True)
class Include:
    path: str
    line: int
    col: int
    file: Optional[str] = None

@dataclass(frozen=True)
class IncludeHex:
    path: str
    line: int
    col: int
    file: Optional[str] = None

@dataclass(frozen=True)
class PushMacro:
    operand: Operand
    line: int
    col: int
    file: Optional[str] = None

Op = Union[Label, Instruction, AutoPush, Raw]
Node = Union[Op, Import, Include, IncludeHex, PushMacro]

MACRO_TYPES = (Import, Include, IncludeHex, PushMacro)

def loc(node) -> dict:
    """Ubicación de un nodo como kwargs para los errores."""
    return {"line": getattr(node, "line", None), "col": getattr(node, "col", None),
            "file": getattr(node, "file", None)}
