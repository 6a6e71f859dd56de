'''
clase Diagnostic, jerarquía de errores del ensamblador (con línea/columna/archivo)
'''

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Literal, Sequence

# Severidad de los diagnósticos (en español)
Severity = Literal["error", "advertencia", "nota"]

_SEV_TO_LABEL = {
    "error": "ERROR",
    "advertencia": "ADVERTENCIA",
    "nota": "NOTA",
}

@dataclass(frozen=True)
class Diagnostic:
    """Estructura de un diagnóstico para reportar problemas.

    Abarca errores, advertencias y notas, con ubicación opcional (archivo, línea y columna)
    y un mensaje de ayuda (pista) para orientar la corrección.
    """
    severity: Severity
    message: str
    line: Optional[int] = None
    col: Optional[int] = None
    hint: Optional[str] = None
    file: Optional[str] = None

    def __str__(self) -> str:
        loc = ""
        if self.file is not None:
            loc += f"{self.file}:"
        if self.line is not None:
            loc += f"{self.line}"
            if self.col is not None:
                loc += f":{self.col}"
        if loc:
            loc += ": "
        sev = _SEV_TO_LABEL.get(self.severity, str(self.severity).upper())
        core = f"{sev}: {self.message}"
        if self.hint:
            core += f"  (pista: {self.hint})"
        return loc + core

def error(message: str, *, line: int | None = None, col: int | None = None,
          file: str | None = None, hint: str | None = None) -> Diagnostic:
    """Crea un diagnóstico de tipo error."""
    return Diagnostic("error", message, line, col, hint, file)

# ---------- Errores (todos terminales para la unidad en curso) ----------

class AssembleError(Exception):
    """Base de todos los errores del ensamblador.

    Lleva la ubicación del problema para que quien llama pueda generar
    un diagnóstico preciso (``err.diagnostic``).
    """

    def __init__(self, message: str, *, line: int | None = None, col: int | None = None,
                 file: str | None = None, hint: str | None = None):
        super().__init__(message)
        self.message = message
        self.line = line
        self.col = col
        self.file = file
        self.hint = hint

    @property
    def diagnostic(self) -> Diagnostic:
        return error(self.message, line=self.line, col=self.col, file=self.file, hint=self.hint)

    def __str__(self) -> str:
        return str(self.diagnostic)

class AsmSyntaxError(AssembleError):
    """Token o sentencia mal formada."""

class MissingArgumentError(AsmSyntaxError):
    def __init__(self, macro: str, got: int, expected: int, **loc):
        super().__init__(f"%{macro} requiere {expected} argumento(s), recibió {got}", **loc)
        self.macro, self.got, self.expected = macro, got, expected

class ExtraArgumentError(AsmSyntaxError):
    def __init__(self, macro: str, got: int, expected: int, **loc):
        super().__init__(f"%{macro} acepta {expected} argumento(s), recibió {got}", **loc)
        self.macro, self.got, self.expected = macro, got, expected

class ArgumentTypeError(AsmSyntaxError):
    def __init__(self, macro: str, index: int, expected: str, **loc):
        super().__init__(f"%{macro}: el argumento {index} debe ser {expected}", **loc)
        self.macro, self.index, self.expected = macro, index, expected

class UndefinedLabelError(AssembleError):
    def __init__(self, label: str, **loc):
        super().__init__(f"Etiqueta no definida: {label}", **loc)
        self.label = label

class DuplicateLabelError(AssembleError):
    def __init__(self, label: str, *, first_line: int | None = None, **loc):
        hint = f"definida antes en la línea {first_line}" if first_line is not None else None
        super().__init__(f"Etiqueta redefinida: {label}", hint=hint, **loc)
        self.label = label
        self.first_line = first_line

class CyclicIncludeError(AssembleError):
    def __init__(self, path: str, chain: Sequence[str], **loc):
        cycle = " -> ".join([*chain, path])
        super().__init__(f"Inclusión cíclica de '{path}'", hint=cycle, **loc)
        self.path = path
        self.chain = tuple(chain)

class IncludeError(AssembleError):
    """El callback de resolución falló o el contenido incluido es inválido."""

    def __init__(self, path: str, reason: str, **loc):
        super().__init__(f"No se pudo incluir '{path}': {reason}", **loc)
        self.path = path

class ResolutionError(AssembleError):
    """Las direcciones de etiquetas no convergen en el número de pasadas permitido."""

_PREFIX = {2: ("0b", "b"), 8: ("0o", "o"), 10: ("", "d"), 16: ("0x", "x")}

def format_value(value: int, base: int = 16) -> str:
    """Escribe un entero en la base en que apareció en el fuente."""
    prefix, spec = _PREFIX[base]
    return prefix + format(value, spec)

class ValueTooLargeError(AssembleError):
    def __init__(self, value: int, width: int, *, base: int = 16, **loc):
        super().__init__(f"Valor {format_value(value, base)} no cabe en {width} byte(s)",
                         hint=f"máximo 0x{(1 << (8 * width)) - 1:x}", **loc)
        self.value = value
        self.width = width
        self.base = base

class UnresolvedMacroError(AssembleError):
    """Invariante interno: un nodo macro llegó a una etapa posterior a la expansión."""
