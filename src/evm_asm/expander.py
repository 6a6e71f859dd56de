'''
expansión de macros: %import, %include, %include_hex, %push
'''

from __future__ import annotations
import logging
from typing import Callable, Iterable, List, Optional, Set, Tuple, Union

from .ast import (
    Node, Op, Import, Include, IncludeHex, PushMacro, AutoPush, Raw, loc,
)
from .parser import parse
from .literals import evaluate
from .linker import resolve_layout
from .encoding import encode
from .diagnostics import CyclicIncludeError, IncludeError

log = logging.getLogger(__name__)

# resolve(path) -> texto fuente (o bytes UTF-8)
Resolve = Callable[[str], Union[str, bytes]]
# key(path) -> identidad de la ruta para deduplicar %import y detectar ciclos
PathKey = Callable[[str], str]

def _same_path(path: str) -> str:
    return path

def _load(node: Union[Import, Include, IncludeHex], resolve: Resolve) -> str:
    try:
        src = resolve(node.path)
    except (OSError, LookupError) as ex:
        raise IncludeError(node.path, str(ex) or type(ex).__name__, **loc(node)) from ex
    if isinstance(src, bytes):
        try:
            return src.decode("utf-8")
        except UnicodeDecodeError as ex:
            raise IncludeError(node.path, "no es UTF-8 válido", **loc(node)) from ex
    return src

def _decode_hex(text: str, node: IncludeHex) -> bytes:
    digits = "".join(text.split())
    if digits[:2] in ("0x", "0X"):
        digits = digits[2:]
    try:
        return bytes.fromhex(digits)
    except ValueError as ex:
        raise IncludeError(node.path, "contenido hexadecimal inválido", **loc(node)) from ex

def _enter(node: Union[Import, Include], key: PathKey, chain: Tuple[str, ...]) -> str:
    k = key(node.path)
    if k in chain:
        raise CyclicIncludeError(node.path, chain, **loc(node))
    return k

def _assemble_unit(nodes: List[Node], resolve: Resolve, key: PathKey,
                   chain: Tuple[str, ...], max_passes: Optional[int]) -> bytes:
    """Ensambla una unidad independiente (etiquetas y offsets propios)."""
    ops = evaluate(expand(nodes, resolve, key=key, chain=chain, max_passes=max_passes))
    layout = resolve_layout(ops, max_passes=max_passes)
    return encode(ops, layout)

def _expand(nodes: Iterable[Node], resolve: Resolve, key: PathKey,
            chain: Tuple[str, ...], imported: Set[str],
            max_passes: Optional[int]) -> List[Op]:
    out: List[Op] = []
    for n in nodes:
        if isinstance(n, Import):
            k = _enter(n, key, chain)
            if k in imported:
                log.debug("%%import(%r) ya importado, se omite", n.path)
                continue
            imported.add(k)
            log.debug("%%import(%r)", n.path)
            sub = parse(_load(n, resolve), filename=n.path)
            out.extend(_expand(sub, resolve, key, chain + (k,), imported, max_passes))
            continue

        if isinstance(n, Include):
            k = _enter(n, key, chain)
            log.debug("%%include(%r)", n.path)
            sub = parse(_load(n, resolve), filename=n.path)
            data = _assemble_unit(sub, resolve, key, chain + (k,), max_passes)
            out.append(Raw(data=data, source=n.path, **loc(n)))
            continue

        if isinstance(n, IncludeHex):
            data = _decode_hex(_load(n, resolve), n)
            log.debug("%%include_hex(%r): %d bytes", n.path, len(data))
            out.append(Raw(data=data, source=n.path, **loc(n)))
            continue

        if isinstance(n, PushMacro):
            out.append(AutoPush(operand=n.operand, **loc(n)))
            continue

        out.append(n)
    return out

def expand(
    nodes: List[Node],
    resolve: Resolve,
    *,
    key: Optional[PathKey] = None,
    chain: Iterable[str] = (),
    max_passes: Optional[int] = None,
) -> List[Op]:
    """Expande recursivamente las macros de una unidad de ensamblado.

    - %import: inserta las sentencias del archivo (mismo espacio de etiquetas);
      una ruta ya importada en esta unidad se omite.
    - %include: ensambla el archivo como unidad aparte e inserta sus bytes.
    - %include_hex: inserta los bytes del archivo hexadecimal.
    - %push: se convierte en AutoPush (ancho decidido por el resolvedor).

    `chain` es la pila de rutas activas (identidades según `key`); volver a
    entrar en una de ellas lanza CyclicIncludeError.
    """
    return _expand(nodes, resolve, key or _same_path, tuple(chain), set(), max_passes)
