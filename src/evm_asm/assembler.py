from __future__ import annotations
import argparse, logging, os, sys
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .ast import Op
from .parser import parse
from .expander import expand, Resolve, PathKey
from .literals import evaluate
from .linker import resolve_layout, Layout
from .encoding import encode
from .diagnostics import AssembleError
from .writers import write_hex, write_bin, to_hex_text

log = logging.getLogger(__name__)

@dataclass(frozen=True)
class Assembly:
    """Resultado del ensamblado: bytecode, etiquetas -> offset y flujo resuelto."""
    code: bytes
    labels: Dict[str, int]
    ops: List[Op]
    layout: Layout

class FileResolver:
    """Resuelve %import/%include/%include_hex contra un directorio base.

    Todas las rutas, también las de un %import anidado, se resuelven contra
    `base_dir` y no contra el directorio del archivo que importa: dentro de
    'lib/a.asm', `%import("lib/b.asm")` apunta a `base_dir/lib/b.asm`.

    `key` canonicaliza la ruta en el sistema de archivos (realpath), así
    'lib/a.asm' y './lib/../lib/a.asm' cuentan como el mismo módulo.
    Devuelve bytes; la decodificación UTF-8 la hace el expansor.
    """

    def __init__(self, base_dir: str):
        self.base_dir = base_dir

    def path_of(self, path: str) -> str:
        return os.path.join(self.base_dir, path)

    def __call__(self, path: str) -> bytes:
        with open(self.path_of(path), "rb") as f:
            return f.read()

    def key(self, path: str) -> str:
        return os.path.realpath(self.path_of(path))

def _no_files(path: str) -> str:
    raise LookupError(f"no hay resolvedor de archivos para '{path}'")

def assemble_text(
    text: str,
    *,
    filename: Optional[str] = None,
    resolve: Optional[Resolve] = None,
    key: Optional[PathKey] = None,
    chain: Iterable[str] = (),
    max_passes: Optional[int] = None,
) -> Assembly:
    """Parsea, expande macros, evalúa literales, resuelve direcciones y emite.

    Lanza una subclase de AssembleError ante cualquier problema; no hay
    salida parcial."""
    nodes = parse(text, filename=filename)
    ops = expand(nodes, resolve or _no_files, key=key, chain=chain, max_passes=max_passes)
    ops = evaluate(ops)
    layout = resolve_layout(ops, max_passes=max_passes)
    code = encode(ops, layout)
    return Assembly(code=code, labels=dict(layout.labels), ops=ops, layout=layout)

def assemble_file(path: str, *, include_dir: Optional[str] = None,
                  max_passes: Optional[int] = None) -> Assembly:
    """Ensambla un archivo; las inclusiones se buscan en include_dir (o junto al archivo)."""
    resolver = FileResolver(include_dir or os.path.dirname(os.path.abspath(path)))
    with open(path, "rb") as f:
        data = f.read()
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as ex:
        raise AssembleError("El archivo fuente no es UTF-8 válido", file=path) from ex
    return assemble_text(text, filename=path, resolve=resolver, key=resolver.key,
                         chain=(resolver.key(os.path.abspath(path)),), max_passes=max_passes)

def _labels_table(labels: Dict[str, int]) -> Table:
    table = Table(title="Etiquetas")
    table.add_column("offset", justify="right", style="cyan")
    table.add_column("etiqueta", style="magenta")
    for name, addr in sorted(labels.items(), key=lambda kv: (kv[1], kv[0])):
        table.add_row(f"0x{addr:04x}", name)
    return table

def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="EVM assembler")
    ap.add_argument("source", help="archivo .asm de entrada")
    ap.add_argument("out", nargs="?", help="archivo de salida (por defecto, hex por stdout)")
    ap.add_argument("--bin", action="store_true", help="escribir bytes crudos en lugar de hex")
    ap.add_argument("--labels", action="store_true", help="mostrar la tabla de etiquetas")
    ap.add_argument("--include-dir", help="directorio base para %%import/%%include")
    ap.add_argument("-v", "--verbose", action="store_true", help="trazas de depuración")
    args = ap.parse_args(argv)

    if args.bin and not args.out:
        ap.error("--bin requiere un archivo de salida")

    console = Console(stderr=True)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )

    try:
        asm = assemble_file(args.source, include_dir=args.include_dir)
    except AssembleError as ex:
        print(ex.diagnostic, file=sys.stderr)
        return 1
    except OSError as ex:
        print(f"ERROR: no pude leer {args.source}: {ex}", file=sys.stderr)
        return 2

    if args.labels:
        console.print(_labels_table(asm.labels))

    if not args.out:
        sys.stdout.write(to_hex_text(asm.code))
        return 0

    try:
        if args.bin:
            write_bin(asm.code, args.out)
        else:
            write_hex(asm.code, args.out)
    except OSError as ex:
        print(f"ERROR al escribir salidas: {ex}", file=sys.stderr)
        return 3

    log.info("OK: %d bytes, %d pasada(s) → %s", len(asm.code), asm.layout.passes, args.out)
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
