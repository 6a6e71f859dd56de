from __future__ import annotations
import re
from typing import List, Optional, Tuple

def _scan_unquoted(s: str, stops: str):
    """Yield (index, char) for chars in `stops` that sit outside "..." strings."""
    quoted = False
    escaped = False
    for i, ch in enumerate(s):
        if quoted:
            if escaped:
                escaped = False
            elif ch == '\\':
                escaped = True
            elif ch == '"':
                quoted = False
            continue
        if ch == '"':
            quoted = True
        elif ch in stops:
            yield i, ch

def strip_comment(line: str) -> str:
    """Remove a '#' comment (outside string literals) and trailing blanks."""
    for i, _ in _scan_unquoted(line, "#"):
        return line[:i].rstrip()
    return line.rstrip()

def split_statements(line: str) -> List[Tuple[int, str]]:
    """Split a comment-free line on ';' -> [(col, stmt)], col 1-based, blanks dropped."""
    cuts = [i for i, _ in _scan_unquoted(line, ";")]
    out = []
    start = 0
    for end in cuts + [len(line)]:
        piece = line[start:end]
        text = piece.strip()
        if text:
            lead = len(piece) - len(piece.lstrip())
            out.append((start + lead + 1, text))
        start = end + 1
    return out

LABEL_RE = re.compile(r"^([A-Za-z][A-Za-z0-9_]*):\s*(.*)$")

def split_label(stmt: str) -> Tuple[Optional[str], str, int]:
    """Return (label, rest, offset of rest) if stmt starts with 'label:', else (None, stmt, 0)."""
    m = LABEL_RE.match(stmt)
    if not m:
        return None, stmt, 0
    return m.group(1), m.group(2), m.start(2)

def split_mnemonic_operands(stmt: str) -> Tuple[str, str]:
    s = stmt.strip()
    if not s:
        return "", ""
    parts = s.split(None, 1)
    if len(parts) == 1:
        return parts[0].lower(), ""
    return parts[0].lower(), parts[1].strip()

MACRO_RE = re.compile(r"^%([A-Za-z_][A-Za-z0-9_]*)\s*\((.*)\)$")

def split_macro(stmt: str) -> Optional[Tuple[str, str]]:
    """'%name(args)' -> (name, args), or None if stmt is not a well-formed macro call."""
    m = MACRO_RE.match(stmt.strip())
    if not m:
        return None
    return m.group(1), m.group(2)

def split_operands(op_str: str) -> List[str]:
    if not op_str.strip():
        return []
    # split by commas but not inside parentheses or strings
    out = []
    depth = 0
    start = 0
    for i, ch in _scan_unquoted(op_str, "(),"):
        if ch == '(':
            depth += 1
        elif ch == ')':
            depth = max(0, depth-1)
        elif depth == 0:
            out.append(op_str[start:i].strip())
            start = i + 1
    out.append(op_str[start:].strip())
    return out
