# src/solflat/core/scanner.py
import re
from pathlib import Path
from typing import List, Set, Tuple

from solflat.models import Directive, DirectiveKind, ImportStatement, SourceFile

IMPORT_RE = re.compile(r"(?<![\w$.])import\b[^;]*;")
PRAGMA_RE = re.compile(r"(?<![\w$.])pragma\b[^;]*;")
LICENSE_RE = re.compile(r"//[ \t]*SPDX-License-Identifier:[^\r\n]*")
QUOTED_RE = re.compile(r"\"([^\"\r\n]*)\"|'([^'\r\n]*)'")
THREE_OR_MORE_NEWLINES_RE = re.compile(r"(?:[ \t]*\r?\n){3,}")

_REMOVED = "\x00"


def mask_source(text: str) -> Tuple[str, Set[int]]:
    """
    Returns a copy of `text` with comments and string literal bodies blanked out.

    Offsets are preserved (newlines survive), so a match found in the masked
    text can be sliced straight out of the source. Also returns the offsets
    where line comments start, which is where license identifiers live.
    """
    out = list(text)
    line_comment_starts: Set[int] = set()
    i, n = 0, len(text)

    while i < n:
        ch = text[i]
        nxt = text[i + 1] if i + 1 < n else ""

        if ch == "/" and nxt == "/":
            line_comment_starts.add(i)
            while i < n and text[i] != "\n":
                out[i] = " "
                i += 1
        elif ch == "/" and nxt == "*":
            end = text.find("*/", i + 2)
            end = n if end == -1 else end + 2
            for j in range(i, end):
                if text[j] != "\n":
                    out[j] = " "
            i = end
        elif ch in "\"'":
            # Keep the quotes, blank the literal body
            i += 1
            while i < n and text[i] != ch and text[i] != "\n":
                if text[i] == "\\" and i + 1 < n:
                    out[i] = " "
                    i += 1
                out[i] = " "
                i += 1
            i += 1
        else:
            i += 1

    return "".join(out), line_comment_starts


def find_imports(text: str, masked: str) -> List[ImportStatement]:
    imports = []
    for m in IMPORT_RE.finditer(masked):
        quoted = QUOTED_RE.search(text, m.start(), m.end())
        # An empty specifier marks a statement with no quoted path
        specifier = ""
        if quoted is not None:
            specifier = quoted.group(1) if quoted.group(1) is not None else quoted.group(2)
        imports.append(ImportStatement(specifier=specifier, start=m.start(), end=m.end()))
    return imports


def find_directives(text: str, masked: str, line_comment_starts: Set[int]) -> List[Directive]:
    """Licenses and pragmas in source order."""
    found = []
    for m in LICENSE_RE.finditer(text):
        if m.start() in line_comment_starts:
            found.append(Directive(DirectiveKind.LICENSE, m.group(0).strip(), m.start(), m.end()))
    for m in PRAGMA_RE.finditer(masked):
        found.append(Directive(DirectiveKind.PRAGMA, text[m.start():m.end()].strip(), m.start(), m.end()))
    found.sort(key=lambda d: d.start)
    return found


def strip_spans(text: str, spans: List[Tuple[int, int]]) -> str:
    """
    Removes the given spans. A line left holding nothing but whitespace after
    the removal is dropped entirely, newline included.
    """
    if not spans:
        return text

    pieces = []
    cursor = 0
    for start, end in sorted(spans):
        if start < cursor:
            continue
        pieces.append(text[cursor:start])
        pieces.append(_REMOVED)
        cursor = end
    pieces.append(text[cursor:])
    marked = "".join(pieces)

    lines = []
    for line in marked.splitlines(keepends=True):
        if _REMOVED not in line:
            lines.append(line)
            continue
        remainder = line.replace(_REMOVED, "")
        if remainder.strip():
            lines.append(remainder)
    return "".join(lines)


def normalize_body(body: str) -> str:
    return THREE_OR_MORE_NEWLINES_RE.sub("\n\n", body).strip()


def scan_source(path: Path, content: str) -> SourceFile:
    masked, line_comment_starts = mask_source(content)
    imports = find_imports(content, masked)
    directives = find_directives(content, masked, line_comment_starts)

    spans = [(i.start, i.end) for i in imports] + [(d.start, d.end) for d in directives]
    body = normalize_body(strip_spans(content, spans))

    return SourceFile(
        path=path,
        content=content,
        imports=tuple(imports),
        directives=tuple(directives),
        body=body,
    )
