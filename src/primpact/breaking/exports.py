"""Structural extraction of exported symbols from TypeScript/JavaScript.

This is pattern matching over comment-stripped text, not a parser: it trades
a bounded number of false positives/negatives for needing no toolchain. The
patterns are applied in a fixed order and the first occurrence of a
``(is_default, name)`` pair wins.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from primpact.models import ExportedSymbol, FileExports, SymbolKind

# export [async] function NAME(...)[: R]
EXPORT_FUNCTION_RE = re.compile(
    r"export\s+(?:async\s+)?function\s+(\w+)\s*(\([^)]*\)(?:\s*:\s*[^{;]+)?)"
)

# export default [async] function NAME(...)[: R]
EXPORT_DEFAULT_FUNCTION_RE = re.compile(
    r"export\s+default\s+(?:async\s+)?function\s+(\w+)\s*(\([^)]*\)(?:\s*:\s*[^{;]+)?)"
)

# export default [async] function (...)[: R]
EXPORT_DEFAULT_ANON_FUNCTION_RE = re.compile(
    r"export\s+default\s+(?:async\s+)?function\s*(\([^)]*\)(?:\s*:\s*[^{;]+)?)"
)

EXPORT_DEFAULT_CLASS_RE = re.compile(r"export\s+default\s+(?:abstract\s+)?class\s+(\w+)")
EXPORT_CLASS_RE = re.compile(r"export\s+(?:abstract\s+)?class\s+(\w+)")

# export const|let|var NAME[: Type] (= ... | ;)
EXPORT_VARIABLE_RE = re.compile(
    r"export\s+(const|let|var)\s+(\w+)\s*(?::\s*([^=;]+?))?(?:\s*=|;)"
)

EXPORT_INTERFACE_RE = re.compile(r"export\s+interface\s+(\w+)")
EXPORT_TYPE_RE = re.compile(r"export\s+type\s+(\w+)")
EXPORT_ENUM_RE = re.compile(r"export\s+enum\s+(\w+)")

# export [type] { a, b as c, d as default }
EXPORT_NAMED_RE = re.compile(r"export\s*(type\s*)?\{([^}]+)\}")

# export default IDENT, for anything not matched by the patterns above
EXPORT_DEFAULT_EXPR_RE = re.compile(
    r"export\s+default\s+(?!(?:function|class|abstract|interface|type|enum|async)\b)(\w+)"
)

_BLOCK_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
_LINE_COMMENT_RE = re.compile(r"//.*$", re.MULTILINE)
_WHITESPACE_RE = re.compile(r"\s+")
_DEFAULT_BEFORE_RE = re.compile(r"default\s*$")
_AS_RE = re.compile(r"^(\w+)\s+as\s+(\w+)$")
_IDENTIFIER_RE = re.compile(r"^\w+$")


def strip_comments(content: str) -> str:
    """Remove block and line comments so exports inside them are ignored."""
    return _LINE_COMMENT_RE.sub("", _BLOCK_COMMENT_RE.sub("", content))


def normalize_signature(sig: str) -> str:
    """Collapse runs of whitespace to single spaces."""
    return _WHITESPACE_RE.sub(" ", sig).strip()


class _SymbolCollector:
    def __init__(self) -> None:
        self.symbols: list[ExportedSymbol] = []
        self._seen: set[tuple[bool, str]] = set()

    def add(
        self,
        name: str,
        kind: SymbolKind,
        signature: str | None = None,
        is_default: bool = False,
    ) -> None:
        sym = ExportedSymbol(name=name, kind=kind, signature=signature, is_default=is_default)
        if sym.key not in self._seen:
            self._seen.add(sym.key)
            self.symbols.append(sym)


def _preceded_by_default(text: str, index: int) -> bool:
    return bool(_DEFAULT_BEFORE_RE.search(text[max(0, index - 10):index]))


def parse_exports(content: str, file_path: str) -> FileExports:
    """Extract every exported symbol from a module's source text."""
    text = strip_comments(content)
    out = _SymbolCollector()

    # 1. export default function NAME(...)
    for m in EXPORT_DEFAULT_FUNCTION_RE.finditer(text):
        out.add(m.group(1), SymbolKind.FUNCTION, normalize_signature(m.group(2)), True)

    # 2. export default function (...)
    for m in EXPORT_DEFAULT_ANON_FUNCTION_RE.finditer(text):
        out.add("default", SymbolKind.FUNCTION, normalize_signature(m.group(1)), True)

    # 3. export function NAME(...)
    for m in EXPORT_FUNCTION_RE.finditer(text):
        if _preceded_by_default(text, m.start()):
            continue
        out.add(m.group(1), SymbolKind.FUNCTION, normalize_signature(m.group(2)))

    # 4. export default class NAME
    for m in EXPORT_DEFAULT_CLASS_RE.finditer(text):
        out.add(m.group(1), SymbolKind.CLASS, is_default=True)

    # 5. export class NAME
    for m in EXPORT_CLASS_RE.finditer(text):
        if _preceded_by_default(text, m.start()):
            continue
        out.add(m.group(1), SymbolKind.CLASS)

    # 6. export const/let/var NAME[: Type]
    for m in EXPORT_VARIABLE_RE.finditer(text):
        keyword, name, annotation = m.groups()
        kind = SymbolKind.CONST if keyword == "const" else SymbolKind.VARIABLE
        out.add(name, kind, normalize_signature(annotation) if annotation else None)

    # 7. export interface NAME
    for m in EXPORT_INTERFACE_RE.finditer(text):
        out.add(m.group(1), SymbolKind.INTERFACE)

    # 8. export type NAME
    for m in EXPORT_TYPE_RE.finditer(text):
        if text[m.end():].lstrip().startswith("{"):
            continue
        out.add(m.group(1), SymbolKind.TYPE)

    # 9. export enum NAME
    for m in EXPORT_ENUM_RE.finditer(text):
        out.add(m.group(1), SymbolKind.ENUM)

    # 10. export { a, b as c } / export type { ... }
    for m in EXPORT_NAMED_RE.finditer(text):
        block_is_type = m.group(1) is not None
        for item in m.group(2).split(","):
            item = item.strip()
            item_is_type = block_is_type
            if item.startswith("type "):
                item_is_type = True
                item = item[5:].strip()
            if not item:
                continue

            is_default = False
            as_match = _AS_RE.match(item)
            if as_match:
                name = as_match.group(2)
                if name == "default":
                    is_default = True
                    name = as_match.group(1)
            else:
                name = item

            if not _IDENTIFIER_RE.match(name):
                continue
            kind = SymbolKind.TYPE if item_is_type else SymbolKind.VARIABLE
            out.add(name, kind, is_default=is_default)

    # 11. export default IDENT
    for m in EXPORT_DEFAULT_EXPR_RE.finditer(text):
        out.add(m.group(1), SymbolKind.VARIABLE, is_default=True)

    return FileExports(file_path=file_path, symbols=out.symbols)


@dataclass
class ExportDiff:
    """Exports removed, added and modified between two versions of a file."""

    removed: list[ExportedSymbol] = field(default_factory=list)
    added: list[ExportedSymbol] = field(default_factory=list)
    modified: list[tuple[ExportedSymbol, ExportedSymbol]] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.removed or self.added or self.modified)


def diff_exports(file_path: str, base_content: str, head_content: str) -> ExportDiff:
    """Compare the exports of the base and head versions of a file."""
    base_map = {s.key: s for s in parse_exports(base_content, file_path).symbols}
    head_map = {s.key: s for s in parse_exports(head_content, file_path).symbols}

    result = ExportDiff()
    for key, before in base_map.items():
        after = head_map.get(key)
        if after is None:
            result.removed.append(before)
            continue
        kind_changed = before.kind != after.kind
        sig_changed = (
            normalize_signature(before.signature or "")
            != normalize_signature(after.signature or "")
        )
        if kind_changed or sig_changed:
            result.modified.append((before, after))

    for key, after in head_map.items():
        if key not in base_map:
            result.added.append(after)

    return result
