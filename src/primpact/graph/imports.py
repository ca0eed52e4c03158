"""Import extraction, relative-import resolution and reverse dependencies."""

from __future__ import annotations

import asyncio
import logging
import posixpath
import re
from pathlib import Path

import networkx as nx

from primpact.config import ScanConfig
from primpact.files import collect_files, read_text

logger = logging.getLogger("primpact.graph")

STATIC_IMPORT_RE = re.compile(r"""(?:import|export)\s+(?:[^'";]*?\s+from\s+)?['"]([^'"]+)['"]""")
DYNAMIC_IMPORT_RE = re.compile(r"""import\s*\(\s*['"]([^'"]+)['"]\s*\)""")
REQUIRE_RE = re.compile(r"""require\s*\(\s*['"]([^'"]+)['"]\s*\)""")

RESOLVE_EXTENSIONS = [".ts", ".tsx", ".js", ".jsx"]
INDEX_FILES = ["index.ts", "index.tsx", "index.js", "index.jsx"]
SOURCE_PATTERNS = [f"*{ext}" for ext in RESOLVE_EXTENSIONS]


def extract_import_paths(content: str) -> list[str]:
    """All module specifiers from import/export-from, import() and require()."""
    paths = []
    for pattern in (STATIC_IMPORT_RE, DYNAMIC_IMPORT_RE, REQUIRE_RE):
        paths.extend(m.group(1) for m in pattern.finditer(content))
    return paths


def is_relative_import(import_path: str) -> bool:
    return import_path.startswith("./") or import_path.startswith("../")


def _match_module(module: str, all_files: set[str] | frozenset[str]) -> str | None:
    if module in all_files:
        return module
    for ext in RESOLVE_EXTENSIONS:
        if module + ext in all_files:
            return module + ext
    for index_file in INDEX_FILES:
        candidate = f"{module}/{index_file}" if module else index_file
        if candidate in all_files:
            return candidate
    return None


def resolve_import(
    import_path: str,
    importer: str,
    all_files: set[str] | frozenset[str],
) -> str | None:
    """Resolve a relative import to a repo-relative path that exists in ``all_files``.

    Tries the exact path, then each resolvable extension, then an index file
    inside the target as a directory. Returns None if nothing matches.
    """
    importer_dir = posixpath.dirname(importer)
    joined = posixpath.normpath(posixpath.join("/", importer_dir, import_path))
    return _match_module(joined.lstrip("/"), all_files)


class ReverseDependencyMap:
    """Which files import which, over the whole repository.

    Backed by a directed graph whose edges point from importer to imported
    file. Read-only once built.
    """

    def __init__(self, files: list[str] | None = None) -> None:
        self.graph = nx.DiGraph()
        self.files: frozenset[str] = frozenset(files or [])

    def add_import(self, importer: str, imported: str) -> None:
        self.graph.add_edge(importer, imported, kind="imports")

    def dependents(self, path: str) -> list[str]:
        """Files that import ``path``, in discovery order."""
        if not self.graph.has_node(path):
            return []
        return list(self.graph.predecessors(path))

    def __contains__(self, path: object) -> bool:
        return self.graph.has_node(path) and self.graph.in_degree(path) > 0

    def __len__(self) -> int:
        """Number of files that are imported by at least one other file."""
        return sum(1 for _, degree in self.graph.in_degree() if degree > 0)


async def build_reverse_dependency_map(
    root: str | Path,
    config: ScanConfig | None = None,
) -> ReverseDependencyMap:
    """Scan every source file in the repository and record its relative imports.

    Files are read in fixed-size concurrent batches; unreadable files are
    skipped. The map is complete when this returns.
    """
    root = Path(root).resolve()
    config = config or ScanConfig()

    rel_paths = await asyncio.to_thread(collect_files, root, SOURCE_PATTERNS, config)
    reverse = ReverseDependencyMap(rel_paths)

    for start in range(0, len(rel_paths), config.batch_size):
        batch = rel_paths[start:start + config.batch_size]
        contents = await asyncio.gather(
            *(asyncio.to_thread(_read_or_none, root, rel_path) for rel_path in batch)
        )
        for rel_path, content in zip(batch, contents):
            if content is None:
                continue
            for import_path in extract_import_paths(content):
                if not is_relative_import(import_path):
                    continue
                resolved = resolve_import(import_path, rel_path, reverse.files)
                if resolved is not None:
                    reverse.add_import(rel_path, resolved)

    logger.debug(
        "Scanned %d source files, %d imported by others", len(rel_paths), len(reverse)
    )
    return reverse


def _read_or_none(root: Path, rel_path: str) -> str | None:
    try:
        return read_text(root, rel_path)
    except (OSError, UnicodeDecodeError) as e:
        logger.debug("Skipping unreadable file %s: %s", rel_path, e)
        return None


def find_consumers(
    targets: set[str] | list[str],
    reverse_deps: ReverseDependencyMap,
) -> dict[str, list[str]]:
    """Map each target file to the files that import it."""
    return {target: reverse_deps.dependents(target) for target in targets}


class DependencyCache:
    """Reverse-dependency maps for one or more repositories.

    Create one per analysis (or share one deliberately across calls and
    invalidate it when the working tree changes). Concurrent ``get`` calls for
    the same repository share a single scan.
    """

    def __init__(self, config: ScanConfig | None = None) -> None:
        self.config = config or ScanConfig()
        self._maps: dict[Path, ReverseDependencyMap] = {}
        self._pending: dict[Path, asyncio.Future[ReverseDependencyMap]] = {}

    async def get(self, root: str | Path) -> ReverseDependencyMap:
        key = Path(root).resolve()
        if key in self._maps:
            return self._maps[key]
        if key in self._pending:
            return await self._pending[key]

        task = asyncio.ensure_future(build_reverse_dependency_map(key, self.config))
        self._pending[key] = task
        try:
            reverse = await task
        finally:
            self._pending.pop(key, None)
        self._maps[key] = reverse
        return reverse

    def invalidate(self, root: str | Path | None = None) -> None:
        """Drop the cached map for ``root``, or every map when root is None."""
        if root is None:
            self._maps.clear()
        else:
            self._maps.pop(Path(root).resolve(), None)

    def __contains__(self, root: object) -> bool:
        if not isinstance(root, (str, Path)):
            return False
        return Path(root).resolve() in self._maps


async def find_importers(
    cache: DependencyCache,
    root: str | Path,
    module_path: str,
) -> list[str]:
    """Files importing ``module_path``, given with or without extension or /index."""
    reverse = await cache.get(root)
    module = posixpath.normpath(module_path.replace("\\", "/")).lstrip("/")
    resolved = _match_module(module, reverse.files)
    if resolved is None:
        return []
    return reverse.dependents(resolved)
