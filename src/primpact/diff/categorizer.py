"""Classify repository paths as source, test, doc, config or other."""

from __future__ import annotations

from primpact.models import FileCategory

SOURCE_EXTENSIONS = {
    ".ts", ".tsx", ".js", ".jsx",
    ".py", ".go", ".rs", ".java",
    ".c", ".cpp", ".h",
    ".rb", ".php", ".swift",
    ".kt", ".scala", ".cs",
    ".vue", ".svelte",
}

DOC_EXTENSIONS = {".md", ".mdx", ".txt", ".rst"}

CONFIG_FILENAMES = {
    "package.json",
    "tsconfig.json",
    "turbo.json",
    "dockerfile",
    "makefile",
    ".gitignore",
    ".npmrc",
    "pnpm-workspace.yaml",
    "pnpm-lock.yaml",
    "yarn.lock",
    "package-lock.json",
}

CONFIG_PREFIXES = (
    ".eslintrc",
    ".prettierrc",
    "webpack.config.",
    "vite.config.",
    "jest.config.",
    "vitest.config.",
    "docker-compose.",
    ".env",
)

TEST_DIRECTORIES = {"__tests__", "test", "tests"}


def categorize(path: str) -> FileCategory:
    """Map a repository-relative path to exactly one category.

    Test patterns win over every other rule, then docs, then config files,
    then source extensions.
    """
    normalized = path.replace("\\", "/")
    if _is_test(normalized):
        return FileCategory.TEST
    if _is_doc(normalized):
        return FileCategory.DOC
    if _is_config(normalized):
        return FileCategory.CONFIG
    if file_extension(normalized) in SOURCE_EXTENSIONS:
        return FileCategory.SOURCE
    return FileCategory.OTHER


def file_extension(path: str) -> str:
    """Lowercased extension of the final path segment, including the dot."""
    name = path.rsplit("/", 1)[-1]
    dot = name.rfind(".")
    if dot == -1:
        return ""
    return name[dot:].lower()


def _is_test(path: str) -> bool:
    *dirs, filename = path.split("/")
    if any(d in TEST_DIRECTORIES for d in dirs):
        return True
    return ".test." in filename or ".spec." in filename or filename.startswith("test")


def _is_doc(path: str) -> bool:
    return (
        file_extension(path) in DOC_EXTENSIONS
        or path.startswith("docs/")
        or path.startswith("doc/")
    )


def _is_config(path: str) -> bool:
    if path.startswith(".github/"):
        return True
    filename = path.rsplit("/", 1)[-1].lower()
    if filename in CONFIG_FILENAMES:
        return True
    return filename.startswith(CONFIG_PREFIXES)
