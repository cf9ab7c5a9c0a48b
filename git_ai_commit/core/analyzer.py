"""Analyzer module for staged diffs: changed files, type inference and size clamping."""

import re

from .validation import CommitType

DIFF_HEADER_PATTERN = re.compile(r"^diff --git a/(.+?) b/(.+)$", re.MULTILINE)

DIFF_TRUNCATION_MARKER = "\n\n--- DIFF TRUNCATED ---\n\n"

DOC_EXTENSIONS = (".md", ".mdx", ".rst")
DOC_DIRECTORIES = {"docs"}

TEST_DIRECTORIES = {"test", "tests", "__tests__"}
TEST_PATTERN = re.compile(r"\.(?:spec|test)\.(?:ts|tsx|js|jsx|mjs|cjs|py)$")
PYTHON_TEST_PATTERN = re.compile(r"(?:^|/)(?:test_[^/]*|[^/]*_test)\.py$")

CI_PREFIXES = (
    ".github/workflows/",
    ".gitlab-ci",
    ".circleci/",
    "azure-pipelines",
    ".travis.yml",
    ".buildkite/",
    "jenkinsfile",
)

BUILD_FILES = {
    "package.json",
    "package-lock.json",
    "yarn.lock",
    "pnpm-lock.yaml",
    "pyproject.toml",
    "poetry.lock",
    "setup.py",
    "setup.cfg",
    "requirements.txt",
    "dockerfile",
    "docker-compose.yml",
    "makefile",
}
BUILD_SUFFIXES = ("/dockerfile", "/docker-compose.yml", "/package.json")


def _directories(path: str) -> list[str]:
    return path.split("/")[:-1]


def is_documentation_file(path: str) -> bool:
    return path.endswith(DOC_EXTENSIONS) or any(d in DOC_DIRECTORIES for d in _directories(path))


def is_test_file(path: str) -> bool:
    if any(d in TEST_DIRECTORIES for d in _directories(path)):
        return True
    return bool(TEST_PATTERN.search(path) or PYTHON_TEST_PATTERN.search(path))


def is_ci_file(path: str) -> bool:
    return path.startswith(CI_PREFIXES)


def is_build_file(path: str) -> bool:
    return path in BUILD_FILES or path.endswith(BUILD_SUFFIXES)


# Checked in order; the first category matched by every file wins.
TYPE_RULES = (
    (CommitType.DOCS, is_documentation_file),
    (CommitType.TEST, is_test_file),
    (CommitType.CI, is_ci_file),
    (CommitType.BUILD, is_build_file),
)


def changed_files_from_diff(diff: str) -> list[str]:
    """
    Collect the new path of every file in a unified diff.

    Args:
        diff: Output of ``git diff``

    Returns:
        Lower-cased paths in diff order
    """
    files = []
    for match in DIFF_HEADER_PATTERN.finditer(diff or ""):
        path = match.group(2).strip()
        if path:
            files.append(path.lower())
    return files


def infer_type_from_diff(diff: str) -> CommitType | None:
    """
    Infer a commit type when every changed file falls in one category.

    Mixed diffs, and diffs without file headers, yield None.
    """
    files = changed_files_from_diff(diff)
    if not files:
        return None

    for commit_type, qualifies in TYPE_RULES:
        if all(qualifies(path) for path in files):
            return commit_type

    return None


def clamp_diff(diff: str, max_chars: int) -> str:
    """
    Limit a diff to ``max_chars`` characters.

    Large diffs keep roughly 70% of the budget from the start and the rest
    from the end, joined by a truncation marker.
    """
    source = diff or ""
    limit = max(0, int(max_chars))

    if limit == 0:
        return ""
    if len(source) <= limit:
        return source

    if limit <= len(DIFF_TRUNCATION_MARKER) + 20:
        return source[:limit]

    available = limit - len(DIFF_TRUNCATION_MARKER)
    head_size = max(1, int(available * 0.7))
    tail_size = max(1, available - head_size)

    return f"{source[:head_size]}{DIFF_TRUNCATION_MARKER}{source[-tail_size:]}"
