"""Reference extraction: file paths, git branches and completed-work phrases.

Pure text matching. Nothing here touches the filesystem or git; see
:mod:`delta.core.prune.probes` for existence checks.
"""

from __future__ import annotations

import re
from collections.abc import Callable, Sequence

# ---------------------------------------------------------------------------
# File paths
# ---------------------------------------------------------------------------

# Most specific first. A later match only takes over text an earlier one
# accepted when it encloses it (/Users/me/src/x.ts over src/x.ts).
_PATH_PATTERNS: tuple[re.Pattern[str], ...] = (
    # file: /path/to/file, in: src/x.ts
    re.compile(r"(?:file|path|in|at|from|to):\s*([^\s,)]+\.[a-z0-9]+)", re.IGNORECASE),
    # extensions/delta/src/index.ts
    re.compile(r"\b(extensions/[a-z0-9_-]+/[^\s,)]+\.[a-z0-9]+)", re.IGNORECASE),
    # src/components/Button.tsx
    re.compile(r"\b(src/[^\s,)]+\.[a-z0-9]+)", re.IGNORECASE),
    # ./foo/bar.ts, ../baz/qux.js
    re.compile(r"(?<![\w./])(\.\.?/[^\s,)]+\.[a-z0-9]+)", re.IGNORECASE),
    # /Users/..., /home/...
    re.compile(r"(?<![\w./])(/(?:Users|home|var|tmp|opt)/[^\s,)]+\.[a-z0-9]+)", re.IGNORECASE),
    # anything/with/a.slash
    re.compile(r"\b([a-zA-Z0-9_-]+/[^\s,)]*\.[a-z0-9]{1,5})\b", re.IGNORECASE),
)

FILE_EXTENSIONS: frozenset[str] = frozenset({
    "ts", "tsx", "js", "jsx", "mjs", "cjs", "json", "md", "txt", "yaml",
    "yml", "toml", "ini", "cfg", "sh", "bash", "css", "scss", "html", "sql",
    "py", "rb", "go", "rs", "java", "kt", "swift", "c", "cpp", "h", "hpp",
})

EXCLUDED_PATH_PARTS: tuple[str, ...] = (
    "node_modules", ".git", "dist/", "build/", ".cache", "__pycache__",
)

_TRAILING_PUNCT_RE = re.compile(r"['\"`,;:()\[\]{}]+$")
_LEADING_PUNCT_RE = re.compile(r"^['\"`,;:()\[\]{}]+")

_MIN_REF_LENGTH = 3


def _clean(ref: str) -> str:
    ref = _TRAILING_PUNCT_RE.sub("", ref)
    return _LEADING_PUNCT_RE.sub("", ref)


def _contains(outer: tuple[int, int], inner: tuple[int, int]) -> bool:
    return outer[0] <= inner[0] and inner[1] <= outer[1]


def _extract(
    text: str,
    patterns: Sequence[re.Pattern[str]],
    accept: Callable[[str], bool],
) -> list[str]:
    """Run *patterns* in order, returning unique accepted refs in text order.

    A match inside an already accepted span is skipped. A match that
    encloses accepted spans replaces them, so ``/Users/me/src/app.ts`` wins
    over the ``src/app.ts`` an earlier pattern found inside it. An enclosing
    match that is itself rejected (say, under ``node_modules``) still drops
    the refs it encloses.
    """
    taken: dict[tuple[int, int], str] = {}
    for pattern in patterns:
        for match in pattern.finditer(text):
            raw = match.group(1)
            if not raw:
                continue
            span = match.span(1)
            overlapping = [t for t in taken if span[0] < t[1] and t[0] < span[1]]
            if not all(_contains(span, t) and span != t for t in overlapping):
                continue
            for t in overlapping:
                del taken[t]
            ref = _clean(raw)
            if len(ref) < _MIN_REF_LENGTH or not accept(ref):
                continue
            taken[span] = ref
    return list(dict.fromkeys(taken[span] for span in sorted(taken)))


def _is_file_path(path: str) -> bool:
    ext = path.rsplit(".", 1)[-1].lower()
    if ext not in FILE_EXTENSIONS:
        return False
    return not any(part in path for part in EXCLUDED_PATH_PARTS)


def detect_file_paths(text: str) -> list[str]:
    """Extract unique, cleaned file path references from *text*."""
    return _extract(text, _PATH_PATTERNS, _is_file_path)


# ---------------------------------------------------------------------------
# Git branches
# ---------------------------------------------------------------------------

_BRANCH_PATTERNS: tuple[re.Pattern[str], ...] = (
    # branch: feat/something
    re.compile(r"(?:branch|on|from|to|merge|into):\s*([a-zA-Z0-9/_-]+)", re.IGNORECASE),
    # commit header: [feat/branch-name abc123]
    re.compile(r"\[([a-zA-Z0-9/_-]+)\s+[a-f0-9]+\]", re.IGNORECASE),
    # conventional prefixes
    re.compile(
        r"\b((?:feat|fix|feature|bugfix|hotfix|release|chore|refactor|docs)/[a-zA-Z0-9_-]+)",
        re.IGNORECASE,
    ),
    # PR #123 on branch-name
    re.compile(r"\bPR\s*#?\d+\s+(?:on|from|to)\s+([a-zA-Z0-9/_-]+)", re.IGNORECASE),
)

# Always present, or too generic to be worth checking.
EXCLUDED_BRANCHES: frozenset[str] = frozenset({
    "main", "master", "develop", "dev", "HEAD", "origin/main", "origin/master",
})

REMOTE_PREFIX = "origin/"


def _is_branch(branch: str) -> bool:
    return (
        branch not in EXCLUDED_BRANCHES
        and branch.removeprefix(REMOTE_PREFIX) not in EXCLUDED_BRANCHES
    )


def detect_branch_refs(text: str) -> list[str]:
    """Extract unique, cleaned git branch references from *text*."""
    return _extract(text, _BRANCH_PATTERNS, _is_branch)


# ---------------------------------------------------------------------------
# Completed context
# ---------------------------------------------------------------------------

_COMPLETED_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\bPR\s*#?\d+\s+merged\b", re.IGNORECASE),
    re.compile(r"\bclosed\s+(?:issue|PR|ticket)\s*#?\d+", re.IGNORECASE),
    re.compile(r"\bmerged\s+(?:into|to)\s+main\b", re.IGNORECASE),
    re.compile(r"\btask\s+(?:completed|done|closed)\b", re.IGNORECASE),
    re.compile(r"\b(?:completed|done|finished|shipped)\s+(?:task|feature|work)\b", re.IGNORECASE),
)


def has_completed_context(text: str) -> bool:
    """True if *text* talks about merged, closed or finished work."""
    return any(pattern.search(text) for pattern in _COMPLETED_PATTERNS)
