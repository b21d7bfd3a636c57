from __future__ import annotations

"""
Orphan Source Collection Service.

Walks a project directory looking for files that no declared source set
claims ("orphan" files): loose configuration, scripts, credentials-adjacent
files. The heuristics trade a few false positives for not missing possibly
sensitive content, while pruning build output and tooling directories.
"""

import enum
import logging
import os
from typing import Callable, Iterable, List, Optional, Set

from scanprops.domain.constants import (
    COVERED_LANGUAGE_EXTENSIONS,
    EXCLUDED_DIRECTORIES,
    EXCLUDED_EXTENSIONS,
    HIDDEN_DIRECTORY_MAX_DEPTH,
    HIDDEN_FILE_EXTENSIONS,
    SENSITIVE_KEYWORDS,
)

logger = logging.getLogger(__name__)


class VisitResult(enum.Enum):
    CONTINUE = "continue"
    SKIP_SUBTREE = "skip_subtree"


def _norm(path: str) -> str:
    return os.path.normpath(os.path.abspath(path))


# ==============================================================================
# VISITOR
# ==============================================================================

class SourceCollector:
    """
    Pre-order file tree visitor accumulating orphan files.

    Existing sources are matched by exact path only: a directory below a
    declared source directory is not recognised as already covered.
    """

    def __init__(
            self,
            root: str,
            existing_sources: Iterable[str] = (),
            directories_to_ignore: Iterable[str] = (),
            excluded_files: Iterable[str] = (),
            exclude_covered_languages: bool = True,
    ):
        self.root = _norm(root)
        self.existing_sources: Set[str] = {_norm(p) for p in existing_sources}
        self.directories_to_ignore: Set[str] = {_norm(p) for p in directories_to_ignore}
        self.excluded_files: Set[str] = {_norm(p) for p in excluded_files}
        self.excluded_extensions: Set[str] = set(EXCLUDED_EXTENSIONS)
        if exclude_covered_languages:
            self.excluded_extensions |= COVERED_LANGUAGE_EXTENSIONS
        self._collected: Set[str] = set()

    @property
    def collected_sources(self) -> Set[str]:
        return set(self._collected)

    # -------------------------------------------------------------------------
    # Visitor callbacks
    # -------------------------------------------------------------------------

    def pre_visit_directory(self, path: str) -> VisitResult:
        p = _norm(path)
        if self._is_deep_hidden(p) or self._is_excluded_directory(p) or p in self.existing_sources:
            return VisitResult.SKIP_SUBTREE
        return VisitResult.CONTINUE

    def visit_file(self, path: str, is_symlink: bool = False) -> VisitResult:
        p = _norm(path)
        if is_symlink or p in self.excluded_files or p in self.existing_sources:
            return VisitResult.CONTINUE

        name = os.path.basename(p).lower()
        if self._is_hidden(p):
            keep = self._is_relevant_hidden_file(name)
        else:
            keep = not any(name.endswith(ext) for ext in self.excluded_extensions)

        if keep:
            self._collected.add(p)
        return VisitResult.CONTINUE

    # -------------------------------------------------------------------------
    # Heuristics
    # -------------------------------------------------------------------------

    def _relative_parts(self, path: str) -> List[str]:
        try:
            rel = os.path.relpath(path, self.root)
        except ValueError:
            # Different drive than the root
            return [part for part in path.split(os.sep) if part]
        if rel == os.curdir:
            return []
        return rel.split(os.sep)

    def _is_hidden(self, path: str) -> bool:
        return any(part.startswith(".") and part not in (os.curdir, os.pardir)
                   for part in self._relative_parts(path))

    def _is_deep_hidden(self, path: str) -> bool:
        parts = self._relative_parts(path)
        return len(parts) > HIDDEN_DIRECTORY_MAX_DEPTH and self._is_hidden(path)

    def _is_excluded_directory(self, path: str) -> bool:
        name = os.path.basename(path).lower()
        return name in EXCLUDED_DIRECTORIES or path in self.directories_to_ignore

    @staticmethod
    def _is_relevant_hidden_file(lower_name: str) -> bool:
        if any(keyword in lower_name for keyword in SENSITIVE_KEYWORDS):
            return True
        return any(lower_name.endswith(ext) for ext in HIDDEN_FILE_EXTENSIONS)


# ==============================================================================
# TREE WALK
# ==============================================================================

def walk_file_tree(root: str, visitor: SourceCollector, on_error: str = "raise") -> None:
    """
    Drive a visitor over a directory tree in pre-order.

    Subtrees are pruned in place when 'pre_visit_directory' returns
    SKIP_SUBTREE. Symbolic links to directories are reported to
    'visit_file' as links and never followed.

    Args:
        root: Directory to walk.
        visitor: Visitor receiving the callbacks.
        on_error: 'raise' to abort on unreadable directories, 'skip' to log
                  and carry on.

    Raises:
        ValueError: On an unknown 'on_error' mode.
        OSError: On a read error when 'on_error' is 'raise'.
    """
    if on_error not in ("raise", "skip"):
        raise ValueError(f"Unknown on_error mode: {on_error!r}")

    root_abs = _norm(root)
    if visitor.pre_visit_directory(root_abs) is VisitResult.SKIP_SUBTREE:
        logger.debug(f"Scan root pruned: {root_abs}")
        return

    handler: Callable[[OSError], None] = _raise_walk_error if on_error == "raise" else _log_walk_error

    for current, dirs, files in os.walk(root_abs, topdown=True, onerror=handler, followlinks=False):
        kept: List[str] = []
        for d in sorted(dirs):
            full = os.path.join(current, d)
            if os.path.islink(full):
                visitor.visit_file(full, is_symlink=True)
                continue
            if visitor.pre_visit_directory(full) is VisitResult.CONTINUE:
                kept.append(d)
        # In-place pruning
        dirs[:] = kept

        for f in sorted(files):
            full = os.path.join(current, f)
            visitor.visit_file(full, is_symlink=os.path.islink(full))


def _raise_walk_error(err: OSError) -> None:
    raise err


def _log_walk_error(err: OSError) -> None:
    logger.warning(f"Skipping unreadable path during source collection: {err}")


def collect_sources(
        root: str,
        existing_sources: Iterable[str] = (),
        directories_to_ignore: Iterable[str] = (),
        excluded_files: Iterable[str] = (),
        exclude_covered_languages: bool = True,
        on_error: str = "raise",
        visitor: Optional[SourceCollector] = None,
) -> List[str]:
    """
    Collect orphan files below a directory.

    Args:
        root: Directory to scan.
        existing_sources: Paths already declared as sources or tests.
        directories_to_ignore: Directories pruned from the walk.
        excluded_files: Files never collected (e.g. reports).
        exclude_covered_languages: Also exclude .java/.jav/.kt files.
        on_error: Walk error mode ('raise' or 'skip').
        visitor: Pre-built collector to use instead of a new one.

    Returns:
        List[str]: Sorted absolute paths of the collected files.
    """
    collector = visitor or SourceCollector(
        root,
        existing_sources=existing_sources,
        directories_to_ignore=directories_to_ignore,
        excluded_files=excluded_files,
        exclude_covered_languages=exclude_covered_languages,
    )
    walk_file_tree(root, collector, on_error=on_error)
    found = sorted(collector.collected_sources)
    logger.info(f"Source collection found {len(found)} orphan file(s) under {collector.root}")
    return found
