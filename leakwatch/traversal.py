"""
File system traversal: walk directories and collect JavaScript/TypeScript sources.

Typical usage:
    from pathlib import Path
    from leakwatch.traversal import find_source_files

    sources = find_source_files(Path("./app"))

    # Custom ignore set, TypeScript only
    sources = find_source_files(
        Path("./app"),
        ignore_dirs={"node_modules", "dist"},
        extensions={".ts", ".tsx"},
    )
"""

import logging
from pathlib import Path
from typing import Callable, Optional, Set

logger = logging.getLogger(__name__)

SOURCE_EXTENSIONS: frozenset[str] = frozenset({".js", ".jsx", ".mjs", ".cjs", ".ts", ".tsx"})

# Default directories to ignore during traversal
DEFAULT_IGNORE_DIRS: Set[str] = {
    # Dependencies
    "node_modules",
    "bower_components",
    "vendor",

    # Build output
    "build",
    "dist",
    "out",
    "coverage",
    ".next",
    ".expo",

    # Version control
    ".git",
    ".svn",
    ".hg",

    # IDE and editor directories
    ".vscode",
    ".idea",

    # Cache directories
    ".cache",
    "__pycache__",
}


def is_source_file(path: Path, extensions: Optional[frozenset[str]] = None) -> bool:
    """
    Check if a file has a JavaScript/TypeScript extension.

    Examples:
        >>> is_source_file(Path("App.tsx"))
        True
        >>> is_source_file(Path("types.d.ts"))
        True
        >>> is_source_file(Path("README.md"))
        False
    """
    if extensions is None:
        extensions = SOURCE_EXTENSIONS
    return path.suffix.lower() in extensions


def should_ignore_directory(dir_path: Path, ignore_dirs: Set[str]) -> bool:
    """Check if a directory should be skipped (matches on directory name only)."""
    return dir_path.name in ignore_dirs


def find_source_files(
    root: Path,
    ignore_dirs: Optional[Set[str]] = None,
    follow_symlinks: bool = False,
    extensions: Optional[frozenset[str]] = None,
    filter_fn: Optional[Callable[[Path], bool]] = None,
) -> list[Path]:
    """
    Recursively find all JavaScript/TypeScript source files in a directory tree.

    Args:
        root: Root directory to start traversal from.
        ignore_dirs: Directory names to skip. If None, uses DEFAULT_IGNORE_DIRS.
        follow_symlinks: If True, follow symbolic links; skipped by default.
        extensions: Accepted suffixes. If None, uses SOURCE_EXTENSIONS.
        filter_fn: Optional extra predicate; only paths it accepts are kept.

    Returns:
        Sorted list of matching paths.

    Raises:
        FileNotFoundError: If root does not exist.
        NotADirectoryError: If root is not a directory.

    Permission errors on subdirectories are logged and do not stop traversal.
    """
    if ignore_dirs is None:
        ignore_dirs = DEFAULT_IGNORE_DIRS

    root = root.resolve()

    if not root.exists():
        logger.error("Root directory does not exist: %s", root)
        raise FileNotFoundError(f"Root directory does not exist: {root}")

    if not root.is_dir():
        logger.error("Root path is not a directory: %s", root)
        raise NotADirectoryError(f"Root path is not a directory: {root}")

    logger.info("Starting traversal from: %s", root)

    collected_files: list[Path] = []

    def _walk_directory(current_dir: Path) -> None:
        try:
            for entry in current_dir.iterdir():
                if entry.is_symlink() and not follow_symlinks:
                    logger.debug("Skipping symlink: %s", entry)
                    continue

                if entry.is_dir():
                    if should_ignore_directory(entry, ignore_dirs):
                        logger.debug("Ignoring directory: %s", entry)
                        continue
                    _walk_directory(entry)

                elif entry.is_file() and is_source_file(entry, extensions):
                    if filter_fn is not None and not filter_fn(entry):
                        logger.debug("Filtered out by custom filter: %s", entry)
                        continue
                    collected_files.append(entry)

        except PermissionError as e:
            logger.warning("Permission denied accessing directory %s: %s", current_dir, e)
        except OSError as e:
            logger.warning("Error accessing directory %s: %s", current_dir, e)

    _walk_directory(root)
    collected_files.sort()

    logger.info(
        "Traversal complete: found %d source file(s) in %s",
        len(collected_files),
        root,
    )
    return collected_files
