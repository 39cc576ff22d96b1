#!/usr/bin/env python3
"""
📝 MDP Markdown Previewer - File Finder
=======================================
Copyright (c) 2025 PNGN-Tec LLC

Markdown File Discovery
=======================
Walks a directory tree and returns the Markdown files the interactive
browser should offer, honoring the same ignore files a git-aware search
tool would.

Ignore Sources
==============
- .gitignore, .ignore and .mdpignore in every walked directory
- .gitignore files of parent directories up to the repository root
  (skipped with no_ignore_parent)
- .git/info/exclude of the enclosing repository
- The global git ignore file: $XDG_CONFIG_HOME/git/ignore, falling back
  to ~/.config/git/ignore (skipped with no_global_ignore_file)
- no_ignore disables everything above except .mdpignore

Each file is matched with gitignore semantics (pathspec GitIgnoreSpec)
relative to the directory that holds it. A path is ignored when any
applicable file ignores it; a negation only re-includes paths within the
same file.

Module Interface
================
- FinderConfig: Visibility and ignore switches
- find_markdown_files(): Sorted relative paths of Markdown files
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple, Union

from pathspec import GitIgnoreSpec

# Configure logging
logger = logging.getLogger('mdp_finder')

LOCAL_IGNORE_FILES = (".gitignore", ".ignore")
CUSTOM_IGNORE_FILE = ".mdpignore"
MARKDOWN_EXTENSIONS = ("md", "markdown")


@dataclass
class FinderConfig:
    """
    Attributes:
        hidden: Include dot-files and dot-directories
        no_ignore: Ignore .gitignore/.ignore/exclude/global files
        no_ignore_parent: Skip .gitignore files above the search root
        no_global_ignore_file: Skip the global git ignore file
        extensions: File extensions treated as Markdown (no dot)
    """
    hidden: bool = False
    no_ignore: bool = False
    no_ignore_parent: bool = False
    no_global_ignore_file: bool = False
    extensions: Tuple[str, ...] = MARKDOWN_EXTENSIONS


# (directory the patterns are relative to, compiled patterns)
IgnoreLayer = Tuple[Path, GitIgnoreSpec]


def _load_spec(path: Path) -> Optional[GitIgnoreSpec]:
    try:
        lines = path.read_text(encoding="utf-8", errors="replace").splitlines()
    except OSError as e:
        logger.debug(f"Cannot read ignore file {path}: {e}")
        return None
    return GitIgnoreSpec.from_lines(lines)


def find_repository_root(start: Path) -> Optional[Path]:
    """Nearest directory at or above start that contains .git"""
    for directory in (start, *start.parents):
        if (directory / ".git").exists():
            return directory
    return None


def global_ignore_file() -> Path:
    config_home = os.environ.get("XDG_CONFIG_HOME")
    base = Path(config_home) if config_home else Path.home() / ".config"
    return base / "git" / "ignore"


def _initial_layers(root: Path, config: FinderConfig) -> List[IgnoreLayer]:
    """Ignore layers that apply before the walk starts"""
    if config.no_ignore:
        return []

    layers: List[IgnoreLayer] = []
    repo = find_repository_root(root)
    anchor = repo or root

    if not config.no_global_ignore_file:
        path = global_ignore_file()
        if path.is_file():
            spec = _load_spec(path)
            if spec is not None:
                layers.append((anchor, spec))

    if repo is not None:
        exclude = repo / ".git" / "info" / "exclude"
        if exclude.is_file():
            spec = _load_spec(exclude)
            if spec is not None:
                layers.append((repo, spec))

        if not config.no_ignore_parent and repo != root:
            # Directories strictly between the repository root and the search root
            parents = [repo] + [p for p in reversed(root.parents) if repo in p.parents]
            for directory in parents:
                path = directory / ".gitignore"
                if path.is_file():
                    spec = _load_spec(path)
                    if spec is not None:
                        layers.append((directory, spec))
    return layers


def _directory_layers(directory: Path, config: FinderConfig) -> List[IgnoreLayer]:
    names = (CUSTOM_IGNORE_FILE,) if config.no_ignore else LOCAL_IGNORE_FILES + (CUSTOM_IGNORE_FILE,)
    layers = []
    for name in names:
        path = directory / name
        if path.is_file():
            spec = _load_spec(path)
            if spec is not None:
                layers.append((directory, spec))
    return layers


def _is_ignored(path: Path, is_dir: bool, layers: List[IgnoreLayer]) -> bool:
    for base, spec in layers:
        try:
            relative = path.relative_to(base).as_posix()
        except ValueError:
            continue
        if is_dir:
            relative += "/"
        if spec.match_file(relative):
            return True
    return False


def find_markdown_files(root: Union[str, Path] = ".",
                        config: Optional[FinderConfig] = None) -> List[Path]:
    """
    Find Markdown files under root.

    Args:
        root: Directory to search
        config: Visibility and ignore switches

    Returns:
        Sorted paths relative to root
    """
    config = config or FinderConfig()
    root = Path(root).resolve()
    extensions = {ext.lower().lstrip(".") for ext in config.extensions}

    layers_by_dir = {root: _initial_layers(root, config) + _directory_layers(root, config)}
    found: List[Path] = []

    for current, dirnames, filenames in os.walk(root):
        directory = Path(current)
        layers = layers_by_dir.pop(directory, [])

        kept = []
        for name in sorted(dirnames):
            if name == ".git" or (not config.hidden and name.startswith(".")):
                continue
            child = directory / name
            if _is_ignored(child, True, layers):
                logger.debug(f"Ignoring directory {child}")
                continue
            layers_by_dir[child] = layers + _directory_layers(child, config)
            kept.append(name)
        dirnames[:] = kept

        for name in filenames:
            if not config.hidden and name.startswith("."):
                continue
            path = directory / name
            if path.suffix.lower().lstrip(".") not in extensions:
                continue
            if _is_ignored(path, False, layers):
                continue
            found.append(path.relative_to(root))

    found.sort()
    logger.info(f"Found {len(found)} Markdown files under {root}")
    return found
