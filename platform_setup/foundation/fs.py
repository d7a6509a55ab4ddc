"""Synchronous filesystem primitives used by staging stages and project writers.

Every function fails with the built-in `FileNotFoundError` when its source path is
missing; callers decide whether that is a prerequisite error or a policy skip.
"""

from __future__ import annotations

import os
import shutil


def list_dir(path: str) -> list[str]:
    """Return entry names under `path`, sorted for a stable side-effect order."""
    if not os.path.exists(path):
        raise FileNotFoundError(f"Directory does not exist: {path}")
    if not os.path.isdir(path):
        raise NotADirectoryError(f"Not a directory: {path}")
    return sorted(os.listdir(path))


def list_files_recursive(root: str) -> list[str]:
    """Return file paths under `root`, relative to it, using '/' separators."""
    if not os.path.isdir(root):
        raise FileNotFoundError(f"Directory does not exist: {root}")

    files: list[str] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        rel_dir = os.path.relpath(dirpath, root)
        for filename in sorted(filenames):
            rel = filename if rel_dir == "." else os.path.join(rel_dir, filename)
            files.append(rel.replace(os.sep, "/"))
    return files


def copy_file(src: str, dest: str) -> str:
    """Copy one file, overwriting `dest`.

    When `dest` is an existing directory the file is copied into it under its own
    name. Parent directories of the destination are created as needed.
    """
    if not os.path.isfile(src):
        raise FileNotFoundError(f"Source file does not exist: {src}")

    target = dest
    if os.path.isdir(dest):
        target = os.path.join(dest, os.path.basename(src))
    parent = os.path.dirname(os.path.abspath(target))
    os.makedirs(parent, exist_ok=True)
    shutil.copyfile(src, target)
    return target


def copy_folder_contents(src: str, dest: str) -> list[str]:
    """Merge the contents of `src` into `dest`, overwriting files that exist in both.

    Directories are merged, never replaced wholesale; files only present in `dest`
    are left alone. Returns the copied files relative to `src`.
    """
    copied: list[str] = []
    for rel in list_files_recursive(src):
        copy_file(os.path.join(src, rel), os.path.join(dest, rel))
        copied.append(rel)
    os.makedirs(dest, exist_ok=True)
    return copied
