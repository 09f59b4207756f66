import os
import posixpath
import typing as t
from pathlib import PurePath

from pathspec import PathSpec

from rogue._internal import constants
from rogue._internal.logging import log_debug
from rogue._internal.utils.file import SKIP_DIR, FileWalker

if t.TYPE_CHECKING:
    from _typeshed import StrPath

DEFAULT_IGNORE_PATTERNS = [
    ".*/",
    "__pycache__/",
    "venv/",
    "env/",
    "node_modules/",
]


def find_weights(
    walker: FileWalker, root: "StrPath" = "."
) -> t.Tuple[t.List[str], t.List[str]]:
    """
    Find model weights under ``root``.

    Returns directories and files holding weights, relative to ``root`` in POSIX format.
    Files of at least ``MIN_WEIGHT_FILE_SIZE`` bytes that are not code are weights.
    Weights in subdirectories are grouped by their shallowest directory, unless that
    directory also contains code, in which case the weight files are listed individually.
    """
    root_str = os.path.normpath(os.fspath(root))
    ignore_spec = PathSpec.from_lines("gitwildmatch", DEFAULT_IGNORE_PATTERNS)
    weight_files: t.List[str] = []
    code_files: t.List[str] = []

    def visit(path: str, is_dir: bool, error: t.Optional[OSError]):
        if error is not None:
            raise error

        rel_path = PurePath(os.path.relpath(path, root_str)).as_posix()
        if rel_path == ".":
            return None

        if is_dir:
            if ignore_spec.match_file(rel_path + "/"):
                return SKIP_DIR
            return None

        if ignore_spec.match_file(rel_path):
            return None
        if posixpath.splitext(rel_path)[1] in constants.CODE_FILE_SUFFIXES:
            code_files.append(rel_path)
            return None
        if os.lstat(path).st_size >= constants.MIN_WEIGHT_FILE_SIZE:
            weight_files.append(rel_path)
        return None

    walker(root_str, visit)

    root_files = [p for p in weight_files if "/" not in p]
    weight_dirs = _shallowest_dirs(posixpath.dirname(p) for p in weight_files if "/" in p)

    dirs: t.List[str] = []
    for d in weight_dirs:
        if any(_is_under(p, d) for p in code_files):
            log_debug(f"'{d}' contains code, listing its weight files individually")
            root_files.extend(p for p in weight_files if _is_under(p, d))
        else:
            dirs.append(d)

    return sorted(dirs), sorted(set(root_files))


def _is_under(path: str, directory: str) -> bool:
    return path.startswith(directory + "/")


def _shallowest_dirs(dirs: t.Iterable[str]) -> t.List[str]:
    # By sorting by depth, parent directories are visited before their children
    ordered = sorted(set(dirs), key=lambda d: (d.count("/"), d))
    shallowest: t.List[str] = []
    for d in ordered:
        if not any(d == s or _is_under(d, s) for s in shallowest):
            shallowest.append(d)
    return shallowest
