import hashlib
import os
import stat
import tempfile
import typing as t
from pathlib import Path

if t.TYPE_CHECKING:
    from _typeshed import StrPath

BUF_SIZE_FOR_HASHING = 1024 * 1024


class _SkipDir:
    def __repr__(self):
        return "SKIP_DIR"


# Returned by a visitor to avoid descending into a directory
SKIP_DIR = _SkipDir()

Visitor = t.Callable[[str, bool, t.Optional[OSError]], t.Optional[_SkipDir]]
FileWalker = t.Callable[["StrPath", Visitor], None]


def walk(root: "StrPath", visitor: Visitor) -> None:
    """
    Walk the file tree rooted at ``root`` in lexical order, calling ``visitor`` for each
    path including ``root``.

    The visitor receives ``(path, is_dir, error)``. ``error`` is set when the path or its
    entries cannot be read; the visitor decides whether to raise. Exceptions raised by the
    visitor stop the walk and propagate to the caller.
    """
    root_str = os.path.normpath(os.fspath(root))
    try:
        st = os.lstat(root_str)
    except OSError as e:
        visitor(root_str, False, e)
        return
    _walk(root_str, stat.S_ISDIR(st.st_mode), visitor)


def _walk(path: str, is_dir: bool, visitor: Visitor) -> None:
    if not is_dir:
        visitor(path, False, None)
        return

    try:
        names = sorted(os.listdir(path))
    except OSError as e:
        visitor(path, True, e)
        return

    if visitor(path, True, None) is SKIP_DIR:
        return

    for name in names:
        child = os.path.normpath(os.path.join(path, name))
        try:
            st = os.lstat(child)
        except OSError as e:
            visitor(child, False, e)
            continue
        _walk(child, stat.S_ISDIR(st.st_mode), visitor)


def write_safely(path: Path, content: t.Union[str, bytes]) -> None:
    """
    Write to a temporary file and replace
    """
    directory = path.parent
    fd, tmp_path_str = tempfile.mkstemp(prefix=".rogue-", suffix=path.name, dir=directory)
    tmp_path = Path(tmp_path_str)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(content.encode("utf-8") if isinstance(content, str) else content)
        os.replace(tmp_path, path)
    finally:
        try:
            os.remove(tmp_path)
        except FileNotFoundError:
            pass


def hash_file(path: "StrPath") -> str:
    hash_ = hashlib.sha256()
    with open(path, "rb") as f:
        while True:
            data = f.read(BUF_SIZE_FOR_HASHING)
            if not data:
                break
            hash_.update(data)
    return hash_.hexdigest()
