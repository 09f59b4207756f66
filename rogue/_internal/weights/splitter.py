import posixpath
import typing as t

from rogue._internal import constants
from rogue._internal.utils.file import FileWalker

from .finder import find_weights

if t.TYPE_CHECKING:
    from _typeshed import StrPath

DOCKERIGNORE_HEADER = """# generated by rogue
__pycache__
*.pyc
*.pyo
*.pyd
.Python
env
pip-log.txt
pip-delete-this-directory.txt
.tox
.coverage
.coverage.*
.cache
nosetests.xml
coverage.xml
*.cover
*.log
.git
.mypy_cache
.pytest_cache
.hypothesis
"""


def path_in_container(rel_path: str) -> str:
    return posixpath.join(constants.WORKING_DIR_IN_CONTAINER.as_posix(), rel_path)


def generate_for_weights(
    walker: FileWalker, root: "StrPath" = "."
) -> t.Tuple[str, t.List[str], t.List[str]]:
    """
    Find weights and generate a Dockerfile for an image holding only them.
    """
    dirs, files = find_weights(walker, root)
    lines = [constants.DOCKERFILE_SYNTAX, "FROM scratch"]
    for p in dirs + files:
        lines.append(f"COPY {p} {path_in_container(p)}")
    return "\n".join(lines), dirs, files


def make_dockerignore(dirs: t.Iterable[str], files: t.Iterable[str]) -> str:
    contents = ""
    for p in dirs:
        contents += f"{p}\n{p}/**/*\n"
    for p in files:
        contents += f"{p}\n"
    return DOCKERIGNORE_HEADER + contents
