import json
import os
import typing as t
from pathlib import Path, PurePath

import attrs

from rogue._internal.utils.file import FileWalker, hash_file, write_safely

if t.TYPE_CHECKING:
    from _typeshed import StrPath


@attrs.define
class WeightsManifest:
    """
    SHA-256 digests of weight files, keyed by their path relative to the build directory.
    """

    files: t.Dict[str, str] = attrs.field(factory=dict)

    @classmethod
    def from_paths(
        cls,
        walker: FileWalker,
        root: "StrPath",
        dirs: t.Iterable[str],
        files: t.Iterable[str],
    ) -> "WeightsManifest":
        root_str = os.fspath(root)
        manifest = cls()

        def visit(path: str, is_dir: bool, error: t.Optional[OSError]):
            if error is not None:
                raise error
            if is_dir:
                return None
            manifest.add_file(PurePath(os.path.relpath(path, root_str)).as_posix(), path)
            return None

        for d in dirs:
            walker(os.path.join(root_str, d), visit)

        for f in files:
            manifest.add_file(f, os.path.join(root_str, f))

        return manifest

    def add_file(self, rel_path: str, path: "StrPath") -> None:
        self.files[rel_path] = hash_file(path)

    def save(self, path: Path) -> None:
        write_safely(path, json.dumps(self.files, indent=2, sort_keys=True))

    @classmethod
    def load(cls, path: Path) -> "WeightsManifest":
        return cls(files=json.loads(path.read_text()))
