import os
import shutil
import tempfile
import typing as t
from datetime import datetime
from pathlib import Path

import attrs

from rogue._internal.constants import SCRATCH_DIR, STAGED_FILES_DIR_IN_CONTAINER
from rogue._internal.logging import log_debug
from rogue._internal.utils.file import write_safely
from rogue.exceptions import CleanupError, StagingWriteError


def _is_abs_path(instance, attribute, value: Path):
    if not value.is_absolute():
        raise ValueError(f"'{attribute.name}' should be an absolute path: {value}")


@attrs.define
class ScratchDir:
    # {build_dir}
    # ├─ .rogue
    # │   └─ tmp
    # │      └─ build{timestamp}{random suffix}
    # │         ├─ requirements.txt
    # │         └─ rogue-*.whl
    # └─ ...

    abs_path: Path = attrs.field(validator=_is_abs_path)
    rel_path: Path

    @classmethod
    def create(cls, build_dir: Path) -> "ScratchDir":
        build_dir = build_dir.resolve()
        root = build_dir / SCRATCH_DIR
        root.mkdir(parents=True, exist_ok=True)
        now = datetime.now().strftime("%Y%m%d%H%M%S.%f")
        abs_path = Path(tempfile.mkdtemp(prefix="build" + now, dir=root))
        return cls(abs_path=abs_path, rel_path=abs_path.relative_to(build_dir))

    def stage(self, filename: str, contents: bytes) -> t.Tuple[t.List[str], str]:
        """
        Write a file used while building and return the Dockerfile lines making it
        available in the container together with its path in the container.
        """
        path = self.abs_path / filename
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            write_safely(path, contents)
        except OSError as e:
            raise StagingWriteError(filename, e) from e

        container_path = (STAGED_FILES_DIR_IN_CONTAINER / filename).as_posix()
        rel_path = (self.rel_path / filename).as_posix()
        log_debug(f"Staged {rel_path} ({len(contents)} bytes)", pretty=False)
        return [f"COPY {rel_path} {container_path}"], container_path

    def remove(self) -> None:
        try:
            shutil.rmtree(self.abs_path)
        except FileNotFoundError:
            pass
        except OSError as e:
            raise CleanupError(f"Failed to clean up {self.abs_path}: {e}") from e

    @property
    def exists(self) -> bool:
        return os.path.isdir(self.abs_path)
