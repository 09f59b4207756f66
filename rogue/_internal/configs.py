import re
import typing as t
from pathlib import Path

import yaml
from packaging.requirements import InvalidRequirement, Requirement
from packaging.utils import canonicalize_name
from packaging.version import InvalidVersion, Version
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from rogue._internal.base_images import CUDAImage, CUDAImageCollection, infer_cuda_ver
from rogue._internal.constants import (
    DEFAULT_PYTHON_VER,
    MAX_SUPPORTED_PYTHON_VER,
    MIN_SUPPORTED_PYTHON_VER,
)
from rogue._internal.logging import log_debug
from rogue.exceptions import ConfigError

RE_REQUIREMENTS_COMMENT = re.compile(r"(^|\s)#.*$")


def _validate_version_str(v: t.Optional[str]) -> t.Optional[str]:
    if v is None:
        return v
    try:
        Version(v)
    except InvalidVersion:
        raise ValueError(f"invalid version: {v}")
    return v


def _join_continued_lines(text: str) -> t.List[str]:
    lines = []
    buffer = ""
    for line in text.splitlines():
        if line.endswith("\\"):
            buffer += line[:-1] + " "
            continue
        lines.append(buffer + line)
        buffer = ""
    if buffer:
        lines.append(buffer)
    return lines


def _included_requirements_file(line: str) -> t.Optional[str]:
    for option in ("--requirement", "-r"):
        if line.startswith(option):
            return line[len(option) :].lstrip(" \t=")
    return None


def _read_requirements_file(
    path: Path, requirement_strs: t.List[str], pip_options: t.List[str], visited: t.Set[Path]
):
    path = path.resolve()
    if path in visited:
        return
    visited.add(path)
    try:
        text = path.read_text()
    except OSError as e:
        raise ConfigError(f"Failed to read {path}: {e}")

    for line in _join_continued_lines(text):
        line = RE_REQUIREMENTS_COMMENT.sub("", line).strip()
        if not line:
            continue

        # Included files are resolved relative to the including file
        included = _included_requirements_file(line)
        if included is not None:
            _read_requirements_file(path.parent / included, requirement_strs, pip_options, visited)
        elif line.startswith(("-c", "--constraint")):
            raise ConfigError(f"Constraints files are not supported: '{line}' in {path}")
        elif line.startswith("-"):
            pip_options.append(line)
        else:
            requirement_strs.append(line)


class Mount(BaseModel):
    type: str
    id: str = ""
    target: str = ""


class RunItem(BaseModel):
    command: str
    mounts: t.List[Mount] = Field(default_factory=list)


# TODO print warnings if there are ignored fields
class BuildConfig(BaseModel):
    gpu: bool = False
    cuda: t.Optional[str] = None
    cudnn: t.Optional[str] = None
    python_version: str = DEFAULT_PYTHON_VER
    python_packages: t.List[str] = Field(default_factory=list)
    python_requirements: t.Optional[Path] = None
    system_packages: t.List[str] = Field(default_factory=list)
    run: t.List[RunItem] = Field(default_factory=list)
    pre_install: t.List[str] = Field(default_factory=list)

    @field_validator("run", mode="before")
    @classmethod
    def convert_run_strings(cls, v):
        if isinstance(v, list):
            return [{"command": item} if isinstance(item, str) else item for item in v]
        return v

    @field_validator("cuda", "cudnn")
    @classmethod
    def validate_cuda_vers(cls, v: t.Optional[str]):
        return _validate_version_str(v)

    @field_validator("python_version")
    @classmethod
    def validate_py_ver(cls, v: str):
        _validate_version_str(v)
        py_ver = Version(v)
        py_ver = Version(f"{py_ver.major}.{py_ver.minor}")
        if py_ver < MIN_SUPPORTED_PYTHON_VER or py_ver > MAX_SUPPORTED_PYTHON_VER:
            raise ValueError(
                f"unsupported Python version: {v}. "
                "rogue supports Python version "
                f"from {MIN_SUPPORTED_PYTHON_VER} to {MAX_SUPPORTED_PYTHON_VER}"
            )
        return v

    @model_validator(mode="after")
    def validate_gpu(self):
        if not self.gpu and (self.cuda is not None or self.cudnn is not None):
            raise ValueError("'cuda' and 'cudnn' require 'gpu' to be set")
        return self

    def python_requirement_strs(self) -> t.Tuple[t.List[str], t.List[str]]:
        """
        Requirement strings from ``python_packages`` followed by those in
        ``python_requirements``, and the pip options found in the requirements file.
        """
        requirement_strs = list(self.python_packages)
        pip_options: t.List[str] = []
        if self.python_requirements is not None:
            _read_requirements_file(
                self.python_requirements, requirement_strs, pip_options, visited=set()
            )
        return requirement_strs, pip_options

    def torch_version(self) -> t.Optional[str]:
        return self._pinned_version("torch")

    def torchvision_version(self) -> t.Optional[str]:
        return self._pinned_version("torchvision")

    def resolved_cuda_version(self) -> t.Optional[Version]:
        """
        CUDA version used by the container. ``None`` for CPU builds.
        If not set explicitly, the latest version compatible with pinned torch is inferred.
        """
        if not self.gpu:
            return None
        if self.cuda:
            return Version(self.cuda)

        torch_ver_str = self.torch_version()
        torch_ver = Version(torch_ver_str) if torch_ver_str else None
        cuda_ver = infer_cuda_ver(torch_ver, CUDAImageCollection.default().cuda_vers)
        log_debug(f"Inferred CUDA version {cuda_ver} (torch: {torch_ver_str})")
        return cuda_ver

    def resolved_cudnn_version(self) -> t.Optional[Version]:
        """
        CuDNN version used by the container. ``None`` for CPU builds.
        If not set explicitly, the version shipped with the CUDA base image is used.
        """
        if not self.gpu:
            return None
        if self.cudnn:
            return Version(self.cudnn)
        return self._cuda_image().cudnn_ver

    def cuda_base_image_tag(self) -> str:
        return self._cuda_image().name

    def _cuda_image(self) -> CUDAImage:
        cuda_ver = self.resolved_cuda_version()
        if cuda_ver is None:
            raise ConfigError("CUDA base image requires 'gpu' to be set")
        cudnn_ver = Version(self.cudnn) if self.cudnn else None
        return CUDAImageCollection.default().get_cuda_image_by_cuda_cudnn_ver(cuda_ver, cudnn_ver)

    def _pinned_version(self, pkg_name: str) -> t.Optional[str]:
        requirement_strs, _ = self.python_requirement_strs()
        for requirement_str in requirement_strs:
            try:
                req = Requirement(requirement_str)
            except InvalidRequirement:
                continue
            if canonicalize_name(req.name) != pkg_name:
                continue
            specifiers = list(req.specifier)
            if len(specifiers) == 1 and specifiers[0].operator == "==":
                return specifiers[0].version
        return None


def load_config(path: Path) -> BuildConfig:
    if not path.exists():
        raise ConfigError(f"Not found: {path}")
    try:
        loaded = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse {path}: {e}")

    loaded = loaded or {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"{path} should be a mapping")
    build = loaded.get("build") or {}
    if not isinstance(build, dict):
        raise ConfigError(f"'build' in {path} should be a mapping")

    try:
        config = BuildConfig.model_validate(build)
    except ValidationError as e:
        raise ConfigError(f"Invalid config {path}:\n{e}")

    # Relative to the config file
    if config.python_requirements is not None and not config.python_requirements.is_absolute():
        config.python_requirements = path.parent / config.python_requirements
    return config
