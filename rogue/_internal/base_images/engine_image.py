import typing as t

import attrs
from packaging.version import Version

from rogue._internal.constants import ENGINE_BASE_IMAGE_REPOSITORY
from rogue._internal.utils.version import parse_version, strip_patch_version
from rogue.exceptions import NoMatchingBaseImage

from .base_image import BaseImage, BaseImageCollection
from .torch_compat import TORCH_RELEASES

ENGINE_PYTHON_VERS = ["3.8", "3.9", "3.10", "3.11", "3.12"]
ENGINE_CUDA_VERS = ["11.8", "12.1"]
MIN_ENGINE_TORCH_VER = Version("2.0")

# Packages installed in every engine base image. They are skipped when generating apt installs.
ENGINE_BASE_IMAGE_SYSTEM_PACKAGES = [
    "build-essential",
    "cmake",
    "curl",
    "ffmpeg",
    "g++",
    "git",
    "libgl1-mesa-glx",
    "libglib2.0-0",
    "make",
    "wget",
    "zip",
    "unzip",
]


def _order_optional(ver: t.Optional[Version]):
    return ver if ver is not None else Version("0")


@attrs.frozen(order=True)
class EngineBaseImage(BaseImage):
    """
    Prebuilt image shipping Python, optionally CUDA and torch, and the rogue server.
    Versions only have major and minor segments.
    """

    python_ver: t.Optional[Version] = attrs.field(default=None, order=_order_optional)
    cuda_ver: t.Optional[Version] = attrs.field(default=None, order=_order_optional)
    torch_ver: t.Optional[Version] = attrs.field(default=None, order=_order_optional)

    def get_repository(self):
        return ENGINE_BASE_IMAGE_REPOSITORY

    def get_tag(self):
        components = []
        if self.cuda_ver is not None:
            components.append(f"cuda{self.cuda_ver}")
        if self.python_ver is not None:
            components.append(f"python{self.python_ver}")
        if self.torch_ver is not None:
            components.append(f"torch{self.torch_ver}")
        return "-".join(components) if components else "latest"


@attrs.frozen
class EngineBaseImageCollection(BaseImageCollection[EngineBaseImage]):
    @classmethod
    def default(cls) -> "EngineBaseImageCollection":
        images = []
        for py_str in ENGINE_PYTHON_VERS:
            py_ver = Version(py_str)
            images.append(EngineBaseImage(python_ver=py_ver))
            for cuda_str in ENGINE_CUDA_VERS:
                images.append(EngineBaseImage(python_ver=py_ver, cuda_ver=Version(cuda_str)))
            for release in TORCH_RELEASES:
                if release.torch < MIN_ENGINE_TORCH_VER or not release.supports_python(py_ver):
                    continue
                images.append(EngineBaseImage(python_ver=py_ver, torch_ver=release.torch))
                for cuda_str in ENGINE_CUDA_VERS:
                    cuda_ver = Version(cuda_str)
                    if cuda_ver in release.cuda_vers:
                        images.append(
                            EngineBaseImage(
                                python_ver=py_ver, cuda_ver=cuda_ver, torch_ver=release.torch
                            )
                        )
        return cls(images=sorted(images))

    def get(self, cuda: str, python: str, torch: str) -> EngineBaseImage:
        """
        Find the image for a CUDA, Python and torch version triple.
        Empty strings mean the component is absent. Patch versions are ignored.
        """
        requested = EngineBaseImage(
            python_ver=parse_version(strip_patch_version(python)[0]) if python else None,
            cuda_ver=parse_version(strip_patch_version(cuda)[0]) if cuda else None,
            torch_ver=parse_version(strip_patch_version(torch)[0]) if torch else None,
        )
        if requested in self.images:
            return requested
        raise NoMatchingBaseImage(
            "No matching base image for "
            f"CUDA {cuda or 'none'}, Python {python or 'none'} and Torch {torch or 'none'}"
        )
