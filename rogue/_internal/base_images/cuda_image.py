import re
import typing as t

import attrs
from packaging.version import Version

from rogue._internal.constants import CUDA_IMAGE_REPOSITORY
from rogue._internal.utils.version import release_prefix_matches
from rogue.exceptions import NoCompatibleCUDAImage

from .base_image import BaseImage, BaseImageCollection

RE_CUDA_IMAGE = (
    r"^([0-9]+(?:[.][0-9]+){0,2})-cudnn([0-9]+(?:[.][0-9]+){0,2})-devel-ubuntu([0-9]+[.][0-9]{2})$"
)

# Tags of nvidia/cuda images the generated Dockerfiles are known to build on
KNOWN_CUDA_IMAGE_TAGS = [
    "12.1.1-cudnn8-devel-ubuntu22.04",
    "12.1.1-cudnn8-devel-ubuntu20.04",
    "12.1.0-cudnn8-devel-ubuntu22.04",
    "12.0.1-cudnn8-devel-ubuntu22.04",
    "11.8.0-cudnn8-devel-ubuntu22.04",
    "11.8.0-cudnn8-devel-ubuntu20.04",
    "11.7.1-cudnn8-devel-ubuntu22.04",
    "11.7.1-cudnn8-devel-ubuntu20.04",
    "11.6.2-cudnn8-devel-ubuntu20.04",
    "11.4.3-cudnn8-devel-ubuntu20.04",
    "11.3.1-cudnn8-devel-ubuntu20.04",
    "11.2.2-cudnn8-devel-ubuntu20.04",
    "11.1.1-cudnn8-devel-ubuntu20.04",
]


@attrs.frozen(order=True)
class CUDAImage(BaseImage):
    cuda_ver: Version
    cudnn_ver: Version
    ubuntu_ver: Version

    def get_repository(self):
        return CUDA_IMAGE_REPOSITORY

    def get_tag(self):
        tag = (
            f"{self.cuda_ver}-cudnn{self.cudnn_ver}-devel-"
            f"ubuntu{self.ubuntu_ver.major}.{self.ubuntu_ver.minor:02}"
        )
        return tag

    @classmethod
    def from_tag(cls, tag: str) -> t.Optional["CUDAImage"]:
        matches = re.findall(RE_CUDA_IMAGE, tag)
        if not matches:
            return None
        cuda_ver_str, cudnn_ver_str, ubuntu_ver_str = matches[0]
        return cls(
            cuda_ver=Version(cuda_ver_str),
            cudnn_ver=Version(cudnn_ver_str),
            ubuntu_ver=Version(ubuntu_ver_str),
        )


@attrs.frozen
class CUDAImageCollection(BaseImageCollection[CUDAImage]):
    @classmethod
    def default(cls) -> "CUDAImageCollection":
        return cls.from_tags(KNOWN_CUDA_IMAGE_TAGS)

    @classmethod
    def from_tags(cls, tags: t.Iterable[str]) -> "CUDAImageCollection":
        images = []
        for tag in tags:
            image = CUDAImage.from_tag(tag)
            if image is not None:
                images.append(image)
        return cls(images=images)

    @property
    def cuda_vers(self) -> t.Set[Version]:
        return set(img.cuda_ver for img in self.images)

    def get_cuda_image_by_cuda_cudnn_ver(
        self, cuda_ver: Version, cudnn_ver: t.Optional[Version]
    ) -> CUDAImage:
        candidates = [
            img
            for img in self.images
            if release_prefix_matches(img.cuda_ver, cuda_ver)
            and release_prefix_matches(img.cudnn_ver, cudnn_ver)
        ]
        if len(candidates) == 0:
            cudnn_ver_str = f", CuDNN version: {cudnn_ver}" if cudnn_ver else ""
            raise NoCompatibleCUDAImage(f"CUDA version: {cuda_ver}" + cudnn_ver_str)
        return max(candidates)
