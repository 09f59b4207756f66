from .base_image import BaseImage, BaseImageCollection
from .cuda_image import CUDAImage, CUDAImageCollection
from .engine_image import (
    ENGINE_BASE_IMAGE_SYSTEM_PACKAGES,
    EngineBaseImage,
    EngineBaseImageCollection,
)
from .python_image import PythonImage
from .torch_compat import TORCH_RELEASES, TorchRelease, find_torch_release, infer_cuda_ver

__all__ = [
    "BaseImage",
    "BaseImageCollection",
    "CUDAImage",
    "CUDAImageCollection",
    "ENGINE_BASE_IMAGE_SYSTEM_PACKAGES",
    "EngineBaseImage",
    "EngineBaseImageCollection",
    "PythonImage",
    "TORCH_RELEASES",
    "TorchRelease",
    "find_torch_release",
    "infer_cuda_ver",
]
