from .generator import (
    BaseImageStrategy,
    Generator,
    parse_use_cuda_base_image,
    read_installer_wheel,
)

__all__ = ["BaseImageStrategy", "Generator", "parse_use_cuda_base_image", "read_installer_wheel"]
