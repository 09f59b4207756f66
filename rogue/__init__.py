from rogue._internal.configs import BuildConfig, Mount, RunItem, load_config
from rogue._internal.dockerfile import BaseImageStrategy, Generator
from rogue._internal.weights import WeightsManifest

from ._versions import pkg_version as __version__

__all__ = [
    "BuildConfig",
    "Mount",
    "RunItem",
    "load_config",
    "BaseImageStrategy",
    "Generator",
    "WeightsManifest",
    "__version__",
]
