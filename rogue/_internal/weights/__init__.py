from .finder import find_weights
from .manifest import WeightsManifest
from .splitter import (
    DOCKERIGNORE_HEADER,
    generate_for_weights,
    make_dockerignore,
    path_in_container,
)

__all__ = [
    "find_weights",
    "WeightsManifest",
    "DOCKERIGNORE_HEADER",
    "generate_for_weights",
    "make_dockerignore",
    "path_in_container",
]
