import typing as t

import attrs
from packaging.version import Version

from rogue._internal.utils.version import release_prefix_matches
from rogue.exceptions import NoCompatibleVersion


@attrs.frozen
class TorchRelease:
    torch: Version
    torchvision: Version
    cuda_vers: t.FrozenSet[Version]
    min_py_ver: Version
    max_py_ver: Version

    def supports_python(self, py_ver: Version) -> bool:
        py_ver = Version(f"{py_ver.major}.{py_ver.minor}")
        return self.min_py_ver <= py_ver <= self.max_py_ver


def _release(torch, torchvision, cuda_vers, min_py, max_py) -> TorchRelease:
    return TorchRelease(
        torch=Version(torch),
        torchvision=Version(torchvision),
        cuda_vers=frozenset(Version(v) for v in cuda_vers),
        min_py_ver=Version(min_py),
        max_py_ver=Version(max_py),
    )


TORCH_RELEASES = [
    _release("2.3", "0.18", ["11.8", "12.1"], "3.8", "3.12"),
    _release("2.2", "0.17", ["11.8", "12.1"], "3.8", "3.12"),
    _release("2.1", "0.16", ["11.8", "12.1"], "3.8", "3.11"),
    _release("2.0", "0.15", ["11.7", "11.8"], "3.8", "3.11"),
    _release("1.13", "0.14", ["11.6", "11.7"], "3.8", "3.10"),
    _release("1.12", "0.13", ["11.3", "11.6"], "3.8", "3.10"),
]


def find_torch_release(torch_ver: Version) -> t.Optional[TorchRelease]:
    for release in TORCH_RELEASES:
        if release_prefix_matches(torch_ver, release.torch):
            return release
    return None


def infer_cuda_ver(
    torch_ver: t.Optional[Version], available_cuda_vers: t.Set[Version]
) -> Version:
    """
    Return the latest CUDA version which has a base image and, if torch is pinned,
    is supported by that torch release.
    """
    candidates = set(available_cuda_vers)
    release = find_torch_release(torch_ver) if torch_ver is not None else None
    if release is not None:
        candidates = {
            cuda_ver
            for cuda_ver in candidates
            if any(release_prefix_matches(cuda_ver, v) for v in release.cuda_vers)
        }
    if len(candidates) == 0:
        raise NoCompatibleVersion(f"No CUDA base image is compatible with torch {torch_ver}")
    return max(candidates)
