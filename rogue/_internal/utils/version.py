import typing as t

from packaging.version import InvalidVersion, Version

from rogue.exceptions import MalformedVersion


def parse_version(ver_str: str) -> Version:
    try:
        return Version(ver_str)
    except InvalidVersion:
        raise MalformedVersion(f"Invalid version: {ver_str}")


def strip_patch_version(ver_str: str) -> t.Tuple[str, bool]:
    """
    Keep only ``major.minor`` of a version string.

    Returns the stripped version and whether it differs from the given string.
    An empty string is returned unchanged.
    """
    if ver_str == "":
        return "", False

    ver = parse_version(ver_str)
    stripped = f"{ver.major}.{ver.minor}"
    return stripped, stripped != ver_str


def release_prefix_matches(ver: Version, pinned: t.Optional[Version]) -> bool:
    """
    Check the release segments present in both versions are the same.
    ``None`` matches any version, e.g. ``11.8`` matches ``11.8.0`` and ``11``, not ``11.7.1``.
    """
    if pinned is None:
        return True
    num_segments = min(len(ver.release), len(pinned.release))
    return ver.release[:num_segments] == pinned.release[:num_segments]
