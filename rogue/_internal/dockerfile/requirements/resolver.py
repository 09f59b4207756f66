import typing as t

import attrs
from packaging.requirements import InvalidRequirement, Requirement
from packaging.version import Version

from rogue._internal.configs import BuildConfig
from rogue.exceptions import PipPackageParseError

from .pip_requirement import PipRequirement
from .requirements_txt import RequirementsTxt

TORCH_WHEEL_INDEX_URL = "https://download.pytorch.org/whl"
TORCH_PKG_NAMES = {"torch", "torchvision", "torchaudio"}


def parse_requirement_str(requirement_str: str) -> PipRequirement:
    try:
        return PipRequirement(requirement=Requirement(requirement_str))
    except InvalidRequirement as e:
        raise PipPackageParseError(f"Invalid requirement '{requirement_str}': {e}")


@attrs.define
class PackageRequirementsResolver:
    """
    Build ``requirements.txt`` for a platform from the configured Python packages.
    """

    config: BuildConfig
    platform_system: str
    platform_machine: str

    def resolve(self, exclude_packages: t.Iterable[str] = ()) -> str:
        """
        Return ``requirements.txt`` content, or an empty string if no package is left
        after removing ``exclude_packages``.
        """
        excluded = [parse_requirement_str(s) for s in exclude_packages]
        requirements_txt = RequirementsTxt()
        torch_index_url = self._torch_index_url()

        requirement_strs, pip_options = self.config.python_requirement_strs()
        for option in pip_options:
            requirements_txt.add_pip_option(option)

        for requirement_str in requirement_strs:
            requirement = parse_requirement_str(requirement_str)
            if any(requirement.matches(e) for e in excluded):
                continue
            if requirement.name in TORCH_PKG_NAMES and torch_index_url:
                requirement = attrs.evolve(requirement, extra_index_url=torch_index_url)
            requirements_txt.add_requirement(requirement)

        return requirements_txt.build()

    def _torch_index_url(self) -> t.Optional[str]:
        if self.platform_system.lower() != "linux":
            return None
        if self.config.gpu:
            cuda_ver = self.config.resolved_cuda_version()
            if cuda_ver is None:
                return None
            cuda_ver = Version(f"{cuda_ver.major}.{cuda_ver.minor}")
            return f"{TORCH_WHEEL_INDEX_URL}/cu{cuda_ver.major}{cuda_ver.minor}"
        if self.platform_machine.lower() in ("x86_64", "amd64"):
            return f"{TORCH_WHEEL_INDEX_URL}/cpu"
        return None
