import typing as t

import attrs

from .pip_requirement import PipRequirement


@attrs.define
class RequirementsTxt:
    _pkg_requirements: t.List[str] = attrs.field(factory=list, init=False)
    _pip_options: t.List[str] = attrs.field(factory=list, init=False)

    @property
    def is_empty(self):
        return len(self._pkg_requirements) == 0

    def add_requirement(self, requirement: PipRequirement):
        self._pkg_requirements.append(str(requirement.requirement))
        if requirement.extra_index_url:
            self.add_pip_option(f"--extra-index-url {requirement.extra_index_url}")

    def add_pip_option(self, option: str):
        if option not in self._pip_options:
            self._pip_options.append(option)

    def build(self) -> str:
        if self.is_empty:
            return ""
        requirements_txt = ""
        for option in self._pip_options:
            requirements_txt += f"{option}\n"
        for pkg_requirement in self._pkg_requirements:
            requirements_txt += f"{pkg_requirement}\n"
        return requirements_txt
