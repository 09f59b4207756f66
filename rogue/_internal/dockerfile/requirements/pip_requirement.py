import typing as t

import attrs
from packaging.requirements import Requirement
from packaging.utils import canonicalize_name


@attrs.frozen
class PipRequirement:
    requirement: Requirement
    extra_index_url: t.Optional[str] = attrs.field(default=None)

    @property
    def name(self) -> str:
        return canonicalize_name(self.requirement.name)

    @property
    def specifier(self) -> str:
        return str(self.requirement.specifier)

    def matches(self, other: "PipRequirement") -> bool:
        return self.name == other.name and self.requirement.specifier == other.requirement.specifier
