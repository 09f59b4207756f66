from .pip_requirement import PipRequirement
from .requirements_txt import RequirementsTxt
from .resolver import PackageRequirementsResolver, parse_requirement_str

__all__ = [
    "PipRequirement",
    "RequirementsTxt",
    "PackageRequirementsResolver",
    "parse_requirement_str",
]
