import typing as t

import pytest

from rogue._internal.configs import BuildConfig
from rogue._internal.dockerfile import Generator

DUMMY_INSTALLER_WHEEL = b"PK\x03\x04 dummy wheel"


@pytest.fixture
def make_generator(tmp_path):
    """
    Create generators on ``tmp_path``, removing their scratch directories afterwards.
    """
    generators: t.List[Generator] = []

    def _make_generator(config: BuildConfig, **kwargs) -> Generator:
        kwargs.setdefault("build_dir", tmp_path)
        kwargs.setdefault("installer_wheel", DUMMY_INSTALLER_WHEEL)
        kwargs.setdefault("platform_system", "linux")
        kwargs.setdefault("platform_machine", "x86_64")
        generator = Generator(config=config, **kwargs)
        generators.append(generator)
        return generator

    yield _make_generator

    for generator in generators:
        generator.cleanup()


__all__ = ["make_generator", "DUMMY_INSTALLER_WHEEL"]
