import pytest

from rogue import exceptions
from rogue._internal.configs import BuildConfig
from rogue._internal.dockerfile.requirements import (
    PackageRequirementsResolver,
    RequirementsTxt,
    parse_requirement_str,
)


def _resolver(config: BuildConfig, system: str = "linux", machine: str = "x86_64"):
    return PackageRequirementsResolver(
        config=config, platform_system=system, platform_machine=machine
    )


def test_parse_requirement_str():
    requirement = parse_requirement_str("Torch_Vision==0.16.0")
    assert requirement.name == "torch-vision"
    assert requirement.specifier == "==0.16.0"

    with pytest.raises(exceptions.PipPackageParseError):
        parse_requirement_str("not a requirement ==")


def test_requirement_matches():
    assert parse_requirement_str("torch==2.1.0").matches(parse_requirement_str("Torch==2.1.0"))
    assert not parse_requirement_str("torch==2.1.0").matches(parse_requirement_str("torch==2.1.1"))
    assert not parse_requirement_str("torch").matches(parse_requirement_str("torch==2.1.0"))


def test_requirements_txt():
    requirements_txt = RequirementsTxt()
    assert requirements_txt.build() == ""

    requirements_txt.add_pip_option("--extra-index-url https://example.com/simple")
    assert requirements_txt.build() == ""

    requirements_txt.add_requirement(parse_requirement_str("numpy==1.26.0"))
    assert requirements_txt.build() == (
        "--extra-index-url https://example.com/simple\nnumpy==1.26.0\n"
    )


def test_resolve_without_packages():
    assert _resolver(BuildConfig()).resolve() == ""


def test_resolve_packages():
    config = BuildConfig(python_packages=["numpy==1.26.0", "pillow"])
    assert _resolver(config).resolve() == "numpy==1.26.0\npillow\n"


def test_resolve_excludes_packages():
    config = BuildConfig(python_packages=["torch==2.1.0", "torchvision==0.16.0", "numpy"])
    resolver = _resolver(config)
    assert resolver.resolve(["torch==2.1.0", "torchvision==0.16.0"]) == "numpy\n"

    # Only identical specifiers are excluded
    assert "torch==2.1.0\n" in resolver.resolve(["torch==2.0.0"])


def test_resolve_all_excluded():
    config = BuildConfig(python_packages=["torch==2.1.0"])
    assert _resolver(config).resolve(["torch==2.1.0"]) == ""


def test_resolve_torch_cpu_on_linux():
    config = BuildConfig(python_packages=["torch==2.1.0", "numpy"])
    assert _resolver(config).resolve() == (
        "--extra-index-url https://download.pytorch.org/whl/cpu\ntorch==2.1.0\nnumpy\n"
    )


def test_resolve_torch_gpu_on_linux():
    config = BuildConfig(gpu=True, python_packages=["torch==2.0.1", "torchaudio==2.0.2"])
    assert _resolver(config).resolve() == (
        "--extra-index-url https://download.pytorch.org/whl/cu118\n"
        "torch==2.0.1\n"
        "torchaudio==2.0.2\n"
    )


@pytest.mark.parametrize("system,machine", [("darwin", "arm64"), ("linux", "aarch64")])
def test_resolve_torch_without_index(system, machine):
    config = BuildConfig(python_packages=["torch==2.1.0"])
    assert _resolver(config, system=system, machine=machine).resolve() == "torch==2.1.0\n"


def test_resolve_requirements_file(tmp_path):
    requirements_path = tmp_path / "requirements.txt"
    requirements_path.write_text(
        "# comment\n"
        "--extra-index-url https://example.com/simple\n"
        "\n"
        "requests>=2.0\n"
        "  scipy  \n"
    )
    config = BuildConfig(python_packages=["numpy"], python_requirements=requirements_path)
    assert _resolver(config).resolve() == (
        "--extra-index-url https://example.com/simple\nnumpy\nrequests>=2.0\nscipy\n"
    )


def test_resolve_invalid_package():
    config = BuildConfig(python_packages=["numpy["])
    with pytest.raises(exceptions.PipPackageParseError):
        _resolver(config).resolve()


@pytest.mark.parametrize(
    "content,expected",
    [
        (
            "-i https://pypi.example.com/simple\nnumpy\n",
            "-i https://pypi.example.com/simple\nnumpy\n",
        ),
        (
            "-f https://example.com/wheels\nnumpy\n",
            "-f https://example.com/wheels\nnumpy\n",
        ),
        ("numpy==1.26.0  # pinned for abi\n", "numpy==1.26.0\n"),
        ("numpy \\\n  >=1.26\n", "numpy>=1.26\n"),
        (
            "--find-links=https://example.com/wheels\npillow\n",
            "--find-links=https://example.com/wheels\npillow\n",
        ),
    ],
)
def test_resolve_requirements_file_syntax(tmp_path, content, expected):
    requirements_path = tmp_path / "requirements.txt"
    requirements_path.write_text(content)
    config = BuildConfig(python_requirements=requirements_path)
    assert _resolver(config).resolve() == expected


def test_resolve_included_requirements_file(tmp_path):
    (tmp_path / "requirements").mkdir()
    (tmp_path / "requirements" / "base.txt").write_text(
        "--extra-index-url https://example.com/simple\nnumpy\n-r ../requirements.txt\n"
    )
    requirements_path = tmp_path / "requirements.txt"
    requirements_path.write_text("-r requirements/base.txt\nscipy\n")

    config = BuildConfig(python_requirements=requirements_path)
    assert _resolver(config).resolve() == (
        "--extra-index-url https://example.com/simple\nnumpy\nscipy\n"
    )


@pytest.mark.parametrize(
    "content", ["-r missing.txt\n", "-c constraints.txt\nnumpy\n", "--constraint=c.txt\n"]
)
def test_resolve_unsupported_requirements_file(tmp_path, content):
    requirements_path = tmp_path / "requirements.txt"
    requirements_path.write_text(content)
    config = BuildConfig(python_requirements=requirements_path)
    with pytest.raises(exceptions.ConfigError):
        _resolver(config).resolve()


def test_resolve_torch_in_requirements_file(tmp_path):
    requirements_path = tmp_path / "requirements.txt"
    requirements_path.write_text("torch==2.1.0\nnumpy\n")
    config = BuildConfig(python_requirements=requirements_path)

    assert _resolver(config).resolve(["torch==2.1.0"]) == "numpy\n"
