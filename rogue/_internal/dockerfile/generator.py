import enum
import platform
import typing as t
from pathlib import Path

import attrs
import jinja2

from rogue._internal import constants
from rogue._internal.base_images import (
    ENGINE_BASE_IMAGE_SYSTEM_PACKAGES,
    EngineBaseImage,
    EngineBaseImageCollection,
    PythonImage,
)
from rogue._internal.configs import BuildConfig, RunItem
from rogue._internal.logging import log_debug, log_info, log_warning
from rogue._internal.utils.file import FileWalker, walk
from rogue._internal.utils.version import strip_patch_version
from rogue._internal.weights import (
    WeightsManifest,
    generate_for_weights,
    make_dockerignore,
    path_in_container,
)
from rogue.exceptions import BuildError, CleanupError, MultilineCommand, WeightsDiscoveryError

from .instructions import BlockKind, DockerfilePlan
from .requirements import PackageRequirementsResolver
from .staging import ScratchDir

TINI_VERSION = "v0.19.0"
PYTHON_BUILD_PACKAGES = [
    "make",
    "build-essential",
    "libssl-dev",
    "zlib1g-dev",
    "libbz2-dev",
    "libreadline-dev",
    "libsqlite3-dev",
    "wget",
    "curl",
    "llvm",
    "libncurses5-dev",
    "libncursesw5-dev",
    "xz-utils",
    "tk-dev",
    "libffi-dev",
    "liblzma-dev",
    "git",
    "ca-certificates",
]
PREAMBLE = [
    "ENV DEBIAN_FRONTEND=noninteractive",
    "ENV PYTHONUNBUFFERED=1",
    "ENV LD_LIBRARY_PATH=$LD_LIBRARY_PATH:/usr/lib/x86_64-linux-gnu"
    ":/usr/local/nvidia/lib64:/usr/local/nvidia/bin",
    "ENV NVIDIA_DRIVER_CAPABILITIES=all",
]
PIP_CACHE_MOUNT = "--mount=type=cache,target=/root/.cache/pip"
APT_CACHE_MOUNT = "--mount=type=cache,target=/var/cache/apt,sharing=locked"

_j2_env = jinja2.Environment(
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=False,
    loader=jinja2.FileSystemLoader(Path(__file__).parent / "templates", followlinks=True),
)


class BaseImageStrategy(enum.Enum):
    ENGINE_BASE = "engine base image"
    CUDA_BASE = "CUDA base image"
    PLAIN = "Python slim image"

    @classmethod
    def select(
        cls, gpu: bool, use_cuda_base_image: bool, use_engine_base_image: bool
    ) -> "BaseImageStrategy":
        if use_engine_base_image:
            return cls.ENGINE_BASE
        if gpu and use_cuda_base_image:
            return cls.CUDA_BASE
        return cls.PLAIN


def parse_use_cuda_base_image(value: str) -> bool:
    # "false" -> False, "true" -> True, "auto" -> True, "asdf" -> True
    return value != "false"


def read_installer_wheel(path: t.Optional[Path] = None) -> bytes:
    path = path if path else constants.EMBEDDED_INSTALLER_WHEEL
    if not path.is_file():
        raise BuildError(
            f"Installer wheel not found at '{path}'. "
            "Build it and place it there, or pass its path explicitly."
        )
    return path.read_bytes()


@attrs.define(kw_only=True)
class Generator:
    """
    Generates the Dockerfile and .dockerignore of a model image.

    Files referenced by the Dockerfile are written to a scratch directory under
    ``build_dir``, which is removed by :meth:`cleanup`.
    """

    config: BuildConfig
    build_dir: Path = attrs.field(converter=lambda p: Path(p).resolve())
    installer_wheel: bytes = attrs.field(repr=False)
    use_cuda_base_image: bool = True
    use_engine_base_image: bool = False
    # Run in the deps stage before installing requirements
    build_stage_deps: t.Optional[str] = None
    file_walker: FileWalker = walk
    platform_system: str = attrs.field(factory=lambda: platform.system().lower())
    platform_machine: str = attrs.field(factory=platform.machine)

    strategy: BaseImageStrategy = attrs.field(init=False)
    model_dirs: t.List[str] = attrs.field(init=False, factory=list)
    model_files: t.List[str] = attrs.field(init=False, factory=list)
    python_requirements_contents: str = attrs.field(init=False, default="")
    _scratch_dir: ScratchDir = attrs.field(init=False)

    def __attrs_post_init__(self):
        self.strategy = BaseImageStrategy.select(
            gpu=self.config.gpu,
            use_cuda_base_image=self.use_cuda_base_image,
            use_engine_base_image=self.use_engine_base_image,
        )
        self._scratch_dir = ScratchDir.create(self.build_dir)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, tb):
        try:
            self.cleanup()
        except CleanupError as e:
            if exc_type is None:
                raise
            log_warning(str(e))

    @property
    def tmp_dir(self) -> Path:
        return self._scratch_dir.abs_path

    @property
    def relative_tmp_dir(self) -> Path:
        return self._scratch_dir.rel_path

    def cleanup(self) -> None:
        self._scratch_dir.remove()

    def base_image(self) -> str:
        if self.strategy is BaseImageStrategy.ENGINE_BASE:
            return self._engine_base_image().name
        if self.strategy is BaseImageStrategy.CUDA_BASE:
            return self.config.cuda_base_image_tag()
        return PythonImage(self.config.python_version).name

    def generate_model_base(self) -> str:
        plan = self._initial_plan()
        plan.add(BlockKind.SERVER, self._server())
        return self._render(plan)

    def generate_dockerfile_without_separate_weights(self) -> str:
        """
        Generate a Dockerfile that doesn't write model weights to a separate layer.
        """
        plan = self._initial_plan()
        plan.add(BlockKind.SERVER, self._server())
        plan.add(BlockKind.SOURCE_COPY, self._copy_source())
        return self._render(plan)

    def generate_model_base_with_separate_weights(
        self, image_name: str
    ) -> t.Tuple[str, str, str]:
        """
        Generate Dockerfiles copying model weights from a separate image.

        Returns the Dockerfile of the weights image, the Dockerfile of the model
        image and the .dockerignore content excluding weights from the build context.
        """
        try:
            weights_dockerfile, self.model_dirs, self.model_files = generate_for_weights(
                self.file_walker, self.build_dir
            )
        except OSError as e:
            raise WeightsDiscoveryError(
                f"Failed to generate Dockerfile for model weights files: {e}"
            ) from e
        log_info(
            f"Found {len(self.model_dirs)} weights directories "
            f"and {len(self.model_files)} weights files"
        )

        plan = self._initial_plan()
        # Inject the weights image so that we can COPY from it
        plan.insert_before_first_stage(
            BlockKind.WEIGHTS_STAGE,
            f"FROM {image_name}-weights AS {constants.WEIGHTS_STAGE_ALIAS}",
        )
        plan.add(BlockKind.SERVER, self._server())
        plan.add(
            BlockKind.WEIGHTS_COPY,
            "\n".join(
                f"COPY --from={constants.WEIGHTS_STAGE_ALIAS} --link "
                f"{path_in_container(p)} {path_in_container(p)}"
                for p in self.model_dirs + self.model_files
            ),
        )
        plan.add(BlockKind.SOURCE_COPY, self._copy_source())

        dockerignore = make_dockerignore(self.model_dirs, self.model_files)
        return weights_dockerfile, self._render(plan), dockerignore

    def generate_weights_manifest(self) -> WeightsManifest:
        return WeightsManifest.from_paths(
            self.file_walker, self.build_dir, self.model_dirs, self.model_files
        )

    def _initial_plan(self) -> DockerfilePlan:
        base_image = self.base_image()
        log_info(f"[bold]Use GPU: {self.config.gpu}[/bold]")
        log_info(f"[bold]Base image: [green]{base_image}[/green] ({self.strategy.value})[/bold]")
        if self.strategy is BaseImageStrategy.ENGINE_BASE:
            return self._engine_base_plan(base_image)
        return self._deps_stage_plan(base_image)

    def _engine_base_plan(self, base_image: str) -> DockerfilePlan:
        apt_installs = self._apt_installs()
        run_commands = self._run_commands()
        pip_installs = self._pip_installs()

        plan = DockerfilePlan()
        plan.add(BlockKind.SYNTAX, constants.DOCKERFILE_SYNTAX)
        plan.add(BlockKind.BASE_IMAGE, f"FROM {base_image}")
        plan.add(BlockKind.SYSTEM_PACKAGES, apt_installs)
        plan.add(BlockKind.PIP_INSTALL, pip_installs)
        plan.add(BlockKind.RUN_COMMANDS, run_commands)
        return plan

    def _deps_stage_plan(self, base_image: str) -> DockerfilePlan:
        install_python = self._install_python()
        apt_installs = self._apt_installs()
        run_commands = self._run_commands()
        pip_install_stage = self._pip_install_stage()

        plan = DockerfilePlan()
        plan.add(BlockKind.SYNTAX, constants.DOCKERFILE_SYNTAX)
        plan.add(BlockKind.DEPS_STAGE, pip_install_stage)
        plan.add(BlockKind.BASE_IMAGE, f"FROM {base_image}")
        plan.add(BlockKind.PREAMBLE, "\n".join(PREAMBLE))
        plan.add(
            BlockKind.INIT_PROCESS,
            _render_template("install_tini.j2", tini_version=TINI_VERSION),
        )
        plan.add(BlockKind.PYTHON_INSTALL, install_python)
        plan.add(BlockKind.SYSTEM_PACKAGES, apt_installs)
        plan.add(BlockKind.DEPS_COPY, self._copy_pip_packages_from_install_stage())
        plan.add(BlockKind.RUN_COMMANDS, run_commands)
        return plan

    def _engine_base_image(self) -> EngineBaseImage:
        python_version, changed = strip_patch_version(self.config.python_version)
        if changed:
            log_warning(
                f"Stripping patch version from Python version {self.config.python_version} "
                f"to {python_version}"
            )

        original_torch_version = self.config.torch_version() or ""
        torch_version, changed = strip_patch_version(original_torch_version)
        if changed:
            log_warning(
                f"Stripping patch version from Torch version {original_torch_version} "
                f"to {torch_version}"
            )

        cuda_ver = self.config.resolved_cuda_version()
        cuda_version = str(cuda_ver) if cuda_ver is not None else ""
        return EngineBaseImageCollection.default().get(cuda_version, python_version, torch_version)

    def _apt_installs(self) -> str:
        packages = self.config.system_packages
        if self.strategy is BaseImageStrategy.ENGINE_BASE:
            packages = [pkg for pkg in packages if pkg not in ENGINE_BASE_IMAGE_SYSTEM_PACKAGES]
        if len(packages) == 0:
            return ""

        return (
            f"RUN {APT_CACHE_MOUNT} apt-get update -qq && apt-get install -qqy "
            + " ".join(packages)
            + " && rm -rf /var/lib/apt/lists/*"
        )

    def _install_python(self) -> str:
        if self.strategy is not BaseImageStrategy.CUDA_BASE:
            return ""
        # pyenv install-latest resolves the patch version when the image is built
        return _render_template(
            "install_python.j2",
            python_version=self.config.python_version,
            build_packages=PYTHON_BUILD_PACKAGES,
        )

    def _install_installer_wheel(self) -> str:
        lines, container_path = self._scratch_dir.stage(
            constants.INSTALLER_WHEEL_FILENAME, self.installer_wheel
        )
        lines.append(
            f"RUN {PIP_CACHE_MOUNT} pip install -t {constants.DEPS_DIR_IN_CONTAINER} "
            f"{container_path}"
        )
        return "\n".join(lines)

    def _requirements_resolver(self) -> PackageRequirementsResolver:
        return PackageRequirementsResolver(
            config=self.config,
            platform_system=self.platform_system,
            platform_machine=self.platform_machine,
        )

    def _pip_installs(self) -> str:
        # torch and torchvision are already in the base image
        exclude_packages = []
        torch_version = self.config.torch_version()
        if torch_version:
            exclude_packages.append(f"torch=={torch_version}")
        torchvision_version = self.config.torchvision_version()
        if torchvision_version:
            exclude_packages.append(f"torchvision=={torchvision_version}")

        self.python_requirements_contents = self._requirements_resolver().resolve(
            exclude_packages
        )
        if self.python_requirements_contents.strip() == "":
            return ""

        log_debug(
            "Generated requirements.txt:\n" + self.python_requirements_contents, pretty=False
        )
        lines, container_path = self._scratch_dir.stage(
            "requirements.txt", self.python_requirements_contents.encode("utf-8")
        )
        return "\n".join([lines[0], f"RUN pip install -r {container_path}"])

    def _pip_install_stage(self) -> str:
        install_wheel = self._install_installer_wheel()
        self.python_requirements_contents = self._requirements_resolver().resolve()

        # Not slim, so that we can compile wheels
        lines = [
            f"FROM {PythonImage(self.config.python_version, slim=False).name} "
            f"as {constants.DEPS_STAGE_ALIAS}"
        ]
        if self.build_stage_deps:
            lines.append(f"RUN {self.build_stage_deps}")
        lines.append(install_wheel)

        if self.python_requirements_contents.strip() == "":
            return "\n".join(lines)

        log_debug(
            "Generated requirements.txt:\n" + self.python_requirements_contents, pretty=False
        )
        copy_lines, container_path = self._scratch_dir.stage(
            "requirements.txt", self.python_requirements_contents.encode("utf-8")
        )
        lines.append(copy_lines[0])
        lines.append(
            f"RUN {PIP_CACHE_MOUNT} pip install -t {constants.DEPS_DIR_IN_CONTAINER} "
            f"-r {container_path}"
        )
        return "\n".join(lines)

    def _copy_pip_packages_from_install_stage(self) -> str:
        python_version, _ = strip_patch_version(self.config.python_version)
        return _render_template(
            "copy_deps.j2",
            pyenv=self.strategy is BaseImageStrategy.CUDA_BASE,
            deps_stage=constants.DEPS_STAGE_ALIAS,
            deps_dir=constants.DEPS_DIR_IN_CONTAINER,
            python_version=python_version,
        )

    def _run_commands(self) -> str:
        run_items = list(self.config.run)
        # For backwards compatibility
        for command in self.config.pre_install:
            run_items.append(RunItem(command=command))

        lines = []
        for run in run_items:
            command = run.command.strip()
            if "\n" in command:
                raise MultilineCommand(command)

            tokens = []
            for mount in run.mounts:
                if mount.type == "secret":
                    tokens.append(f"--mount=type=secret,id={mount.id},target={mount.target}")
                else:
                    log_debug(f"Ignoring mount of type '{mount.type}' in '{command}'")
            tokens.append(command)
            lines.append("RUN " + " ".join(tokens))
        return "\n".join(lines)

    def _server(self) -> str:
        cmd = ", ".join(f'"{arg}"' for arg in ["python", "-m", constants.SERVER_MODULE])
        return "\n".join(
            [
                f"WORKDIR {constants.WORKING_DIR_IN_CONTAINER}",
                f"EXPOSE {constants.SERVER_PORT}",
                f"CMD [{cmd}]",
            ]
        )

    def _copy_source(self) -> str:
        return f"COPY . {constants.WORKING_DIR_IN_CONTAINER}"

    def _render(self, plan: DockerfilePlan) -> str:
        dockerfile = plan.render()
        log_debug(
            "Dockerfile:\n" + "\n".join(["  " + line for line in dockerfile.split("\n")]),
            pretty=False,
        )
        return dockerfile


def _render_template(name: str, **kwargs) -> str:
    return _j2_env.get_template(name=name).render(**kwargs)
