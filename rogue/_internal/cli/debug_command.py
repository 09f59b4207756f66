import os
import typing as t
from pathlib import Path

import click

from rogue._internal import constants
from rogue._internal.configs import load_config
from rogue._internal.dockerfile import Generator, parse_use_cuda_base_image, read_installer_wheel
from rogue._internal.logging import log_info
from rogue._internal.utils.file import write_safely

from .options import common_options

WEIGHTS_DOCKERFILE_NAME = "weights.Dockerfile"
WEIGHTS_MANIFEST_NAME = "weights.json"


@click.command()
@click.argument(
    "dir",
    default=".",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
)
@click.option(
    "--config",
    "-f",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help=f"Path to the config file (default: DIR/{constants.DEFAULT_CONFIG_FILE})",
)
@click.option(
    "--separate-weights",
    is_flag=True,
    default=False,
    help="Copy model weights from a separate image",
)
@click.option(
    "--use-cuda-base-image",
    type=click.Choice(["auto", "true", "false"]),
    default="auto",
    show_default=True,
    help="Use nvidia/cuda as the base image of GPU models",
)
@click.option(
    "--use-engine-base-image",
    is_flag=True,
    default=False,
    help="Use a prebuilt base image shipping Python, CUDA and torch",
)
@click.option(
    "--image-name",
    "-n",
    default=None,
    help="Name of the model image. Required with '--separate-weights'",
)
@click.option(
    "--installer-wheel",
    type=click.Path(exists=True, dir_okay=False, resolve_path=True),
    default=None,
    help="Installer wheel installed in the image (default: the one shipped with rogue)",
)
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(file_okay=False),
    default=None,
    help=(
        "Write generated files to this directory instead of printing the Dockerfile. "
        "Required with '--separate-weights'"
    ),
)
@common_options
def debug(
    dir: str,
    config_path: t.Optional[str],
    separate_weights: bool,
    use_cuda_base_image: str,
    use_engine_base_image: bool,
    image_name: t.Optional[str],
    installer_wheel: t.Optional[str],
    output_dir: t.Optional[str],
    **kwargs,
):
    """
    Generate a Dockerfile from a config file

    DIR: Build root directory
    (default: '.')
    """
    if separate_weights and not image_name:
        raise click.BadOptionUsage(
            "--image-name", message="'--image-name' is required with '--separate-weights'"
        )
    if separate_weights and not output_dir:
        raise click.BadOptionUsage(
            "--output-dir", message="'--output-dir' is required with '--separate-weights'"
        )

    build_dir = Path(dir)
    config = load_config(
        Path(config_path) if config_path else build_dir / constants.DEFAULT_CONFIG_FILE
    )
    generator = Generator(
        config=config,
        build_dir=build_dir,
        installer_wheel=read_installer_wheel(Path(installer_wheel) if installer_wheel else None),
        use_cuda_base_image=parse_use_cuda_base_image(use_cuda_base_image),
        use_engine_base_image=use_engine_base_image,
        build_stage_deps=os.environ.get(constants.BUILD_STAGE_DEPS_ENV_VAR) or None,
    )

    with generator:
        if separate_weights:
            assert image_name is not None
            weights_dockerfile, dockerfile, dockerignore = (
                generator.generate_model_base_with_separate_weights(image_name)
            )
        else:
            weights_dockerfile, dockerignore = None, None
            dockerfile = generator.generate_dockerfile_without_separate_weights()

        if output_dir is None:
            click.echo(dockerfile)
            return

        out = Path(output_dir)
        out.mkdir(parents=True, exist_ok=True)
        write_safely(out / "Dockerfile", dockerfile + "\n")
        if weights_dockerfile is not None and dockerignore is not None:
            write_safely(out / WEIGHTS_DOCKERFILE_NAME, weights_dockerfile + "\n")
            write_safely(out / ".dockerignore", dockerignore)
            generator.generate_weights_manifest().save(out / WEIGHTS_MANIFEST_NAME)
        log_info(f"Generated files are written to [bold]{out}[/bold]")
