from pathlib import Path, PurePosixPath

from packaging.version import Version

DEFAULT_CONFIG_FILE = "rogue.yaml"

# Build context
ROGUE_DIR_NAME = ".rogue"
SCRATCH_DIR = Path(ROGUE_DIR_NAME) / "tmp"
DOCKERFILE_SYNTAX = "#syntax=docker/dockerfile:1.4"
BUILD_STAGE_DEPS_ENV_VAR = "ROGUE_EXPERIMENTAL_BUILD_STAGE_DEPS"

# Installer wheel shipped inside the package. The name needs the full wheel format,
# otherwise pip refuses to install it.
INSTALLER_WHEEL_FILENAME = "rogue-0.0.1.dev-py3-none-any.whl"
EMBEDDED_INSTALLER_WHEEL = Path(__file__).parent / "dockerfile" / "embed" / INSTALLER_WHEEL_FILENAME

# Container
WORKING_DIR_IN_CONTAINER = PurePosixPath("/src")
DEPS_DIR_IN_CONTAINER = PurePosixPath("/dep")
STAGED_FILES_DIR_IN_CONTAINER = PurePosixPath("/tmp")
SERVER_PORT = 5000
SERVER_MODULE = "rogue.server.http"

# Images
PYTHON_IMAGE_REPOSITORY = "python"
CUDA_IMAGE_REPOSITORY = "nvidia/cuda"
ENGINE_BASE_IMAGE_REPOSITORY = "r8.im/rogue-base"
WEIGHTS_STAGE_ALIAS = "weights"
DEPS_STAGE_ALIAS = "deps"

# Weights
MIN_WEIGHT_FILE_SIZE = 10 * 1024 * 1024
CODE_FILE_SUFFIXES = [".py", ".ipynb"]

MIN_SUPPORTED_PYTHON_VER = Version("3.8")
MAX_SUPPORTED_PYTHON_VER = Version("3.12")
DEFAULT_PYTHON_VER = "3.11"
