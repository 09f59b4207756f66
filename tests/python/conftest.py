import os

import pytest

# Load fixtures
from .dockerfile.fixtures import *  # noqa
from .weights.fixtures import *  # noqa

# Enable vscode debugger to catch exc
if os.getenv("_PYTEST_RAISE", "0") != "0":

    @pytest.hookimpl(tryfirst=True)
    def pytest_exception_interact(call):
        raise call.excinfo.value

    @pytest.hookimpl(tryfirst=True)
    def pytest_internalerror(excinfo):
        raise excinfo.value
