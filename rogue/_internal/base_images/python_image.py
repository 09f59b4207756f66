import attrs

from rogue._internal.constants import PYTHON_IMAGE_REPOSITORY

from .base_image import BaseImage


@attrs.frozen
class PythonImage(BaseImage):
    # Kept verbatim from the config, patch version included
    python_version: str
    slim: bool = True

    def get_repository(self):
        return PYTHON_IMAGE_REPOSITORY

    def get_tag(self):
        return self.python_version + ("-slim" if self.slim else "")
