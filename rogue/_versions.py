import importlib.metadata

pkg_version = importlib.metadata.version(__package__ or __name__)
