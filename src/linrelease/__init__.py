"""linrelease - stages a built desktop application and packages it as .deb and .rpm."""

from .core.version import __app_name__, __version__
from .pipeline import ReleasePipeline, package_linux

__all__ = ["ReleasePipeline", "package_linux", "__app_name__", "__version__"]
