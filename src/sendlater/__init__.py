from importlib.metadata import PackageNotFoundError, version

from sendlater.config import get_config

try:
    __version__ = version("sendlater")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "__version__",
    "get_config",
]
