"""Package version, read from the installed distribution's metadata."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("netlog")
except PackageNotFoundError:  # source checkout that was never installed
    __version__ = "0.0.0+local"
