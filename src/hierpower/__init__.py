"""HierPower: hierarchical area and leakage reporting for structural netlists"""

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("hierpower")
except (ImportError, PackageNotFoundError):
    __version__ = "0.0.0"
