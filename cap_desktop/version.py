"""Version information for the Cap desktop bootstrap."""

__version__ = "0.3.1"

PACKAGE_NAME = "cap-desktop"


def release_name() -> str:
    """Get the release tag reported with every telemetry event.

    Returns:
        Release in ``<package>@<version>`` form (e.g. ``cap-desktop@0.3.1``)
    """
    return f"{PACKAGE_NAME}@{__version__}"
