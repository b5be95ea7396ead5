"""
Error kinds raised while loading a volume.
"""


class LoadError(RuntimeError):
    """A volume could not be loaded; nothing from the attempt is exposed."""


class InvalidHeader(LoadError):
    """Header fields are inconsistent with each other or with the voxel buffer."""


class UnsupportedDatatype(LoadError):
    """The NIfTI datatype code has no numeric buffer representation here."""
