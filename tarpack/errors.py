class TarpackError(Exception):
    """Base class for tarpack-specific errors."""


# Codec selection/decoding
class UnknownCompressionError(TarpackError, ValueError):
    pass


class CodecError(TarpackError):
    pass


# Tar stream
class ArchiveFormatError(TarpackError):
    pass


class UnsafePathError(ArchiveFormatError):
    pass


# Filesystem walk
class UnsupportedEntryError(TarpackError):
    pass
