"""Exceptions raised while analyzing profiling traces."""


class ProfileError(Exception):
    """Base error."""


class RowFormatError(ProfileError):
    """Raised when a version-1 row cannot be decoded."""


class MissingDetailError(RowFormatError):
    """Raised when a row lacks a required detail key."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"key {key} not found")


class ScratchDirectoryError(ProfileError):
    """Raised when the bucket scratch directory cannot be created."""


class RowCountMismatchError(ProfileError):
    """Raised when buckets do not give back every row written to them."""

    def __init__(self, written: int, read: int):
        self.written = written
        self.read = read
        super().__init__(
            f"row count mismatch: wrote {written} rows to buckets, read back {read}"
        )
