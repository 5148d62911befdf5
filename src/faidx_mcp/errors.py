from __future__ import annotations


class IndexingError(ValueError):
    """A FASTA file cannot be indexed for random access."""

    def __init__(self, message: str, *, path: str | None = None, name: str | None = None) -> None:
        self.path = path
        self.name = name
        self.message = message
        super().__init__(f"{path}: {message}" if path else message)

    def with_path(self, path: str) -> IndexingError:
        return type(self)(self.message, path=path, name=self.name)


class UnsupportedCompressedInputError(IndexingError):
    pass


class DuplicateSequenceNameError(IndexingError):
    pass


class InconsistentLineLengthError(IndexingError):
    pass


class MissingHeaderError(IndexingError):
    pass


class MissingSequenceNameError(IndexingError):
    pass


class IndexingCancelled(IndexingError):
    pass
