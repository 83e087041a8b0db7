class VtPackError(Exception):
    """Base class for everything raised by the vtpack package."""


class DecodeError(VtPackError):
    """The byte source does not hold a readable vtPack archive."""


class MalformedHeader(DecodeError):
    pass


class UnsupportedVersion(DecodeError):
    def __init__(self, version: int) -> None:
        super().__init__(f"unsupported vtPack version {version}")
        self.version = version


class TruncatedPool(DecodeError):
    pass


class TruncatedEntryTable(DecodeError):
    pass


class StringOffsetOutOfBounds(DecodeError):
    def __init__(self, offset: int, pool_size: int) -> None:
        super().__init__(f"string offset {offset} is past the end of a {pool_size} byte pool")
        self.offset = offset
        self.pool_size = pool_size


class UnterminatedString(DecodeError):
    def __init__(self, offset: int) -> None:
        super().__init__(f"string at pool offset {offset} has no NUL terminator")
        self.offset = offset


class ExtractError(VtPackError):
    """Writing an entry to disk failed."""


class TruncatedPayload(ExtractError):
    def __init__(self, path: str, expected: int, actual: int) -> None:
        super().__init__(f"{path}: expected {expected} bytes of payload, got {actual}")
        self.path = path
        self.expected = expected
        self.actual = actual


class UnsafePath(ExtractError):
    pass


class ExtractionFailed(ExtractError):
    def __init__(self, failures, setup_errors=()) -> None:
        self.failures = list(failures)
        self.setup_errors = list(setup_errors)
        message = f"{len(self.failures)} entries failed to extract"
        if self.setup_errors:
            message += f", output directory setup failed: {self.setup_errors[0]}"
        super().__init__(message)
