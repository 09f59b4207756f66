class RogueException(Exception):
    """
    Base class for all rogue's errors.
    Each custom exception should be derived from this class.
    """

    pass


class ConfigError(RogueException):
    pass


class BuildError(RogueException):
    pass


class MalformedVersion(RogueException):
    pass


class NoCompatibleVersion(RogueException):
    pass


class NoCompatibleCUDAImage(RogueException):
    pass


class NoMatchingBaseImage(RogueException):
    pass


class PipPackageParseError(RogueException):
    pass


class StagingWriteError(RogueException):
    def __init__(self, filename: str, cause: BaseException):
        self.filename = filename
        self.cause = cause

    def __str__(self):
        return f"Failed to write {self.filename}: {self.cause}"


class MultilineCommand(RogueException):
    def __init__(self, command: str):
        self.command = command

    def __str__(self):
        return (
            "One of the commands in 'run' contains a new line, which won't work. "
            "You need to create a new list item in YAML prefixed with '-' for each command."
            f"\n\nThis is the offending line: {self.command}"
        )


class WeightsDiscoveryError(RogueException):
    pass


class CleanupError(RogueException):
    pass
