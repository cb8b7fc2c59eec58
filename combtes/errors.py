"""Exceptions raised by combtes."""


class CombTEsError(Exception):
    """Base class for errors raised by this package."""


class UnsupportedToolError(CombTEsError, ValueError):
    """The tool name is neither HMMER nor RepeatMasker."""

    def __init__(self, tool):
        self.tool = tool
        super().__init__(f"unsupported tool: {tool!r} (expected HMMER or RepeatMasker)")


class PredictionFileError(CombTEsError, OSError):
    """A prediction file for a declared TE type could not be read."""

    def __init__(self, path, reason):
        self.path = str(path)
        super().__init__(f"cannot read prediction file {self.path}: {reason}")


class ReportError(CombTEsError, OSError):
    """An output directory, report or plot could not be written."""

    def __init__(self, path, reason):
        self.path = str(path)
        super().__init__(f"cannot write {self.path}: {reason}")


class ParameterError(CombTEsError, ValueError):
    pass
