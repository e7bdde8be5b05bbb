class SimReportError(Exception):
    """Base exception for simreport."""


class SchemaError(SimReportError):
    """Raised when experiment metadata does not match the attribute schema."""


class UnknownAttributeError(SchemaError, KeyError):
    """Raised when the attribute dictionary has no entry for a code."""

    def __init__(self, code: str):
        self.code = code
        super().__init__(f"Unknown metadata attribute: {code!r}")

    def __str__(self) -> str:
        return self.args[0]


class CompositionFormatError(SchemaError, ValueError):
    """Raised when an atomic composition token is not ``element:count``."""

    def __init__(self, token: str, value: str):
        self.token = token
        self.value = value
        super().__init__(
            f"Malformed atomic composition token {token!r} in {value!r} "
            "(expected element:count)"
        )


class PlotError(SimReportError):
    """Raised by the plotting utility when a data file cannot be plotted."""


class ManifestError(SimReportError):
    """Raised when an experiment manifest cannot be loaded."""


class ReportStateError(SimReportError):
    """Raised when report build steps are called out of order."""
