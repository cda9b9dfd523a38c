# contract_analyzer/errors.py


class AnalyzerError(Exception):
    """Base class for errors raised while analyzing a contract."""

    status_code = 500


class BadRequest(AnalyzerError):
    """The request cannot be served; the message is shown to the client as-is."""

    status_code = 400


class DocumentError(AnalyzerError):
    """The document could not be downloaded or read."""


class ExtractionError(AnalyzerError):
    """The extraction model returned nothing usable."""
