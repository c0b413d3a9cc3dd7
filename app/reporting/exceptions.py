# app/reporting/exceptions.py
"""Exceptions raised by the report engine."""


class ReportError(Exception):
    """Base class for report engine errors."""


class ConfigurationError(ReportError, ValueError):
    """A report configuration violates a structural invariant."""


class DataClientError(ReportError):
    """The data store rejected or failed a request."""


class TemplateError(ReportError):
    """A template operation is not allowed."""


class TemplateNotFoundError(TemplateError):
    """No template exists with the requested id for this user."""


class ExportError(ReportError):
    """Rows could not be serialized into a downloadable file."""
