class InvestmentHelperError(Exception):
    """Base application exception."""


class InvalidReportTypeError(InvestmentHelperError, ValueError):
    """Raised when a report type other than morning/evening is requested."""


class FeedFetchError(InvestmentHelperError):
    """Raised when an RSS feed cannot be downloaded or parsed."""


class UnknownTestSuiteError(InvestmentHelperError, LookupError):
    """Raised when a diagnostics suite name is not registered."""
