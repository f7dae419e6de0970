"""Errors raised by standard capability handlers

These are unexpected, non-recoverable conditions. The dispatcher surfaces
them to the host as HandlerFailure. Predictable outcomes such as an unknown
country or an empty search result are returned as error-as-data envelopes
instead.
"""


class ProviderError(Exception):
    """Upstream provider unreachable or returned an unusable response"""
    def __init__(self, provider: str, details: str):
        super().__init__(f"{provider} request failed: {details}")
        self.provider = provider
        self.details = details


class ConfigurationError(Exception):
    """Required setting missing"""
    def __init__(self, setting: str, hint: str = ""):
        message = f"{setting} is not configured"
        if hint:
            message = f"{message}. {hint}"
        super().__init__(message)
        self.setting = setting
