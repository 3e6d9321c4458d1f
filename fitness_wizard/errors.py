"""
Exception taxonomy for the plan pipeline.

Only ValidationError, UpstreamError and RenderError ever reach an HTTP
caller. The others are recovered where they are raised.
"""


class WizardError(Exception):
    """Base class for all wizard errors."""


class ValidationError(WizardError):
    """Required profile fields are missing or malformed."""


class UpstreamError(WizardError):
    """The language-model provider could not be reached or returned nothing."""


class UpstreamParseError(WizardError):
    """The provider answered, but not with a JSON object."""

    def __init__(self, message: str, raw_content: str = ''):
        super().__init__(message)
        self.raw_content = raw_content


class RenderError(WizardError):
    """A document could not be rendered."""


class DeliveryError(WizardError):
    """An email could not be sent."""


class SecondaryRequestError(WizardError):
    """The bonus roadmap task failed."""
