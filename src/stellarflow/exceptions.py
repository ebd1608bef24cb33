class StellarflowError(Exception):
    """Base class for errors raised by stellarflow."""


class ExternalServiceError(StellarflowError):
    """An external collaborator (metadata endpoint, HTTP transport) failed."""


class MetadataLookupError(ExternalServiceError):
    """The metadata endpoint answered with something that is not usable metadata."""
