"""Error taxonomy for the promo video pipeline."""


class PromoVideoError(Exception):
    """Base class for all pipeline errors."""


class ConfigurationError(PromoVideoError):
    """Required configuration (the API credential) is missing."""


class ValidationError(PromoVideoError):
    """Local input is malformed. Raised before any network call."""


class AnalysisError(PromoVideoError):
    """The provider returned no usable entity analysis."""


class StoryboardError(PromoVideoError):
    """The provider returned no usable 4-scene storyboard."""


class VideoError(PromoVideoError):
    """The video job failed or produced no asset."""


class SessionStateError(PromoVideoError):
    """A write would break a session invariant."""
