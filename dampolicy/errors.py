"""
Exception types raised by the policy inference pipeline.

Each error is raised by the stage that detects it; the pipeline never
substitutes a default value for missing required data.
"""


class DamPolicyError(Exception):
    """Base class for all pipeline failures."""


class MalformedSeries(DamPolicyError, ValueError):
    """Daily series has duplicate, non-monotonic or sub-daily dates."""


class InvalidUnit(DamPolicyError, ValueError):
    """Unrecognized storage or flow unit tag."""


class InsufficientData(DamPolicyError):
    """A retained water week has no basis for a required flow variable."""


class InsufficientSamples(DamPolicyError):
    """Too few qualifying samples for an availability query or fit."""

    def __init__(self, message, n_samples=None):
        super().__init__(message)
        self.n_samples = n_samples


class FitDidNotConverge(DamPolicyError):
    """The piecewise policy optimizer stopped without meeting its tolerance."""
