"""Domain errors for the gating core. Input absence is never an error here (it resolves to baseline)."""

from __future__ import annotations


class GatingError(Exception):
    """Base class for gating domain errors."""


class UnknownSurfaceError(GatingError, KeyError):
    """No baseline payload is registered for the requested surface."""


class UnknownPhaseError(GatingError, ValueError):
    """Phase string is not one of the five authority phases."""


class PhaseDemotionError(GatingError):
    """Requested demotion would not lower the tenant's phase."""
