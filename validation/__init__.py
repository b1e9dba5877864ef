"""
Validation Framework for the Projection Engine.

This module provides consistency checks between the forward and inverse
mappings of a projection, and a cross-check against PROJ.
"""

from validation.projection_checks import (
    ProjectionConsistencyChecker,
    ValidationResult,
    default_sample_coordinates,
)

from validation.reference import ReferenceProjectionCheck

__all__ = [
    "ProjectionConsistencyChecker",
    "ValidationResult",
    "default_sample_coordinates",
    "ReferenceProjectionCheck",
]
