"""Argument validation for tool invocations."""

from .validator import ROOT_FIELD, ValidationIssue, check_type, minimal_arguments, validate

__all__ = ["ROOT_FIELD", "ValidationIssue", "check_type", "minimal_arguments", "validate"]
