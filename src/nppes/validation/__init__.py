"""File validation module."""

from nppes.validation.core import ValidationResult, ValidationRunner
from nppes.validation.reporter import ConsoleReporter

__all__ = ["ConsoleReporter", "ValidationResult", "ValidationRunner"]
