"""
Module: exceptions
Purpose: Custom exception hierarchy for refile.
"""


class RefileError(Exception):
    """Base exception for refile."""

    pass


class ConfigError(RefileError):
    pass


class ScanError(RefileError):
    pass


class StorageError(RefileError):
    pass


class PlanError(RefileError):
    pass


class ProtectedDirectoryError(PlanError):
    pass


class ConflictError(PlanError):
    pass


class ConflictExhaustedError(ConflictError):
    pass


class MoveExecutionError(RefileError):
    pass
