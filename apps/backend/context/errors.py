"""
Context Pack Errors
===================

Error taxonomy for context pack generation.

Only ContextValidationError surfaces to callers. PartialReadError and
CollaboratorFailure are raised by collaborators and recovered inside the
pipeline: the affected file or optional section is dropped and the pack is
still returned.
"""


class ContextPackError(Exception):
    """Base class for all context pack errors."""


class ContextValidationError(ContextPackError, ValueError):
    """Invalid invocation parameters or configuration. Always fatal."""


class PartialReadError(ContextPackError):
    """A candidate file could not be read or parsed."""

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Could not read {path}: {reason}")


class CollaboratorFailure(ContextPackError):
    """An optional collaborator (framework detection, architecture summary) failed."""

    def __init__(self, collaborator: str, reason: str):
        self.collaborator = collaborator
        self.reason = reason
        super().__init__(f"{collaborator} unavailable: {reason}")
