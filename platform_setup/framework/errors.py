from __future__ import annotations


class OrchestrationError(RuntimeError):
    """Base class for failures raised by the configuration pipeline itself."""


class MissingPrerequisiteError(OrchestrationError):
    """An input the pipeline needs (directory to list, file to stage) does not exist."""


class CollaboratorError(OrchestrationError):
    """A delegated credential generator or platform project writer reported failure."""


class ScaffoldBootstrapError(OrchestrationError):
    """The nested bootstrap run finished without producing the platform-builds folder."""
