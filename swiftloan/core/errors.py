class OrchestratorError(Exception):
    """Base class for failures the turn orchestrator knows how to recover from."""


class ModelConfigurationError(OrchestratorError):
    """The Gemini credential is missing; raised before any network call."""


class ModelTransportError(OrchestratorError):
    """The Gemini call failed (network, quota, or service-side exception)."""


class SanctionLetterUnavailable(Exception):
    """A sanction letter was requested for an application that is not approved."""
