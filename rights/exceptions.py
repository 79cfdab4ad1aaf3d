"""
Exceptions raised by the split workflow.

Validators never raise; these are for workflow-ordering violations and
for requests that reference rows outside the song. Views turn them into
an ``{"error": ..., "details": ...}`` response with ``status_code``.
"""


class SplitWorkflowError(Exception):
    """Base exception for split workflow failures."""
    status_code = 400

    def __init__(self, message, details=None):
        super().__init__(message)
        self.message = message
        self.details = details

    def as_response_data(self):
        data = {'error': self.message}
        if self.details is not None:
            data['details'] = self.details
        return data


class PreconditionFailed(SplitWorkflowError):
    """The song's lock state does not allow the requested transition."""


class SplitsLocked(PreconditionFailed):
    """The ledger being edited is locked."""


class SplitValidationFailed(SplitWorkflowError):
    """Split rules rejected the ledger; details holds the error dicts."""


class UnknownSongCollaborator(SplitWorkflowError):
    """A referenced song collaborator id does not belong to the song."""


class UnknownPublishingEntity(SplitWorkflowError):
    """A referenced publishing entity does not exist."""
