"""Error kinds raised while saving chart data."""


class ChartWorkflowError(Exception):
    """Base class; ``message`` is safe to show to the user."""

    message = "Something went wrong. Please try again."

    def __init__(self, message: str = None):
        if message:
            self.message = message
        super().__init__(self.message)


class IdentityValidationError(ChartWorkflowError):
    """The submitted email is malformed."""

    message = "Enter a valid email address to save your changes."


class EmptyPayloadError(ChartWorkflowError):
    """Finalize was reached without a pending draft."""

    message = "No changes to save. Please try again."


class RemoteStoreError(ChartWorkflowError):
    """The remote store could not be reached or rejected the request."""

    message = "Unable to save right now. Please try again."
