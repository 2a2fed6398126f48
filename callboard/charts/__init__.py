"""Charts package - draft editing and the email-gated save workflow."""

from .errors import (
    ChartWorkflowError,
    IdentityValidationError,
    EmptyPayloadError,
    RemoteStoreError,
)
from .identity import normalize_email, is_valid_email, validate_email
from .sanitizer import sanitize, sanitize_value, parse_value
from .remote import RemoteStore, SqliteRemoteStore, HttpRemoteStore
from .store import ChartStore, IdentityPersistence
from .workflow import SaveWorkflow, WorkflowState

__all__ = [
    "ChartWorkflowError",
    "IdentityValidationError",
    "EmptyPayloadError",
    "RemoteStoreError",
    "normalize_email",
    "is_valid_email",
    "validate_email",
    "sanitize",
    "sanitize_value",
    "parse_value",
    "RemoteStore",
    "SqliteRemoteStore",
    "HttpRemoteStore",
    "ChartStore",
    "IdentityPersistence",
    "SaveWorkflow",
    "WorkflowState",
]
