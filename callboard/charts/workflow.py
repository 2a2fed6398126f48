"""
Email-gated save workflow for an editable chart.

A user edits a draft copy of a chart's committed series, then saves it.
Saving needs an email identity: if none is known yet the workflow asks for
one, and if the remote store already holds data for that chart under the
email, the user has to confirm the overwrite before anything is written.

One SaveWorkflow instance drives one chart. The call duration and sad path
charts each get their own instance over the same ChartStore; they write
different columns so they never collide in storage.

States:
    IDLE -> AWAITING_IDENTITY -> CHECKING_EXISTING -> AWAITING_CONFIRMATION
         -> COMMITTING -> IDLE

The suspension points are the remote existence probe, the upsert and the
reload that follows a save under a newly known identity.
A generation counter is captured before each await; results that resolve
after the editor was closed, reopened or the prompt cancelled are dropped.
"""

import logging
from enum import Enum
from typing import List, Optional

from callboard.charts.errors import (
    ChartWorkflowError,
    EmptyPayloadError,
    IdentityValidationError,
    RemoteStoreError,
)
from callboard.charts.identity import validate_email
from callboard.charts.remote import RemoteStore
from callboard.charts.sanitizer import copy_series, parse_value, sanitize, sanitize_value
from callboard.charts.store import ChartStore
from callboard.models.entities import ChartField, Point

logger = logging.getLogger(__name__)


class WorkflowState(str, Enum):
    IDLE = "idle"
    AWAITING_IDENTITY = "awaiting_identity"
    CHECKING_EXISTING = "checking_existing"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    COMMITTING = "committing"


CANCELLABLE_STATES = {
    WorkflowState.AWAITING_IDENTITY,
    WorkflowState.CHECKING_EXISTING,
    WorkflowState.AWAITING_CONFIRMATION,
}


class SaveWorkflow:
    """Draft editing and the email-gated save flow for one chart."""

    def __init__(self, store: ChartStore, remote: RemoteStore, chart: ChartField):
        self.store = store
        self.remote = remote
        self.chart = chart

        self.state = WorkflowState.IDLE
        self.draft: List[Point] = []
        self.identity_input = ""
        self.error: Optional[ChartWorkflowError] = None
        self.processing = False

        self._pending: Optional[List[Point]] = None
        self._generation = 0

    @property
    def is_open(self) -> bool:
        return self.store.is_editing(self.chart)

    @property
    def pending(self) -> Optional[List[Point]]:
        """Sanitized payload captured by the last save, if still pending."""
        return self._pending

    @property
    def error_message(self) -> str:
        return self.error.message if self.error else ""

    def _transition(self, state: WorkflowState) -> None:
        logger.debug("%s workflow: %s -> %s", self.chart.value, self.state.value, state.value)
        self.state = state

    def _reset_flow(self) -> None:
        self._transition(WorkflowState.IDLE)
        self.error = None
        self.processing = False
        self._pending = None

    # Editor

    def open_editor(self) -> None:
        """Enter edit mode with a fresh draft copied from the committed series."""
        self._generation += 1
        self.store.set_editing(self.chart, True)
        self.draft = copy_series(self.store.series(self.chart))
        self.identity_input = self.store.identity or ""
        self._reset_flow()

    def close_editor(self) -> None:
        """Leave edit mode, discarding the draft and any pending save."""
        self._generation += 1
        self.store.set_editing(self.chart, False)
        self.draft = []
        self._reset_flow()

    def update_value(self, key: str, value) -> bool:
        """Set the value of the point identified by ``key``. Returns False if no such point."""
        for index, point in enumerate(self.draft):
            if point.key == key:
                self.draft[index] = type(point)(point.key, sanitize_value(value))
                return True
        return False

    def update_raw(self, key: str, raw: str) -> bool:
        return self.update_value(key, parse_value(raw))

    def reset_draft(self) -> None:
        self.draft = copy_series(self.store.initial(self.chart))

    # Save flow

    async def save(self) -> WorkflowState:
        """Capture the draft and start the save; prompts for an email if none is known."""
        if self.processing:
            return self.state
        if not self.is_open:
            self.error = EmptyPayloadError()
            return self.state

        self._pending = sanitize(self.draft)
        self.error = None

        identity = self.store.identity
        if not identity:
            self.identity_input = ""
            self._transition(WorkflowState.AWAITING_IDENTITY)
            return self.state

        self.identity_input = identity
        return await self.finalize(identity)

    async def submit_identity(self, raw: str) -> WorkflowState:
        self.identity_input = raw
        return await self.finalize(raw)

    async def confirm_overwrite(self) -> WorkflowState:
        if self.state is not WorkflowState.AWAITING_CONFIRMATION:
            return self.state
        return await self.finalize(self.identity_input, check_existing=False)

    def go_back(self) -> None:
        """Return from the overwrite prompt to the email prompt, keeping the payload."""
        if self.state is WorkflowState.AWAITING_CONFIRMATION and not self.processing:
            self.error = None
            self._transition(WorkflowState.AWAITING_IDENTITY)

    def cancel(self) -> None:
        """Abandon the pending save. The editor and its draft stay open."""
        if self.state not in CANCELLABLE_STATES:
            return
        self._generation += 1
        self._reset_flow()

    async def finalize(self, identity: str, check_existing: bool = True) -> WorkflowState:
        """Validate ``identity``, probe for existing data, then commit the pending payload."""
        if self.processing:
            logger.debug("%s workflow: save already in flight, ignoring", self.chart.value)
            return self.state

        try:
            normalized = validate_email(identity)
        except IdentityValidationError as exc:
            self.error = exc
            self._transition(WorkflowState.AWAITING_IDENTITY)
            return self.state

        payload = self._pending
        if payload is None:
            self.error = EmptyPayloadError()
            return self.state

        generation = self._generation
        self.processing = True
        self.error = None

        try:
            if check_existing:
                self._transition(WorkflowState.CHECKING_EXISTING)
                exists = await self.remote.exists(normalized, self.chart)
                if generation != self._generation:
                    return self.state
                if exists:
                    self.identity_input = normalized
                    self._transition(WorkflowState.AWAITING_CONFIRMATION)
                    return self.state

            self._transition(WorkflowState.COMMITTING)
            await self.remote.upsert(normalized, self.chart, payload)
            if generation != self._generation:
                return self.state

            previous_identity = self.store.identity
            self.store.commit(self.chart, payload)
            self.store.set_identity(normalized)
            self.close_editor()

            # A newly known identity may already hold data for the other chart
            if previous_identity != normalized:
                await self.store.load_user_data(self.remote)
        except RemoteStoreError as exc:
            logger.exception("Failed to save %s data", self.chart.value)
            if generation == self._generation:
                self.error = exc
                self._transition(WorkflowState.AWAITING_IDENTITY)
        finally:
            if generation == self._generation:
                self.processing = False

        return self.state
