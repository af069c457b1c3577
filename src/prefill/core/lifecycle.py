# src/prefill/core/lifecycle.py
"""Mapping lifecycle: configure, save, cancel, and remove prefill mappings.

State per (form id, field id):

    UNCONFIGURED -> CONFIGURING -> SAVED
                         |
                         +-- cancel --> state held before CONFIGURING
    SAVED -> CONFIGURING (edit)
    SAVED -> UNCONFIGURED (remove)

Saving is warn-once: when validation produces warnings, the first save
attempt surfaces them and commits nothing; the next save of the same
selection commits regardless. Selecting a different candidate resets this.

All calls are synchronous and come from a single dispatcher, so the store
needs no locking; concurrent save/remove on one key is last-writer-wins.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from prefill.contracts import (
    DataSource,
    Field,
    FieldState,
    LifecycleError,
    PrefillMapping,
    Severity,
)
from prefill.contracts.types import FieldID, FormID
from prefill.core.logging import get_logger
from prefill.core.mappings import MappingStore
from prefill.core.notifications import LoggingNotifier, Notifier
from prefill.core.persistence import InMemoryMappingRepository, MappingRepository
from prefill.core.validation import MappingValidator
from prefill.sources.registry import DataSourceRegistry

logger = get_logger(__name__)

MSG_SAVED = "Prefill mapping saved successfully"
MSG_SAVE_FAILED = "Failed to save prefill mapping"
MSG_REMOVED = "Prefill mapping removed"
MSG_PERSIST_FAILED = "Failed to persist prefill mappings"


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class ConfigureSession:
    """Uncommitted state of the field currently being configured."""

    form_id: FormID
    field_id: FieldID
    prior_state: FieldState
    candidate: DataSource | None = None
    warnings: tuple[str, ...] = ()
    warning_acknowledged: bool = False

    def reset_validation(self) -> None:
        self.warnings = ()
        self.warning_acknowledged = False


@dataclass(frozen=True, slots=True)
class SaveResult:
    """Outcome of a save attempt.

    committed=False with warnings means the warnings were surfaced and the
    same save must be repeated to commit.
    """

    committed: bool
    warnings: tuple[str, ...] = ()
    mapping: PrefillMapping | None = None


class MappingLifecycleManager:
    """Owns the MappingStore and every mutation of it.

    The presentation layer reads snapshots and dispatches intents; it never
    edits the store directly. Every committed mutation is written through
    the repository (best-effort).

    Example:
        manager = MappingLifecycleManager(registry, MappingValidator(), repository)
        manager.load()
        manager.select_form("f2")
        manager.begin_configure("patient_email")
        manager.select_candidate(source)
        result = manager.save(target_field)
        if not result.committed:
            show(result.warnings)  # calling save() again commits
    """

    def __init__(
        self,
        registry: DataSourceRegistry,
        validator: MappingValidator,
        repository: MappingRepository | None = None,
        notifier: Notifier | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._registry = registry
        self._validator = validator
        self._repository: MappingRepository = repository if repository is not None else InMemoryMappingRepository()
        self._notifier: Notifier = notifier if notifier is not None else LoggingNotifier()
        self._clock = clock
        self._store = MappingStore()
        self._selected_form_id: FormID | None = None
        self._session: ConfigureSession | None = None

    # === Startup ===

    def load(self) -> MappingStore:
        """Load the persisted document; an absent document means no mappings.

        Raises:
            MappingDocumentError: If the persisted document is malformed
        """
        loaded = self._repository.load()
        self._store = loaded if loaded is not None else MappingStore()
        return self.snapshot()

    # === Read side ===

    @property
    def selected_form_id(self) -> FormID | None:
        return self._selected_form_id

    @property
    def session(self) -> ConfigureSession | None:
        return self._session

    def snapshot(self) -> MappingStore:
        """Independent copy of the current document."""
        return self._store.copy()

    def get_mapping(self, form_id: str, field_id: str) -> PrefillMapping | None:
        return self._store.get(form_id, field_id)

    def has_mapping(self, form_id: str, field_id: str) -> bool:
        return self._store.contains(form_id, field_id)

    def state(self, form_id: str, field_id: str) -> FieldState:
        session = self._session
        if session is not None and session.form_id == form_id and session.field_id == field_id:
            return FieldState.CONFIGURING
        if self._store.contains(form_id, field_id):
            return FieldState.SAVED
        return FieldState.UNCONFIGURED

    def display(self, form_id: str, field_id: str) -> str | None:
        """Provenance string for a configured field; None when unconfigured."""
        mapping = self._store.get(form_id, field_id)
        if mapping is None:
            return None
        return mapping.describe()

    # === Intents ===

    def select_form(self, form_id: str | None) -> None:
        """Switch the active form; any open session is discarded."""
        if self._session is not None:
            logger.debug("configure_session_discarded", form_id=self._session.form_id, field_id=self._session.field_id)
            self._session = None
        self._selected_form_id = FormID(form_id) if form_id is not None else None

    def begin_configure(self, field_id: str) -> ConfigureSession:
        """Start configuring a field of the selected form.

        Clears any stale candidate and validation warning.

        Raises:
            LifecycleError: If no form is selected
        """
        form_id = self._require_form()
        self._session = ConfigureSession(
            form_id=form_id,
            field_id=FieldID(field_id),
            prior_state=self.state(form_id, field_id),
        )
        logger.debug("configure_started", form_id=form_id, field_id=field_id, prior_state=str(self._session.prior_state))
        return self._session

    def select_candidate(self, source: DataSource) -> None:
        """Record the tentative source; re-validation happens at save time.

        Raises:
            LifecycleError: If no field is being configured
        """
        session = self._require_session()
        session.candidate = source
        session.reset_validation()

    def save(self, target_field: Field | None = None, candidate: DataSource | None = None) -> SaveResult:
        """Validate and commit the session's candidate.

        Args:
            target_field: Field being configured; starts a session for it
                when none is open for that field. Without it, no validation
                runs.
            candidate: Source to save; recorded as the selection when it
                differs from the current one.

        Raises:
            LifecycleError: If no form is selected or no candidate is recorded
            ValueError: If the provider cannot build a mapping for the candidate
        """
        session = self._session
        if target_field is not None and (session is None or session.field_id != target_field.id):
            session = self.begin_configure(target_field.id)
        session = self._require_session()

        if candidate is not None and candidate != session.candidate:
            self.select_candidate(candidate)
        if session.candidate is None:
            raise LifecycleError(f"No candidate source selected for field '{session.field_id}'")

        warnings = tuple(self._validator.validate(target_field, session.candidate))
        if warnings and not session.warning_acknowledged:
            session.warnings = warnings
            session.warning_acknowledged = True
            logger.info(
                "mapping_save_needs_confirmation",
                form_id=session.form_id,
                field_id=session.field_id,
                warnings=list(warnings),
            )
            return SaveResult(committed=False, warnings=warnings)

        try:
            mapping = self._registry.build_mapping(session.field_id, session.candidate, self._clock())
        except ValueError:
            logger.exception("mapping_build_failed", form_id=session.form_id, field_id=session.field_id)
            self._notifier.notify(MSG_SAVE_FAILED, Severity.ERROR)
            raise

        replaced = self._store.put(session.form_id, session.field_id, mapping)
        logger.info(
            "mapping_saved",
            form_id=session.form_id,
            field_id=session.field_id,
            source_type=mapping.source_type,
            replaced=replaced is not None,
        )
        self._session = None
        self._persist()
        self._notifier.notify(MSG_SAVED, Severity.SUCCESS)
        return SaveResult(committed=True, warnings=warnings, mapping=mapping)

    def cancel(self) -> FieldState | None:
        """Discard the open session.

        Returns:
            The state the field returns to, or None when nothing was open
        """
        session = self._session
        if session is None:
            return None
        self._session = None
        logger.debug("configure_cancelled", form_id=session.form_id, field_id=session.field_id)
        return self.state(session.form_id, session.field_id)

    def remove(self, form_id: str, field_id: str) -> bool:
        """Delete a mapping; removing an absent mapping is a no-op.

        Returns:
            True if a mapping was removed
        """
        removed = self._store.remove(form_id, field_id)
        if removed is None:
            logger.debug("mapping_remove_noop", form_id=form_id, field_id=field_id)
            return False

        session = self._session
        if session is not None and session.form_id == form_id and session.field_id == field_id:
            session.prior_state = FieldState.UNCONFIGURED

        logger.info("mapping_removed", form_id=form_id, field_id=field_id, source_type=removed.source_type)
        self._persist()
        self._notifier.notify(MSG_REMOVED, Severity.SUCCESS)
        return True

    # === Internals ===

    def _require_form(self) -> FormID:
        if self._selected_form_id is None:
            raise LifecycleError("No form selected")
        return self._selected_form_id

    def _require_session(self) -> ConfigureSession:
        if self._session is None:
            raise LifecycleError("No field is being configured")
        return self._session

    def _persist(self) -> None:
        """Write the document; failures are reported, the in-memory state stands."""
        try:
            self._repository.save(self._store)
        except OSError:
            logger.exception("mappings_persist_failed")
            self._notifier.notify(MSG_PERSIST_FAILED, Severity.ERROR)
