"""Exception hierarchy for prefill.

Only transport failures and misuse of the lifecycle API raise. Lookup misses
(unknown form, field, or schema) resolve to empty results instead.
"""


class PrefillError(Exception):
    """Base class for all prefill errors."""


class GraphLoadError(PrefillError):
    """Raised when the intake graph cannot be fetched or parsed.

    This is terminal for everything that depends on the graph; the caller
    must retry the load.
    """


class MappingDocumentError(PrefillError, ValueError):
    """Raised when a persisted mapping document is malformed."""


class LifecycleError(PrefillError, RuntimeError):
    """Raised when a lifecycle intent is dispatched in the wrong state.

    Examples: saving before a form is selected, or saving with no
    candidate source recorded.
    """
