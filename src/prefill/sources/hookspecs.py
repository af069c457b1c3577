# src/prefill/sources/hookspecs.py
"""pluggy hook specifications for data source providers.

Packages add source types by implementing these hooks and exposing the
plugin object under the "prefill" entry-point group.

Usage (implementing a provider plugin):
    from prefill.sources.hookspecs import hookimpl

    class MyPlugin:
        @hookimpl  # NOT @hookspec - that's for defining specs
        def prefill_get_providers(self):
            return [ApiProvider()]

Note: @hookspec defines the hook interface (done here).
      @hookimpl marks plugin implementations of those hooks.
"""

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from prefill.sources.protocols import DataSourceProvider

# Project name for pluggy (also the entry-point group)
PROJECT_NAME = "prefill"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)

hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class PrefillSourceSpec:
    """Hook specifications for data source providers."""

    @hookspec
    def prefill_get_providers(self) -> list["DataSourceProvider"]:  # type: ignore[empty-body]
        """Return provider instances.

        Each provider is registered under its own source_type tag.
        """
