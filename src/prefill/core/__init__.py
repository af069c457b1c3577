"""Core prefill machinery: graph, resolution, validation, and mapping lifecycle.

Import from the submodules directly, e.g.:
    from prefill.core.system import PrefillSystem
    from prefill.core.config import load_settings
"""
