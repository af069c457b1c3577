"""
prefill: field prefill configuration for networks of dependent intake forms.

Computes which upstream forms a form may read from, enumerates the data
sources a field can be bound to, and owns the persisted mapping document.
"""

__version__ = "0.1.0"
