# tests/property/__init__.py
"""Property-based tests for prefill.

Property-based testing validates invariants that must hold for ALL inputs,
not just the specific graphs we think of. Dependency classification feeds
every form-field source offered to an operator, so a wrong answer here
offers the wrong fields.

Test categories:
- core/: dependency resolution over arbitrary (including cyclic) graphs
"""
