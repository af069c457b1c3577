"""Semantic type aliases for compile-time type safety.

NewType creates distinct types that mypy treats as incompatible,
preventing a field id from being passed where a form id is expected.
"""

from typing import NewType

FormID = NewType("FormID", str)
"""Identifier of a node in the intake graph (e.g., 'form-47c61d17-...')"""

FieldID = NewType("FieldID", str)
"""Property key in a form's field schema (e.g., 'email')"""

ComponentID = NewType("ComponentID", str)
"""Links a form node to the field schema it renders (e.g., 'f_01jk7ap2r3ewf9gx6a9r09gzjv')"""

SourceID = NewType("SourceID", str)
"""Identifier of a data source within its provider (e.g., 'f1.email', 'user_email')"""
