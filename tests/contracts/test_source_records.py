"""Tests for data source records and shared enums."""

import pytest


class TestDataSource:
    """DataSource equality and defaults."""

    def test_closures_do_not_affect_equality(self) -> None:
        from prefill.contracts import DataSource

        fields = {"type": "url_param", "id": "visit", "display_name": "URL Param: visit", "category": "URL Parameters"}
        a = DataSource(**fields, get_value=lambda: "42")
        b = DataSource(**fields, get_value=lambda: "43")

        assert a == b
        assert a.get_value() == "42"

    def test_defaults(self) -> None:
        from prefill.contracts import DataSource

        source = DataSource(type="global", id="user_name", display_name="User Name", category="User Profile")

        assert source.field_type is None
        assert source.get_value() is None
        assert source.is_available() is True

    def test_is_frozen(self) -> None:
        from dataclasses import FrozenInstanceError

        from prefill.contracts import DataSource

        source = DataSource(type="global", id="user_name", display_name="User Name", category="User Profile")

        with pytest.raises(FrozenInstanceError):
            source.id = "org_name"  # type: ignore[misc]


class TestSourceGroup:
    """Category grouping keeps first-seen order."""

    def test_by_category(self) -> None:
        from prefill.contracts import DataSource, SourceGroup

        def src(source_id: str, category: str) -> DataSource:
            return DataSource(type="form_field", id=source_id, display_name=source_id, category=category)

        group = SourceGroup(
            source_type="form_field",
            name="Form Fields",
            sources=(
                src("f2.a", "Direct Dependency"),
                src("f1.b", "Transitive Dependency"),
                src("f2.c", "Direct Dependency"),
            ),
        )

        grouped = group.by_category()

        assert list(grouped) == ["Direct Dependency", "Transitive Dependency"]
        assert [s.id for s in grouped["Direct Dependency"]] == ["f2.a", "f2.c"]

    def test_empty_group(self) -> None:
        from prefill.contracts import SourceGroup

        assert SourceGroup(source_type="api", name="External API", error="boom").by_category() == {}


class TestEnums:
    """Persisted and displayed enum values."""

    @pytest.mark.parametrize(
        ("member", "value"),
        [
            ("FORM_FIELD", "form_field"),
            ("GLOBAL", "global"),
            ("URL_PARAM", "url_param"),
            ("API", "api"),
            ("CALCULATED", "calculated"),
        ],
    )
    def test_source_type_values(self, member: str, value: str) -> None:
        from prefill.contracts import SourceType

        assert SourceType[member] == value

    def test_dependency_category_renders_as_label(self) -> None:
        from prefill.contracts import DependencyCategory

        assert f"{DependencyCategory.DIRECT}" == "Direct Dependency"
        assert f"{DependencyCategory.TRANSITIVE}" == "Transitive Dependency"

    def test_field_state_values(self) -> None:
        from prefill.contracts import FieldState

        assert [s.value for s in FieldState] == ["unconfigured", "configuring", "saved"]
