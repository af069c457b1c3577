# tests/sources/test_providers.py
"""Tests for the built-in data source providers."""

from datetime import UTC, datetime

CREATED = datetime(2024, 5, 1, 9, 30, tzinfo=UTC)


def _context(graph, form_id="f3", request_url=None):
    from prefill.core.graph import DependencyResolver
    from prefill.core.schema import FieldSchemaReader
    from prefill.sources import SourceContext, request_params_from_url

    return SourceContext(
        form=graph.get_form(form_id) if form_id is not None else None,
        graph=graph,
        resolver=DependencyResolver(graph),
        schema_reader=FieldSchemaReader(graph),
        request_params=request_params_from_url(request_url),
    )


class TestFormFieldProvider:
    """Fields of upstream forms."""

    def test_direct_before_transitive(self, intake_graph) -> None:
        from prefill.sources import FormFieldProvider

        sources = FormFieldProvider().enumerate(_context(intake_graph, "f3"))

        assert [s.category for s in sources] == ["Direct Dependency"] * 3 + ["Transitive Dependency"] * 3
        assert sources[0].id == "f2.patient_email"
        assert sources[3].id == "f1.email"

    def test_source_shape(self, intake_graph) -> None:
        from prefill.sources import FormFieldProvider

        sources = FormFieldProvider().enumerate(_context(intake_graph, "f2"))
        email = sources[0]

        assert email.type == "form_field"
        assert email.id == "f1.email"
        assert email.display_name == "Patient Intake → Email"
        assert email.field_type == "email"
        assert email.form_id == "f1"
        assert email.field_id == "email"
        assert email.metadata.form_name == "Patient Intake"
        assert email.metadata.field_name == "Email"

    def test_root_form_has_no_sources(self, intake_graph) -> None:
        from prefill.sources import FormFieldProvider

        assert FormFieldProvider().enumerate(_context(intake_graph, "f1")) == []

    def test_no_form_has_no_sources(self, intake_graph) -> None:
        from prefill.sources import FormFieldProvider

        assert FormFieldProvider().enumerate(_context(intake_graph, None)) == []

    def test_never_offers_own_fields(self, intake_graph) -> None:
        from prefill.sources import FormFieldProvider

        sources = FormFieldProvider().enumerate(_context(intake_graph, "f2"))

        assert all(s.form_id != "f2" for s in sources)

    def test_build_and_resolve(self, intake_graph) -> None:
        from prefill.contracts import FormFieldMapping
        from prefill.sources import FormFieldProvider

        provider = FormFieldProvider()
        ctx = _context(intake_graph, "f2")
        source = provider.enumerate(ctx)[1]

        mapping = provider.build_mapping("visit_id", source, CREATED)
        resolved = provider.resolve(mapping, ctx)

        assert isinstance(mapping, FormFieldMapping)
        assert mapping.source_field_id == "name"
        assert resolved is not None
        assert resolved.value == "Value from Patient Intake.Full Name"
        assert resolved.source is mapping

    def test_resolve_falls_back_to_ids(self, intake_graph) -> None:
        from prefill.contracts import FormFieldMapping
        from prefill.sources import FormFieldProvider

        mapping = FormFieldMapping(target_field_id="x", created_at=CREATED, source_form_id="f1", source_field_id="email")

        resolved = FormFieldProvider().resolve(mapping, _context(intake_graph))

        assert resolved is not None
        assert resolved.value == "Value from f1.email"


class TestGlobalDataProvider:
    """Fixed profile catalog."""

    def test_catalog(self, intake_graph) -> None:
        from prefill.sources import GlobalDataProvider

        sources = GlobalDataProvider().enumerate(_context(intake_graph))

        assert [(s.id, s.display_name, s.category, s.field_type) for s in sources] == [
            ("user_email", "User Email", "User Profile", "email"),
            ("user_name", "User Name", "User Profile", "text"),
            ("org_name", "Organization Name", "Organization", "text"),
        ]

    def test_catalog_does_not_depend_on_form(self, intake_graph) -> None:
        from prefill.sources import GlobalDataProvider

        provider = GlobalDataProvider()

        assert provider.enumerate(_context(intake_graph, "f1")) == provider.enumerate(_context(intake_graph, None))

    def test_default_profile_values(self, intake_graph) -> None:
        from prefill.sources import GlobalDataProvider

        provider = GlobalDataProvider()
        ctx = _context(intake_graph)
        values = {}
        for source in provider.enumerate(ctx):
            mapping = provider.build_mapping("target", source, CREATED)
            values[source.id] = provider.resolve(mapping, ctx).value

        assert values == {
            "user_email": "patient@example.com",
            "user_name": "John Smith",
            "org_name": "City Medical Center",
        }

    def test_profile_is_copied(self, intake_graph) -> None:
        from prefill.contracts import GlobalMapping
        from prefill.sources import GlobalDataProvider

        profile = {"user_name": "Ada"}
        provider = GlobalDataProvider(profile=profile)
        profile["user_name"] = "Changed"

        mapping = GlobalMapping(target_field_id="x", created_at=CREATED, global_id="user_name")

        assert provider.resolve(mapping, _context(intake_graph)).value == "Ada"

    def test_mapping_records_source_name(self, intake_graph) -> None:
        from prefill.sources import GlobalDataProvider

        provider = GlobalDataProvider()
        source = provider.enumerate(_context(intake_graph))[2]

        mapping = provider.build_mapping("clinic", source, CREATED)

        assert mapping.to_document()["globalId"] == "org_name"
        assert mapping.describe() == "← Organization Name"

    def test_resolve_rejects_foreign_mapping(self, intake_graph) -> None:
        from prefill.contracts import UrlParamMapping
        from prefill.sources import GlobalDataProvider

        mapping = UrlParamMapping(target_field_id="x", created_at=CREATED, param_key="visit")

        assert GlobalDataProvider().resolve(mapping, _context(intake_graph)) is None


class TestUrlParamProvider:
    """Query parameters of the current request."""

    def test_one_source_per_distinct_key(self, intake_graph) -> None:
        from prefill.sources import UrlParamProvider

        ctx = _context(intake_graph, request_url="https://app.example.com/intake?visit=42&lang=en&visit=43")
        sources = UrlParamProvider().enumerate(ctx)

        assert [s.id for s in sources] == ["visit", "lang"]
        assert sources[0].display_name == "URL Param: visit"
        assert sources[0].category == "URL Parameters"
        assert sources[0].field_type == "text"

    def test_get_value_bound_at_enumeration(self, intake_graph) -> None:
        from prefill.sources import UrlParamProvider

        ctx = _context(intake_graph, request_url="?visit=42&lang=en")
        sources = UrlParamProvider().enumerate(ctx)

        assert [s.get_value() for s in sources] == ["42", "en"]

    def test_no_params_no_sources(self, intake_graph) -> None:
        from prefill.sources import UrlParamProvider

        assert UrlParamProvider().enumerate(_context(intake_graph)) == []

    def test_resolve_reads_current_request(self, intake_graph) -> None:
        from prefill.sources import UrlParamProvider

        provider = UrlParamProvider()
        source = provider.enumerate(_context(intake_graph, request_url="?visit=42"))[0]
        mapping = provider.build_mapping("visit_id", source, CREATED)

        later = provider.resolve(mapping, _context(intake_graph, request_url="?visit=99"))
        absent = provider.resolve(mapping, _context(intake_graph))

        assert later.value == "99"
        assert absent is not None
        assert absent.value is None
        assert mapping.describe() == "← URL: visit"

    def test_blank_param_resolves_to_none(self, intake_graph) -> None:
        from prefill.sources import UrlParamProvider

        provider = UrlParamProvider()
        ctx = _context(intake_graph, request_url="?visit=&lang=en")
        source = provider.enumerate(ctx)[0]
        mapping = provider.build_mapping("visit_id", source, CREATED)

        resolved = provider.resolve(mapping, ctx)

        assert source.get_value() == ""
        assert resolved is not None
        assert resolved.value is None

    def test_equal_enumerations_compare_equal(self, intake_graph) -> None:
        from prefill.sources import UrlParamProvider

        ctx = _context(intake_graph, request_url="?visit=42")

        assert UrlParamProvider().enumerate(ctx) == UrlParamProvider().enumerate(ctx)
