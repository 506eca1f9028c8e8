"""
Tests for django_filtero.sorting module.
"""

SORTABLE = [
    "created_at",
    "amount",
    "recipient.first_name",
    "estimated_provider_fee{sum}estimated_platform_fee",
]


class TestDecodeDirection:
    """Tests for decode_direction function."""

    def test_ascending(self):
        from django_filtero.sorting import decode_direction

        assert decode_direction("created_at") == ("created_at", "ASC")

    def test_descending(self):
        from django_filtero.sorting import decode_direction

        assert decode_direction("-created_at") == ("created_at", "DESC")

    def test_repeated_dashes_are_stripped(self):
        from django_filtero.sorting import decode_direction

        assert decode_direction("--amount") == ("amount", "DESC")

    def test_repeated_dashes_match_sortable_key(self):
        from django_filtero.sorting import parse_sort_key

        directive = parse_sort_key("--amount", SORTABLE)
        assert directive.columns == ("amount",)
        assert directive.direction == "DESC"


class TestParseSortKey:
    """Tests for parse_sort_key function."""

    def test_plain(self):
        from django_filtero.sorting import PLAIN, parse_sort_key

        directive = parse_sort_key("-created_at", SORTABLE)
        assert directive.kind == PLAIN
        assert directive.columns == ("created_at",)
        assert directive.direction == "DESC"

    def test_relation(self):
        from django_filtero.sorting import RELATION, parse_sort_key

        directive = parse_sort_key("recipient.first_name", SORTABLE)
        assert directive.kind == RELATION
        assert directive.relation == "recipient"
        assert directive.columns == ("first_name",)
        assert directive.direction == "ASC"

    def test_summed(self):
        from django_filtero.sorting import SUMMED, parse_sort_key

        directive = parse_sort_key("-estimated_provider_fee{sum}estimated_platform_fee", SORTABLE)
        assert directive.kind == SUMMED
        assert directive.columns == ("estimated_provider_fee", "estimated_platform_fee")
        assert directive.direction == "DESC"

    def test_not_sortable(self):
        from django_filtero.sorting import parse_sort_key

        assert parse_sort_key("status", SORTABLE) is None
        assert parse_sort_key("-status", SORTABLE) is None

    def test_exact_match_only(self):
        from django_filtero.sorting import parse_sort_key

        assert parse_sort_key("created", SORTABLE) is None
        assert parse_sort_key("estimated_platform_fee{sum}estimated_provider_fee", SORTABLE) is None

    def test_empty_and_non_string(self):
        from django_filtero.sorting import parse_sort_key

        assert parse_sort_key("", SORTABLE) is None
        assert parse_sort_key("-", SORTABLE) is None
        assert parse_sort_key(None, SORTABLE) is None
        assert parse_sort_key(["amount"], SORTABLE) is None

    def test_too_many_dots(self):
        from django_filtero.sorting import parse_sort_key

        assert parse_sort_key("recipient.country.name", ["recipient.country.name"]) is None

    def test_single_summed_column_is_dropped(self):
        from django_filtero.sorting import parse_sort_key

        assert parse_sort_key("amount{sum}", ["amount{sum}"]) is None

    def test_custom_separator(self):
        from django_filtero.sorting import SUMMED, parse_sort_key

        directive = parse_sort_key("a+b", ["a+b"], separator="+")
        assert directive.kind == SUMMED
        assert directive.columns == ("a", "b")
