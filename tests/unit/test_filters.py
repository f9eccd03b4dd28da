"""Unit tests for filter types and predicate constructors."""

from imes.filters import (
    EqualFilter,
    OrdFilter,
    PrefixFilter,
    TextFilter,
    equal_predicate,
    field_predicates,
    item_field,
    ord_predicate,
    prefix_predicate,
)
from imes.projections import Item


class TestEqualPredicate:
    """Tests for equal_predicate."""

    def test_eq(self) -> None:
        predicate = equal_predicate(EqualFilter(eq="a"))
        assert predicate("a")
        assert not predicate("b")

    def test_ne(self) -> None:
        predicate = equal_predicate(EqualFilter(ne="a"))
        assert not predicate("a")
        assert predicate("b")

    def test_in(self) -> None:
        predicate = equal_predicate(EqualFilter.one_of(["a", "b"]))
        assert predicate("a")
        assert predicate("b")
        assert not predicate("c")

    def test_constraints_are_anded(self) -> None:
        predicate = equal_predicate(EqualFilter(ne="a", in_=["a", "b"]))
        assert not predicate("a")
        assert predicate("b")

    def test_false_is_a_real_constraint(self) -> None:
        """eq=False must constrain, not be mistaken for 'unset'."""
        predicate = equal_predicate(EqualFilter(eq=False))
        assert predicate(False)
        assert not predicate(True)

    def test_empty_filter_passes_everything(self) -> None:
        predicate = equal_predicate(EqualFilter())
        assert predicate("anything")
        assert predicate(None)

    def test_none_value_fails_non_empty_filter(self) -> None:
        assert not equal_predicate(EqualFilter(ne="a"))(None)


class TestOrdPredicate:
    """Tests for ord_predicate."""

    def test_bounds(self) -> None:
        predicate = ord_predicate(OrdFilter(gt=11, lte=15))
        assert not predicate(11)
        assert predicate(12)
        assert predicate(15)
        assert not predicate(16)

    def test_inclusive_and_exclusive(self) -> None:
        assert ord_predicate(OrdFilter(gte=5))(5)
        assert not ord_predicate(OrdFilter(gt=5))(5)
        assert ord_predicate(OrdFilter(lte=5))(5)
        assert not ord_predicate(OrdFilter(lt=5))(5)

    def test_eq(self) -> None:
        predicate = ord_predicate(OrdFilter(eq=3))
        assert predicate(3)
        assert not predicate(4)

    def test_zero_is_a_real_bound(self) -> None:
        predicate = ord_predicate(OrdFilter(gt=0))
        assert not predicate(0)
        assert predicate(1)

    def test_strings_compare_lexically(self) -> None:
        predicate = ord_predicate(OrdFilter(gte="2024-01-01", lt="2025-01-01"))
        assert predicate("2024-06-30")
        assert not predicate("2025-01-01")

    def test_empty_filter_passes_everything(self) -> None:
        assert ord_predicate(OrdFilter())(None)
        assert ord_predicate(OrdFilter())(42)

    def test_none_value_fails_non_empty_filter(self) -> None:
        assert not ord_predicate(OrdFilter(gt=0))(None)


class TestPrefixPredicate:
    """Tests for prefix_predicate."""

    def test_prefix(self) -> None:
        predicate = prefix_predicate(PrefixFilter(prefix="Hel"))
        assert predicate("Hello")
        assert predicate("Hel")
        assert not predicate("Goodbye")

    def test_empty_prefix_matches_any_string(self) -> None:
        assert prefix_predicate(PrefixFilter(prefix=""))("anything")

    def test_unset_prefix_passes_everything(self) -> None:
        assert prefix_predicate(PrefixFilter())(None)

    def test_none_value_fails(self) -> None:
        assert not prefix_predicate(PrefixFilter(prefix="a"))(None)

    def test_text_filter_combines_equality_and_prefix(self) -> None:
        text = TextFilter(ne="Hello World", prefix="Hel")
        equal = equal_predicate(text)
        prefix = prefix_predicate(text)

        def passes(value: str) -> bool:
            return equal(value) and prefix(value)

        assert passes("Hello Again")
        assert not passes("Hello World")
        assert not passes("Goodbye")


class TestFieldPredicates:
    """Tests for the mapping filter used by InMemoryStore by default."""

    def test_plain_value_means_equality(self) -> None:
        (predicate,) = field_predicates({"status": "open"})
        assert predicate({"status": "open"})
        assert not predicate({"status": "closed"})

    def test_reads_item_data(self) -> None:
        item = Item(key="p1", data={"score": 12})
        (predicate,) = field_predicates({"score": OrdFilter(gt=10)})
        assert predicate(item)

    def test_text_filter_yields_two_predicates(self) -> None:
        predicates = list(field_predicates({"title": TextFilter(prefix="He", ne="Hey")}))
        assert len(predicates) == 2

    def test_missing_field_reads_as_none(self) -> None:
        assert item_field({"a": 1}, "b") is None
        (predicate,) = field_predicates({"b": EqualFilter(eq=1)})
        assert not predicate({"a": 1})

    def test_item_field_reads_attributes(self) -> None:
        class Data:
            title = "Hello"

        class Holder:
            data = Data()

        assert item_field(Holder(), "title") == "Hello"
