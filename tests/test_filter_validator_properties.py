"""
Property-based tests for filter validation.

These tests verify that validated filters only ever hold values present in
the filter universe, and that numeric bounds are clamped to the ceilings.
"""

import copy

from hypothesis import given, settings, strategies as st

from estate_search.filtering import FilterValidator
from estate_search.models import ExtractedFilters, FilterUniverse, LivingAreaRange


validator = FilterValidator()

UNIVERSE = FilterUniverse(
    cities=["Algiers", "Oran", "Constantine"],
    property_types=["House", "Apartment", "Villa", "Land"],
    listing_types=["sale", "rent", "construction"],
    amenities=["pool", "garden", "garage", "modern"],
    max_price=1_000_000,
    max_living_area=300,
)

# Mix of known and unknown words for every dimension
words = st.sampled_from([
    "house", "HOUSE", "condo", "studio", "villa", "Apartment",
    "pool", "Garden", "gym", "wifi", "modern",
    "rent", "sale", "lease",
    "algiers", "Oran", "Paris", "",
])

optional_words = st.one_of(st.none(), st.lists(words, max_size=6))
optional_ints = st.one_of(st.none(), st.integers(min_value=-10_000, max_value=10_000_000))

extracted_filters = st.builds(
    ExtractedFilters,
    property_types=optional_words,
    beds=st.one_of(st.none(), st.integers(min_value=-5, max_value=20)),
    baths=st.one_of(st.none(), st.integers(min_value=-5, max_value=20)),
    min_price=optional_ints,
    max_price=optional_ints,
    city=st.one_of(st.none(), words),
    amenities=optional_words,
    features=st.one_of(st.none(), st.just(["near the park"])),
    listing_types=optional_words,
    living_area=st.one_of(
        st.none(),
        st.builds(LivingAreaRange, min=optional_ints, max=optional_ints),
    ),
)


class TestValidatorSubset:
    """Tests for Property 2: the validator only keeps known values."""

    @given(extracted=extracted_filters)
    @settings(max_examples=300)
    def test_every_value_is_in_universe(self, extracted):
        """
        **Feature: property-search, Property 2: Validator is a subset filter**

        For any extracted filters, every validated field is either absent or
        a value present in the corresponding universe collection.
        """
        validated = validator.validate(extracted, UNIVERSE)

        assert validated.city is None or validated.city in UNIVERSE.cities
        for values, allowed in (
            (validated.property_types, UNIVERSE.property_types),
            (validated.listing_types, UNIVERSE.listing_types),
            (validated.amenities, UNIVERSE.amenities),
        ):
            assert values is None or (values and set(values) <= set(allowed))

        for bound in (validated.min_price, validated.max_price):
            assert bound is None or 0 <= bound <= UNIVERSE.max_price
        if validated.min_price is not None and validated.max_price is not None:
            assert validated.min_price <= validated.max_price

        if validated.living_area is not None:
            for bound in (validated.living_area.min, validated.living_area.max):
                assert bound is None or 0 <= bound <= UNIVERSE.max_living_area

    @given(extracted=extracted_filters)
    @settings(max_examples=100)
    def test_input_is_not_mutated(self, extracted):
        before = copy.deepcopy(extracted)
        validator.validate(extracted, UNIVERSE)
        assert extracted == before


class TestCanonicalSpelling:

    def test_values_take_universe_spelling(self):
        validated = validator.validate(
            ExtractedFilters(property_types=["house", "condo"], city="ORAN"),
            UNIVERSE,
        )
        assert validated.property_types == ["House"]
        assert validated.city == "Oran"

    def test_each_value_is_checked_independently(self):
        validated = validator.validate(
            ExtractedFilters(amenities=["pool", "gym", "POOL", "garden"]),
            UNIVERSE,
        )
        assert validated.amenities == ["pool", "garden"]

    def test_unknown_only_becomes_absent(self):
        validated = validator.validate(
            ExtractedFilters(property_types=["condo"], listing_types=["lease"], city="Paris"),
            UNIVERSE,
        )
        assert validated.property_types is None
        assert validated.listing_types is None
        assert validated.city is None


class TestNumericBounds:

    def test_prices_clamped_to_ceiling(self):
        validated = validator.validate(
            ExtractedFilters(min_price=-5, max_price=5_000_000), UNIVERSE
        )
        assert validated.min_price == 0
        assert validated.max_price == UNIVERSE.max_price

    def test_inverted_prices_collapse(self):
        validated = validator.validate(
            ExtractedFilters(min_price=80_000, max_price=20_000), UNIVERSE
        )
        assert validated.min_price == validated.max_price == 20_000

    def test_living_area_clamped(self):
        validated = validator.validate(
            ExtractedFilters(living_area=LivingAreaRange(min=100, max=900)), UNIVERSE
        )
        assert validated.living_area == LivingAreaRange(min=100, max=300)

    def test_rooms_pass_through_non_negative(self):
        validated = validator.validate(ExtractedFilters(beds=3, baths=-1), UNIVERSE)
        assert validated.beds == 3
        assert validated.baths == 0


class TestEmptyUniverse:

    def test_everything_universe_checked_is_dropped(self):
        extracted = ExtractedFilters(
            property_types=["house"],
            city="Oran",
            amenities=["pool"],
            listing_types=["rent"],
            min_price=100,
            max_price=500,
            living_area=LivingAreaRange(min=50, max=100),
            beds=2,
            features=["near the beach"],
        )
        validated = validator.validate(extracted, FilterUniverse())

        assert validated.property_types is None
        assert validated.city is None
        assert validated.amenities is None
        assert validated.listing_types is None
        assert validated.min_price is None
        assert validated.max_price is None
        assert validated.living_area is None
        assert validated.beds == 2
        assert validated.features == ["near the beach"]
