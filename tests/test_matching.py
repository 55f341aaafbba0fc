"""Unit tests for the profile matching engine."""

import logging

import pytest

from listing_alerts.config.models import MatchingConfig
from listing_alerts.domain.models import Listing, OutdoorSpace, SearchProfile
from listing_alerts.matching import (
    MatchResult,
    ProfileMatch,
    ProfileMatcher,
    ScoreBreakdown,
    clamp_score,
    match,
)


def make_profile(profile_id="1", opt_in=True, hard=None, soft=None):
    return SearchProfile(
        id=profile_id,
        contact_handle="0612345678",
        notification_opt_in=opt_in,
        hard_criteria=hard or {},
        soft_criteria=soft or {},
    )


@pytest.fixture
def matcher():
    return ProfileMatcher(MatchingConfig(threshold=80))


class TestOptIn:
    def test_profile_without_opt_in_is_skipped(self, matcher, sample_listing, profile_data):
        profile_data["notification_opt_in"] = False
        profile = SearchProfile.model_validate(profile_data)

        result = matcher.evaluate(sample_listing, profile)

        assert result.opted_in is False
        assert result.score is None
        assert result.reason == "not_opted_in"
        assert matcher.match(sample_listing, [profile]) == []


class TestHardFilters:
    def test_city_is_case_insensitive(self, matcher):
        listing = Listing(city="rotterdam")
        profile = make_profile(hard={"cities": ["Rotterdam"]})

        assert matcher.failed_hard_criteria(listing, profile) == []

    def test_city_ignores_surrounding_whitespace(self, matcher):
        listing = Listing(city="  Den  Haag ")
        profile = make_profile(hard={"cities": ["den haag"]})

        assert matcher.failed_hard_criteria(listing, profile) == []

    def test_city_mismatch(self, matcher):
        profile = make_profile(hard={"cities": ["Delft"]})

        assert matcher.failed_hard_criteria(Listing(city="Schiedam"), profile) == ["city"]

    def test_missing_listing_city_fails_city_constraint(self, matcher):
        profile = make_profile(hard={"cities": ["Schiedam"]})

        assert matcher.failed_hard_criteria(Listing(), profile) == ["city"]

    def test_empty_city_list_is_unconstrained(self, matcher):
        profile = make_profile(hard={"cities": []})

        assert matcher.failed_hard_criteria(Listing(), profile) == []

    def test_price_bounds_are_inclusive(self, matcher):
        profile = make_profile(hard={"price_min": 250000, "price_max": 500000})

        assert matcher.failed_hard_criteria(Listing(asking_price=250000), profile) == []
        assert matcher.failed_hard_criteria(Listing(asking_price=500000), profile) == []
        assert matcher.failed_hard_criteria(Listing(asking_price=249999), profile) == ["price_min"]
        assert matcher.failed_hard_criteria(Listing(asking_price=500001), profile) == ["price_max"]

    def test_zero_price_minimum_is_a_real_bound(self, matcher):
        profile = make_profile(hard={"price_min": 0})

        assert matcher.failed_hard_criteria(Listing(asking_price=0), profile) == []

    def test_property_type(self, matcher):
        profile = make_profile(hard={"property_types": ["appartement"]})

        assert matcher.failed_hard_criteria(Listing(property_type="Appartement"), profile) == []
        assert matcher.failed_hard_criteria(Listing(property_type="Woonhuis"), profile) == [
            "property_type"
        ]

    def test_reports_every_failed_criterion(self, matcher):
        profile = make_profile(
            hard={"cities": ["Delft"], "price_max": 100, "property_types": ["Woonhuis"]}
        )
        listing = Listing(city="Schiedam", asking_price=300000, property_type="Appartement")

        result = matcher.evaluate(listing, profile)

        assert result.failed_criteria == ["city", "price_max", "property_type"]
        assert result.score is None
        assert not result.passed_hard_filters
        assert result.reason == "hard_filter:city,price_max,property_type"

    def test_price_above_max_never_qualifies(self, sample_listing, sample_profile):
        listing = sample_listing.model_copy(update={"asking_price": 600000})

        assert ProfileMatcher(MatchingConfig(threshold=0)).match(listing, [sample_profile]) == []


class TestScoring:
    def test_perfect_match_scores_100(self, matcher, sample_listing, sample_profile):
        result = matcher.evaluate(sample_listing, sample_profile)

        assert result.score == 100
        assert result.breakdown.raw_score == 105
        assert result.qualifies
        assert result.reason == "qualified"

    def test_penalties(self, matcher):
        listing = Listing(room_count=2, living_area=60, energy_label="E")
        profile = make_profile(soft={"min_rooms": 3, "min_area": 70, "min_energy_label": "C"})

        breakdown = matcher.score_breakdown(listing, profile)

        assert breakdown == ScoreBreakdown(
            base=100, rooms_penalty=20, area_penalty=20, energy_penalty=10, outdoor_bonus=0
        )
        assert breakdown.raw_score == 50

    def test_no_soft_criteria_scores_base(self, matcher):
        result = matcher.evaluate(Listing(), make_profile())

        assert result.score == 100

    def test_equal_label_is_not_penalized(self, matcher):
        profile = make_profile(soft={"min_energy_label": "C"})

        assert matcher.score_breakdown(Listing(energy_label="C"), profile).energy_penalty == 0

    def test_missing_listing_label_ranks_worst(self, matcher):
        strict = make_profile(soft={"min_energy_label": "F"})
        lenient = make_profile(soft={"min_energy_label": "G"})

        assert matcher.score_breakdown(Listing(), strict).energy_penalty == 10
        assert matcher.score_breakdown(Listing(), lenient).energy_penalty == 0

    def test_no_minimum_label_never_penalizes(self, matcher):
        assert matcher.score_breakdown(Listing(energy_label="G"), make_profile()).energy_penalty == 0

    def test_outdoor_bonus_requires_outdoor_space(self, matcher):
        profile = make_profile(soft={"wants_outdoor_space": True})

        balcony = matcher.score_breakdown(Listing(outdoor_space=OutdoorSpace.BALCONY), profile)
        none = matcher.score_breakdown(Listing(outdoor_space=OutdoorSpace.NONE), profile)

        assert balcony.outdoor_bonus == 5
        assert none.outdoor_bonus == 0

    def test_outdoor_bonus_only_when_wanted(self, matcher):
        listing = Listing(outdoor_space=OutdoorSpace.GARDEN)

        assert matcher.score_breakdown(listing, make_profile()).outdoor_bonus == 0

    def test_threshold_is_inclusive(self):
        listing = Listing(room_count=2)
        profile = make_profile(soft={"min_rooms": 3})

        assert ProfileMatcher(MatchingConfig(threshold=80)).evaluate(listing, profile).qualifies
        assert not ProfileMatcher(MatchingConfig(threshold=81)).evaluate(listing, profile).qualifies

    def test_custom_label_ordering(self):
        matcher = ProfileMatcher(MatchingConfig(energy_labels=["A", "B", "G"]))
        profile = make_profile(soft={"min_energy_label": "A"})

        assert matcher.score_breakdown(Listing(energy_label="B"), profile).energy_penalty == 10
        # Labels outside the configured ordering rank as the fallback label
        assert matcher.score_breakdown(Listing(energy_label="C"), profile).energy_penalty == 10


class TestClampScore:
    @pytest.mark.parametrize("raw,expected", [(-20, 0), (0, 0), (55, 55), (100, 100), (105, 100)])
    def test_clamp(self, raw, expected):
        assert clamp_score(raw) == expected


class TestMatch:
    def test_returns_qualifying_pairs_in_input_order(self, matcher, sample_listing):
        profiles = [
            make_profile("a"),
            make_profile("b", hard={"cities": ["Delft"]}),
            make_profile("c", opt_in=False),
            make_profile("d", soft={"min_rooms": 10, "min_area": 500}),
            make_profile("e", soft={"wants_outdoor_space": True}),
        ]

        matches = matcher.match(sample_listing, profiles)

        assert matches == [
            ProfileMatch(profile=profiles[0], score=100),
            ProfileMatch(profile=profiles[4], score=100),
        ]

    def test_threshold_override(self, matcher, sample_listing):
        profile = make_profile(soft={"min_rooms": 10, "min_area": 500})

        assert matcher.match(sample_listing, [profile]) == []
        assert matcher.match(sample_listing, [profile], threshold=60)[0].score == 60

    def test_accepts_raw_mappings(self, matcher, sample_listing, profile_data):
        matches = matcher.match(sample_listing, [profile_data])

        assert [m.profile.id for m in matches] == ["1"]

    def test_malformed_entries_are_skipped(self, matcher, sample_listing, profile_data, caplog):
        broken = {"id": "2", "notification_opt_in": True}

        with caplog.at_level(logging.WARNING, logger="listing_alerts.matching.engine"):
            matches = matcher.match(sample_listing, [broken, "garbage", None, profile_data])

        assert [m.profile.id for m in matches] == ["1"]
        malformed = [r for r in caplog.records if getattr(r, "event", None) == "matching.profile.malformed"]
        assert len(malformed) == 3

    def test_empty_profiles(self, matcher, sample_listing):
        assert matcher.match(sample_listing, []) == []

    def test_module_level_match(self, sample_listing, sample_profile):
        assert match(sample_listing, [sample_profile]) == [ProfileMatch(sample_profile, 100)]
        assert match(sample_listing, [sample_profile], threshold=100)[0].score == 100

    def test_fractional_threshold(self, sample_listing):
        profile = make_profile(soft={"min_energy_label": "A"})  # scores 90

        assert match(sample_listing, [profile], 89.5)[0].score == 90
        assert match(sample_listing, [profile], 90.5) == []
        assert ProfileMatcher(MatchingConfig(threshold=89.5)).match(sample_listing, [profile])

    def test_threshold_outside_score_range_does_not_raise(self, sample_listing, sample_profile):
        assert match(sample_listing, [sample_profile], -10) == [ProfileMatch(sample_profile, 100)]
        assert match(sample_listing, [sample_profile], 150) == []

    def test_evaluate_returns_match_result(self, matcher, sample_listing, sample_profile):
        assert isinstance(matcher.evaluate(sample_listing, sample_profile), MatchResult)
