"""Tests for field comparison against application data."""

import pytest
from label_engine.config import Settings
from label_engine.models.schemas import ComparisonStatus, MatchType
from label_engine.services.comparison import (
    ComparisonService,
    find_qualifying_phrase,
    parse_age_statement,
    parse_alcohol_content,
    parse_net_contents,
)
from label_engine.services.regulations import (
    HEALTH_WARNING_FULL,
    HEALTH_WARNING_PREFIX,
    HEALTH_WARNING_SECTION_1,
    HEALTH_WARNING_SECTION_2,
)


@pytest.fixture
def service():
    """Create comparison service with default settings."""
    return ComparisonService(Settings())


class TestAlcoholParsing:
    """Test ABV parsing."""

    def test_percentage(self):
        """Test percentage formats."""
        assert parse_alcohol_content("45% Alc./Vol.") == 45.0
        assert parse_alcohol_content("12.5% ABV") == 12.5

    def test_proof_annotation_ignored(self):
        """Test that the printed percentage wins over proof."""
        assert parse_alcohol_content("45% Alc./Vol. (90 Proof)") == 45.0

    def test_proof_only(self):
        """Test proof conversion when no percentage is printed."""
        assert parse_alcohol_content("90 Proof") == 45.0
        assert parse_alcohol_content("80 PROOF") == 40.0

    @pytest.mark.parametrize("value,expected", [
        ("13,5% vol", 13.5),
        ("12,50 % ABV", 12.5),
    ])
    def test_decimal_comma(self, value, expected):
        """Test European decimal commas."""
        assert parse_alcohol_content(value) == pytest.approx(expected)

    def test_unparseable(self):
        """Test text without numbers."""
        assert parse_alcohol_content("Alcohol by volume") is None


class TestNetContentsParsing:
    """Test volume parsing."""

    @pytest.mark.parametrize("value,expected", [
        ("750 mL", 750.0),
        ("750ML", 750.0),
        ("0.75L", 750.0),
        ("75 cL", 750.0),
        ("1 Liter", 1000.0),
        ("12 FL OZ", 354.88),
        ("25.4 FL. OZ.", 751.17),
        ("750 ml bottle", 750.0),
        ("1,000 mL", 1000.0),
        ("1,750ML", 1750.0),
        ("37,5 cL", 375.0),
    ])
    def test_units(self, value, expected):
        """Test unit conversion to mL."""
        assert parse_net_contents(value) == pytest.approx(expected)

    def test_unparseable(self):
        """Test values without a known unit."""
        assert parse_net_contents("750") is None
        assert parse_net_contents("one bottle") is None
        assert parse_net_contents("5 barrels") is None


class TestAgeParsing:
    """Test age statement parsing."""

    def test_formats(self):
        """Test common age wordings."""
        assert parse_age_statement("12 Years Old") == 12
        assert parse_age_statement("Aged 8 yrs") == 8
        assert parse_age_statement("Aged 10") == 10

    def test_unparseable(self):
        """Test text without an age."""
        assert parse_age_statement("Extra Old") is None


class TestQualifyingPhrase:
    """Test qualifying phrase lookup."""

    def test_longest_phrase_wins(self):
        """Test that compound phrases beat their suffix."""
        assert find_qualifying_phrase("Distilled and Bottled by") == "distilled and bottled by"

    def test_ampersand(self):
        """Test ampersand wording."""
        assert find_qualifying_phrase("PRODUCED & BOTTLED BY") == "produced and bottled by"

    def test_truncated_read(self):
        """Test a phrase cut off by the OCR."""
        assert find_qualifying_phrase("Distilled and Bottled") == "distilled and bottled by"

    def test_unknown(self):
        """Test wording that is not a qualifying phrase."""
        assert find_qualifying_phrase("Crafted with care") is None
        assert find_qualifying_phrase("by") is None


class TestNotFound:
    """Test missing extracted values."""

    @pytest.mark.parametrize("extracted", [None, "", "   "])
    def test_missing(self, service, extracted):
        """Test that missing values are not_found with zero confidence."""
        result = service.compare("class_type", "Bourbon", extracted)
        assert result.status == ComparisonStatus.NOT_FOUND
        assert result.confidence == 0

    def test_minor_field_stays_not_found(self, service):
        """Test that not_found is never softened to needs_correction."""
        result = service.compare("brand_name", "OLD TOM", None)
        assert result.status == ComparisonStatus.NOT_FOUND


class TestExactComparison:
    """Test exact strategy."""

    def test_vintage_exact(self, service):
        """Test identical years."""
        result = service.compare("vintage_year", "2019", "2019")
        assert result.status == ComparisonStatus.MATCH
        assert result.confidence == 100

    def test_vintage_digits(self, service):
        """Test years that match once non-digits are removed."""
        result = service.compare("vintage_year", "2019", "Vintage 2019")
        assert result.status == ComparisonStatus.MATCH
        assert result.confidence == 95

    def test_vintage_mismatch(self, service):
        """Test different years."""
        result = service.compare("vintage_year", "2019", "2018")
        assert result.status == ComparisonStatus.MISMATCH
        assert result.confidence == 90

    def test_case_insensitive(self, service):
        """Test explicit exact strategy on another field."""
        result = service.compare("brand_name", "Old Tom", "OLD TOM", match_type=MatchType.EXACT)
        assert result.status == ComparisonStatus.MATCH
        assert result.confidence == 95


class TestHealthWarning:
    """Test government warning comparison."""

    def test_exact(self, service):
        """Test verbatim warning."""
        result = service.compare("health_warning", HEALTH_WARNING_FULL, HEALTH_WARNING_FULL)
        assert result.status == ComparisonStatus.MATCH
        assert result.confidence == 100

    def test_whitespace_insensitive(self, service):
        """Test line breaks from OCR."""
        extracted = HEALTH_WARNING_FULL.replace(" ", "\n", 3)
        result = service.compare("health_warning", HEALTH_WARNING_FULL, extracted)
        assert result.confidence == 100

    def test_header_not_capitalized(self, service):
        """Test that a title-case header is rejected."""
        extracted = HEALTH_WARNING_FULL.replace("GOVERNMENT WARNING", "Government Warning")
        result = service.compare("health_warning", HEALTH_WARNING_FULL, extracted)

        assert result.status == ComparisonStatus.MISMATCH
        assert result.confidence == 95
        assert "capital letters" in result.reasoning

    def test_header_missing(self, service):
        """Test warning body without its header."""
        extracted = f"{HEALTH_WARNING_SECTION_1} {HEALTH_WARNING_SECTION_2}"
        result = service.compare("health_warning", HEALTH_WARNING_FULL, extracted)

        assert result.status == ComparisonStatus.MISMATCH
        assert "missing" in result.reasoning

    def test_body_case_difference(self, service):
        """Test body text differing only in case."""
        extracted = f"{HEALTH_WARNING_PREFIX} {HEALTH_WARNING_SECTION_1.upper()} {HEALTH_WARNING_SECTION_2}"
        result = service.compare("health_warning", HEALTH_WARNING_FULL, extracted)

        assert result.status == ComparisonStatus.MATCH
        assert result.confidence == 85

    def test_minor_ocr_error(self, service):
        """Test a single misread character."""
        extracted = HEALTH_WARNING_FULL.replace("Surgeon", "Surqeon")
        result = service.compare("health_warning", HEALTH_WARNING_FULL, extracted)

        assert result.status == ComparisonStatus.MATCH
        assert 75 <= result.confidence < 85

    def test_truncated(self, service):
        """Test a warning missing its second section."""
        extracted = f"{HEALTH_WARNING_PREFIX} {HEALTH_WARNING_SECTION_1}"
        result = service.compare("health_warning", HEALTH_WARNING_FULL, extracted)

        assert result.status == ComparisonStatus.MISMATCH
        assert result.confidence == 90


class TestFuzzyComparison:
    """Test fuzzy strategy."""

    def test_case_and_punctuation(self, service):
        """Test values equal after folding."""
        result = service.compare("brand_name", "OLD TOM DISTILLERY", "Old Tom Distillery.")
        assert result.status == ComparisonStatus.MATCH
        assert result.confidence == 100

    def test_accepted_variant(self, service):
        """Test class designation synonyms."""
        result = service.compare("class_type", "Kentucky Straight Bourbon Whiskey", "Bourbon")
        assert result.status == ComparisonStatus.MATCH
        assert result.confidence == 95

        result = service.compare("class_type", "India Pale Ale", "IPA")
        assert result.status == ComparisonStatus.MATCH
        assert result.confidence == 95

    def test_different_variants(self, service):
        """Test that distinct canonical classes mismatch."""
        result = service.compare("class_type", "India Pale Ale", "Stout")
        assert result.status == ComparisonStatus.MISMATCH

    def test_ocr_typo(self, service):
        """Test high similarity match."""
        result = service.compare("brand_name", "OLD TOM DISTILLERY", "OLD T0M DISTILLERY")
        assert result.status == ComparisonStatus.MATCH
        assert 90 <= result.confidence < 100

    def test_word_order(self, service):
        """Test token order insensitivity."""
        result = service.compare("name_and_address", "Bardstown Kentucky", "Kentucky Bardstown")
        assert result.status == ComparisonStatus.MATCH
        assert result.confidence == 100

    def test_containment(self, service):
        """Test a value embedded in longer label text."""
        result = service.compare(
            "fanciful_name",
            "Midnight Reserve",
            "Midnight Reserve Limited Edition Small Batch Release",
        )
        assert result.status == ComparisonStatus.MATCH
        assert result.confidence < 50

    def test_substantive_mismatch(self, service):
        """Test unrelated values on a substantive field."""
        result = service.compare(
            "name_and_address",
            "Old Tom Distillery, Bardstown, Kentucky",
            "Lakeside Brewing Co, Portland, Oregon",
        )
        assert result.status == ComparisonStatus.MISMATCH

    def test_minor_mismatch_softened(self, service):
        """Test that minor fields report needs_correction."""
        result = service.compare("brand_name", "OLD TOM DISTILLERY", "BLUE RIVER FARMS")

        assert result.status == ComparisonStatus.NEEDS_CORRECTION
        assert result.reasoning.endswith("Treated as a minor discrepancy.")

    def test_custom_variants(self):
        """Test variants added through settings."""
        default = ComparisonService(Settings())
        custom = ComparisonService(Settings(
            accepted_variants={"class_type": {"VODKA": ["VODKA", "POTATO VODKA"]}}
        ))

        assert default.compare("class_type", "Vodka", "Potato Vodka").confidence < 95
        assert custom.compare("class_type", "Vodka", "Potato Vodka").confidence == 95

    def test_similarity_bounds(self, service):
        """Test similarity edge values."""
        assert service.similarity("", "") == 1.0
        assert service.similarity("abc", "") == 0.0
        assert service.similarity("Bourbon", "BOURBON") == 1.0


class TestNormalizedComparison:
    """Test normalized numeric strategies."""

    def test_abv_equal(self, service):
        """Test identical ABV in different wording."""
        result = service.compare("alcohol_content", "45% Alc./Vol. (90 Proof)", "45% ALC/VOL")
        assert result.status == ComparisonStatus.MATCH
        assert result.confidence == 100

    def test_abv_proof_annotation(self, service):
        """Test a label adding a proof statement."""
        result = service.compare("alcohol_content", "45%", "45% Alc./Vol. (90 Proof)")
        assert result.status == ComparisonStatus.MATCH
        assert result.confidence == 100

    def test_net_contents_litres(self, service):
        """Test millilitres against litres."""
        result = service.compare("net_contents", "750 mL", "0.75L")
        assert result.status == ComparisonStatus.MATCH

    def test_abv_within_tolerance(self, service):
        """Test ABV within half a point."""
        result = service.compare("alcohol_content", "45%", "45.3%")
        assert result.status == ComparisonStatus.MATCH
        assert result.confidence == 90

    def test_abv_mismatch(self, service):
        """Test ABV outside tolerance."""
        result = service.compare("alcohol_content", "45%", "40%")
        assert result.status == ComparisonStatus.MISMATCH
        assert result.confidence == 95

    def test_abv_from_proof(self, service):
        """Test proof-only label against a percentage."""
        result = service.compare("alcohol_content", "45%", "90 Proof")
        assert result.status == ComparisonStatus.MATCH

    def test_abv_unparseable_falls_back(self, service):
        """Test fuzzy fallback when no number is found."""
        result = service.compare("alcohol_content", "forty-five percent", "Forty Five Percent")
        assert result.status == ComparisonStatus.MATCH
        assert result.confidence == 100

    def test_net_contents_units(self, service):
        """Test equal volumes in different units."""
        result = service.compare("net_contents", "750 mL", "75 cL")
        assert result.status == ComparisonStatus.MATCH
        assert result.confidence == 100

    def test_net_contents_thousands_separator(self, service):
        """Test a grouped millilitre figure against litres."""
        result = service.compare("net_contents", "1 L", "1,000 mL")
        assert result.status == ComparisonStatus.MATCH

    def test_net_contents_rounding(self, service):
        """Test volumes within one percent."""
        result = service.compare("net_contents", "750 mL", "25.4 FL. OZ.")
        assert result.status == ComparisonStatus.MATCH
        assert result.confidence == 90

    def test_net_contents_mismatch(self, service):
        """Test different volumes."""
        result = service.compare("net_contents", "750 mL", "1 L")
        assert result.status == ComparisonStatus.MISMATCH

    def test_age(self, service):
        """Test age statements."""
        assert service.compare("age_statement", "12 Years Old", "Aged 12 Years").confidence == 100
        assert service.compare("age_statement", "12 Years Old", "10 years").status == ComparisonStatus.MISMATCH


class TestEnumComparison:
    """Test qualifying phrase strategy."""

    def test_same_phrase(self, service):
        """Test phrase equality across wording."""
        result = service.compare("qualifying_phrase", "Distilled and Bottled by", "DISTILLED & BOTTLED BY")
        assert result.status == ComparisonStatus.MATCH
        assert result.confidence == 95

    def test_different_phrase(self, service):
        """Test different known phrases."""
        result = service.compare("qualifying_phrase", "Distilled and Bottled by", "Imported by")
        assert result.status == ComparisonStatus.MISMATCH
        assert result.confidence == 90

    def test_unknown_phrase_falls_back(self, service):
        """Test fuzzy fallback for unrecognized phrases."""
        result = service.compare("qualifying_phrase", "Crafted by", "CRAFTED BY")
        assert result.status == ComparisonStatus.MATCH
        assert result.confidence == 100


class TestContainsComparison:
    """Test containment strategy."""

    def test_substring(self, service):
        """Test country inside a longer statement."""
        result = service.compare("country_of_origin", "Mexico", "Product of Mexico")
        assert result.status == ComparisonStatus.MATCH
        assert result.confidence == 90

    def test_word_overlap(self, service):
        """Test half the expected words present."""
        result = service.compare("country_of_origin", "United Kingdom", "Made in the Kingdom of Fife")
        assert result.status == ComparisonStatus.MATCH
        assert result.confidence == 40

    def test_absent(self, service):
        """Test a different country."""
        result = service.compare("country_of_origin", "France", "Product of Italy")
        assert result.status == ComparisonStatus.MISMATCH
        assert result.confidence == 85

    def test_boilerplate_words_ignored(self, service):
        """Test that shared filler words do not make different countries match."""
        result = service.compare("country_of_origin", "Product of France", "Product of Italy")
        assert result.status == ComparisonStatus.MISMATCH

    def test_boilerplate_only_differs(self, service):
        """Test that differing filler still matches on the country."""
        result = service.compare("country_of_origin", "Product of Scotland", "Made in Scotland")
        assert result.status == ComparisonStatus.MATCH
        assert result.confidence == 80
