"""Regulatory reference data for alcohol beverage labels."""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from ..models.schemas import ApplicationData, BeverageType

HEALTH_WARNING_PREFIX = "GOVERNMENT WARNING:"
HEALTH_WARNING_HEADER = "GOVERNMENT WARNING"

HEALTH_WARNING_SECTION_1 = (
    "(1) According to the Surgeon General, women should not drink alcoholic "
    "beverages during pregnancy because of the risk of birth defects."
)
HEALTH_WARNING_SECTION_2 = (
    "(2) Consumption of alcoholic beverages impairs your ability to drive a car "
    "or operate machinery, and may cause health problems."
)
HEALTH_WARNING_FULL = (
    f"{HEALTH_WARNING_PREFIX} {HEALTH_WARNING_SECTION_1} {HEALTH_WARNING_SECTION_2}"
)

HEALTH_WARNING_FIELD = "health_warning"

# Lowercase; matched after "&" is rewritten to "and"
QUALIFYING_PHRASES = (
    "bottled by",
    "packed by",
    "distilled by",
    "blended by",
    "produced by",
    "prepared by",
    "manufactured by",
    "made by",
    "brewed by",
    "imported by",
    "cellared and bottled by",
    "vinted and bottled by",
    "prepared and bottled by",
    "brewed and bottled by",
    "distilled and bottled by",
    "produced and bottled by",
    "estate bottled",
)


@dataclass(frozen=True)
class BeverageTypeConfig:
    """Labeling rules for one beverage category."""
    label: str
    mandatory_fields: Tuple[str, ...]
    optional_fields: Tuple[str, ...]
    valid_sizes_ml: Optional[Tuple[int, ...]]  # None means any size is legal


BEVERAGE_TYPES: Dict[BeverageType, BeverageTypeConfig] = {
    BeverageType.DISTILLED_SPIRITS: BeverageTypeConfig(
        label="Distilled Spirits",
        mandatory_fields=(
            "brand_name",
            "class_type",
            "alcohol_content",
            "net_contents",
            "health_warning",
            "name_and_address",
            "qualifying_phrase",
        ),
        optional_fields=(
            "fanciful_name",
            "country_of_origin",
            "age_statement",
            "state_of_distillation",
        ),
        valid_sizes_ml=(
            50, 100, 187, 200, 250, 331, 350, 355, 375, 475, 500, 570, 700,
            710, 750, 900, 945, 1000, 1500, 1750, 1800, 2000, 3000, 3750,
        ),
    ),
    BeverageType.WINE: BeverageTypeConfig(
        label="Wine",
        mandatory_fields=(
            "brand_name",
            "class_type",
            "alcohol_content",
            "net_contents",
            "health_warning",
            "name_and_address",
            "qualifying_phrase",
            "grape_varietal",
            "appellation_of_origin",
            "sulfite_declaration",
        ),
        optional_fields=(
            "fanciful_name",
            "country_of_origin",
            "vintage_year",
        ),
        valid_sizes_ml=(
            180, 187, 200, 250, 300, 330, 360, 375, 473, 500, 550, 568, 600,
            620, 700, 720, 750, 1000, 1500, 1800, 2250, 3000,
        ),
    ),
    BeverageType.MALT_BEVERAGE: BeverageTypeConfig(
        label="Malt Beverages",
        mandatory_fields=(
            "brand_name",
            "class_type",
            "net_contents",
            "health_warning",
            "name_and_address",
            "qualifying_phrase",
        ),
        optional_fields=(
            "fanciful_name",
            "alcohol_content",
            "country_of_origin",
        ),
        valid_sizes_ml=None,
    ),
}

# Application attributes compared as free text, in evaluation order
_TEXT_FIELDS = (
    "brand_name",
    "fanciful_name",
    "class_type",
    "alcohol_content",
    "net_contents",
    "health_warning",
    "name_and_address",
    "qualifying_phrase",
    "country_of_origin",
    "grape_varietal",
    "appellation_of_origin",
    "vintage_year",
    "age_statement",
    "state_of_distillation",
)


def mandatory_fields(beverage_type: BeverageType) -> Tuple[str, ...]:
    return BEVERAGE_TYPES[beverage_type].mandatory_fields


def is_valid_size(beverage_type: BeverageType, size_ml: float) -> bool:
    """Whether ``size_ml`` is an authorized standard of fill."""
    valid_sizes = BEVERAGE_TYPES[beverage_type].valid_sizes_ml
    if valid_sizes is None:
        return True
    return size_ml in valid_sizes


def build_expected_fields(application: ApplicationData) -> Dict[str, str]:
    """
    Field name -> expected label text for every value the application supplies.

    The health warning is always expected; when the application omits it
    the statutory statement is used. A sulfite declaration flag becomes
    the literal "Contains Sulfites".
    """
    expected: Dict[str, str] = {}
    for field_name in _TEXT_FIELDS:
        value = getattr(application, field_name)
        if isinstance(value, str) and value.strip():
            expected[field_name] = value.strip()

    if application.sulfite_declaration is True:
        expected["sulfite_declaration"] = "Contains Sulfites"

    if HEALTH_WARNING_FIELD not in expected:
        expected[HEALTH_WARNING_FIELD] = HEALTH_WARNING_FULL

    return expected

