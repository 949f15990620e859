import unicodedata
from enum import Enum
from types import MappingProxyType


class Category(str, Enum):
    FUND_REQUIRED = "fund-required"
    FUND_ELECTIVE = "fund-elective"
    DISC_REQUIRED = "disc-required"
    DISC_ELECTIVE = "disc-elective"
    FREE_ELECTIVE = "free-elective"
    CAPSTONE = "capstone"
    LEVELING = "leveling"


# Categories that carry their own credit threshold in a study plan
BUDGETED_CATEGORIES: tuple[Category, ...] = (
    Category.FUND_REQUIRED,
    Category.FUND_ELECTIVE,
    Category.DISC_REQUIRED,
    Category.DISC_ELECTIVE,
    Category.FREE_ELECTIVE,
)

DEFAULT_CATEGORY = Category.FREE_ELECTIVE

# Transcript phrases per category, checked in this order; first hit wins.
CATEGORY_KEYWORDS: tuple[tuple[Category, tuple[str, ...]], ...] = (
    (Category.FUND_REQUIRED, ("FUND. OBLIGATORIA", "FUNDAMENTACIÓN OBLIGATORIA", "FUNDAMENTACION OBLIGATORIA")),
    (Category.FUND_ELECTIVE, ("FUND. OPTATIVA", "FUNDAMENTACIÓN OPTATIVA", "FUNDAMENTACION OPTATIVA")),
    (Category.DISC_REQUIRED, ("DISCIPLINAR OBLIGATORIA", "DIS. OBLIGATORIA")),
    (Category.DISC_ELECTIVE, ("DISCIPLINAR OPTATIVA", "DIS. OPTATIVA")),
    (Category.FREE_ELECTIVE, ("LIBRE ELECCIÓN", "LIBRE ELECCION")),
    (Category.CAPSTONE, ("TRABAJO DE GRADO",)),
    (Category.LEVELING, ("NIVELACIÓN", "NIVELACION")),
)

# Labels accepted in structured input besides the enum values themselves.
CATEGORY_ALIASES = MappingProxyType(
    {
        "fund.obligatoria": Category.FUND_REQUIRED,
        "fund.optativa": Category.FUND_ELECTIVE,
        "dis.obligatoria": Category.DISC_REQUIRED,
        "dis.optativa": Category.DISC_ELECTIVE,
        "libre": Category.FREE_ELECTIVE,
    }
)


def infer_category(text: str) -> Category:
    """Pick the category whose phrase appears in ``text`` (case-insensitive)."""
    upper = _fold(text)
    for category, phrases in CATEGORY_KEYWORDS:
        if any(phrase in upper for phrase in phrases):
            return category
    return DEFAULT_CATEGORY


def normalize_category(value) -> Category:
    """Map an enum value, a legacy code or a transcript label to a Category.

    Raises ValueError for strings that match nothing.
    """
    if isinstance(value, Category):
        return value
    raw = str(value).strip()
    try:
        return Category(raw.lower())
    except ValueError:
        pass
    alias = CATEGORY_ALIASES.get(raw.lower())
    if alias is not None:
        return alias
    upper = _fold(raw)
    for category, phrases in CATEGORY_KEYWORDS:
        if any(phrase in upper for phrase in phrases):
            return category
    raise ValueError(f"Unknown category '{value}'")


def _fold(text: str) -> str:
    # PDF extraction can split accented letters into base letter + combining mark
    return unicodedata.normalize("NFC", text).upper()
