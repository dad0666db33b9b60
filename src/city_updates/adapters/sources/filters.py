"""Shared text heuristics for sources: locality, category and gazetteer."""

from dataclasses import dataclass, field

from city_updates.core.entities import Category

DEFAULT_PLACES = ["islamabad", "rawalpindi"]

DEFAULT_GAZETTEER = [
    "islamabad", "rawalpindi", "twin cit",
    "f-6", "f-7", "f-8", "f-9", "f-10", "f-11",
    "g-6", "g-7", "g-8", "g-9", "g-10", "g-11",
    "blue area", "jinnah avenue", "constitution avenue",
    "saddar", "raja bazaar", "committee chowk", "murree road",
    "airport", "islamabad airport", "benazir airport",
    "faisal mosque", "lok virsa", "pakistan monument",
]

# Order matters: the first category with a matching keyword wins.
DEFAULT_CATEGORIES: list[tuple[Category, list[str]]] = [
    (Category.TRAFFIC, ["traffic", "road", "accident"]),
    (Category.WEATHER, ["weather", "rain", "temperature"]),
    (Category.EMERGENCIES, ["emergency", "alert", "urgent"]),
    (Category.EVENT, ["event", "festival", "celebration"]),
    (Category.BUSINESS, ["business", "economy", "market"]),
    (Category.COMMUNITY, ["community", "local", "resident"]),
    (Category.TRAVEL, ["travel", "tourism", "flight"]),
]


@dataclass
class KeywordTables:
    """Keyword tables driving the heuristics, overridable from config."""

    places: list[str] = field(default_factory=lambda: list(DEFAULT_PLACES))
    gazetteer: list[str] = field(default_factory=lambda: list(DEFAULT_GAZETTEER))
    categories: list[tuple[Category, list[str]]] = field(
        default_factory=lambda: [(c, list(words)) for c, words in DEFAULT_CATEGORIES]
    )

    @classmethod
    def from_config(cls, data: dict) -> "KeywordTables":
        """Build tables from the `keywords` config section.

        `categories` is a mapping of category name to keyword list; its
        insertion order is the matching order.
        """
        tables = cls()
        if "places" in data:
            tables.places = [str(p) for p in data["places"]]
        if "gazetteer" in data:
            tables.gazetteer = [str(p) for p in data["gazetteer"]]
        if "categories" in data:
            tables.categories = [
                (Category(name), [str(word) for word in words])
                for name, words in data["categories"].items()
            ]
        return tables


def mentions_any(title: str, content: str, places: list[str]) -> bool:
    """
    Check whether an item is about one of the given places.

    Args:
        title: Title of the item
        content: Body/description of the item
        places: Place-name substrings to look for

    Returns:
        True if any place is found in title or content (case-insensitive)
    """
    if not places:
        return True  # No filtering if no places provided

    text = f"{title} {content}".lower()
    return any(place.lower() in text for place in places)


def categorize(text: str, categories: list[tuple[Category, list[str]]]) -> Category:
    """Return the first category whose keywords occur in `text`, else NEWS."""
    lower_text = text.lower()
    for category, keywords in categories:
        if any(keyword.lower() in lower_text for keyword in keywords):
            return category
    return Category.NEWS


def has_location(text: str, gazetteer: list[str]) -> bool:
    """Whether `text` names a known place from the gazetteer."""
    lower_text = text.lower()
    return any(place.lower() in lower_text for place in gazetteer)
