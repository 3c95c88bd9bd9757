"""
Resource enumeration shared by every sub-engine.

Resources are small integers so per-resource state can live in NumPy arrays
indexed directly by ``int(resource)`` (see :mod:`marketeconomy.roles.market`).
Two members are sentinels that never take part in elasticity:

- ``Resource.NO_RESOURCE`` : "nothing", e.g. a company without an output.
- ``Resource.MONEY`` : the currency itself.

Each tradeable resource belongs to exactly one :class:`ResourceCategory`.
Categories are what the configuration refers to (``neutral_categories``),
never individual resources.
"""

from __future__ import annotations

from enum import Enum, IntEnum


class Resource(IntEnum):
    """Tradeable commodities and services known to the engine."""

    NO_RESOURCE = 0
    MONEY = 1
    # agriculture
    GRAIN = 2
    VEGETABLES = 3
    LIVESTOCK = 4
    FISH = 5
    COTTON = 6
    # food and beverages
    FOOD = 7
    CONVENIENCE_FOOD = 8
    MEALS = 9
    BEVERAGES = 10
    # forestry
    WOOD = 11
    TIMBER = 12
    PAPER = 13
    FURNITURE = 14
    # extraction
    ORE = 15
    COAL = 16
    STONE = 17
    OIL = 18
    # basic materials
    PETROCHEMICALS = 19
    PLASTICS = 20
    METALS = 21
    STEEL = 22
    CONCRETE = 23
    MINERALS = 24
    CHEMICALS = 25
    PHARMACEUTICALS = 26
    TEXTILES = 27
    # manufactured
    MACHINERY = 28
    VEHICLES = 29
    ELECTRONICS = 30
    # immaterial (zero-weight) products
    SOFTWARE = 31
    TELECOM = 32
    FINANCIAL = 33
    MEDIA = 34
    # leisure
    LODGING = 35
    ENTERTAINMENT = 36
    RECREATION = 37
    # municipal
    GARBAGE = 38
    MAIL = 39
    FUEL = 40


class ResourceCategory(str, Enum):
    """Coarse resource grouping used by configuration."""

    SENTINEL = "sentinel"
    AGRICULTURE = "agriculture"
    FOOD = "food"
    FORESTRY = "forestry"
    EXTRACTION = "extraction"
    MATERIALS = "materials"
    MANUFACTURED = "manufactured"
    IMMATERIAL = "immaterial"
    LEISURE = "leisure"
    MUNICIPAL = "municipal"


class PriceComponent(str, Enum):
    """Which part of a split (industrial, service) price a caller wants."""

    MARKET = "market"
    INDUSTRIAL = "industrial"
    SERVICE = "service"


N_RESOURCES = len(Resource)

_CATEGORY_MEMBERS: dict[ResourceCategory, tuple[Resource, ...]] = {
    ResourceCategory.SENTINEL: (Resource.NO_RESOURCE, Resource.MONEY),
    ResourceCategory.AGRICULTURE: (
        Resource.GRAIN,
        Resource.VEGETABLES,
        Resource.LIVESTOCK,
        Resource.FISH,
        Resource.COTTON,
    ),
    ResourceCategory.FOOD: (
        Resource.FOOD,
        Resource.CONVENIENCE_FOOD,
        Resource.MEALS,
        Resource.BEVERAGES,
    ),
    ResourceCategory.FORESTRY: (
        Resource.WOOD,
        Resource.TIMBER,
        Resource.PAPER,
        Resource.FURNITURE,
    ),
    ResourceCategory.EXTRACTION: (
        Resource.ORE,
        Resource.COAL,
        Resource.STONE,
        Resource.OIL,
    ),
    ResourceCategory.MATERIALS: (
        Resource.PETROCHEMICALS,
        Resource.PLASTICS,
        Resource.METALS,
        Resource.STEEL,
        Resource.CONCRETE,
        Resource.MINERALS,
        Resource.CHEMICALS,
        Resource.PHARMACEUTICALS,
        Resource.TEXTILES,
        Resource.FUEL,
    ),
    ResourceCategory.MANUFACTURED: (
        Resource.MACHINERY,
        Resource.VEHICLES,
        Resource.ELECTRONICS,
    ),
    ResourceCategory.IMMATERIAL: (
        Resource.SOFTWARE,
        Resource.TELECOM,
        Resource.FINANCIAL,
        Resource.MEDIA,
    ),
    ResourceCategory.LEISURE: (
        Resource.LODGING,
        Resource.ENTERTAINMENT,
        Resource.RECREATION,
    ),
    ResourceCategory.MUNICIPAL: (Resource.GARBAGE, Resource.MAIL),
}

_CATEGORY_OF: dict[Resource, ResourceCategory] = {
    res: cat for cat, members in _CATEGORY_MEMBERS.items() for res in members
}


def category_of(resource: Resource) -> ResourceCategory:
    """Return the category a resource belongs to."""
    return _CATEGORY_OF[Resource(resource)]


def is_sentinel(resource: Resource | int) -> bool:
    """True for ``NO_RESOURCE`` and ``MONEY``."""
    return int(resource) in (Resource.NO_RESOURCE, Resource.MONEY)


def is_tradeable(resource: Resource | int) -> bool:
    """True for every resource that may take part in price elasticity."""
    return 0 <= int(resource) < N_RESOURCES and not is_sentinel(resource)


def parse_categories(names: list[str] | tuple[str, ...]) -> frozenset[ResourceCategory]:
    """
    Convert configuration category names into a set of categories.

    Raises
    ------
    ValueError
        If a name is not a known category.
    """
    out = set()
    for name in names:
        if isinstance(name, ResourceCategory):
            out.add(name)
            continue
        try:
            out.add(ResourceCategory(str(name).lower()))
        except ValueError:
            valid = sorted(c.value for c in ResourceCategory)
            raise ValueError(
                f"Unknown resource category '{name}'. Must be one of {valid}"
            ) from None
    return frozenset(out)


__all__ = [
    "N_RESOURCES",
    "PriceComponent",
    "Resource",
    "ResourceCategory",
    "category_of",
    "is_sentinel",
    "is_tradeable",
    "parse_categories",
]
