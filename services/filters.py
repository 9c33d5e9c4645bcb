"""
Country queries, filter evaluation and the home view state.

The country API has endpoints for all countries, a name search and a region
lookup, but nothing for languages. Filters are therefore resolved by picking
one source query and narrowing its result in memory:

==========================  ==================  ======================
filters set                 source              narrowed by
==========================  ==================  ======================
none                        all                 -
search (+ anything)         name search         region, language
region                      region              -
region + language           region              language
language                    all (language key)  language
==========================  ==================  ======================

Narrowing never reorders the source result.
"""
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional

from schemas.country import Country
from services.gateway import CountryGateway
from services.resource_cache import Resource, ResourceCache, suspend


ALL_COUNTRIES_KEY = "all-countries"
REGIONS = ("Africa", "Americas", "Asia", "Europe", "Oceania")
LANGUAGES = (
    "English", "Spanish", "French", "Arabic", "Chinese",
    "Russian", "Portuguese", "German", "Japanese", "Hindi",
)


def name_key(term: str) -> str:
    return f"name-{term}"


def region_key(region: str) -> str:
    return f"region-{region}"


def language_key(language: str) -> str:
    return f"language-{language}"


def code_key(code: str) -> str:
    return f"code-{code}"


def matches_region(country: Country, region: str) -> bool:
    return country.region.lower() == region.lower()


def matches_language(country: Country, language: str) -> bool:
    needle = language.lower()
    return any(needle in name.lower() for name in country.languages.values())


def by_language(countries: Iterable[Country], language: str) -> List[Country]:
    return [c for c in countries if matches_language(c, language)]


def by_region(countries: Iterable[Country], region: str) -> List[Country]:
    return [c for c in countries if matches_region(c, region)]


@dataclass(frozen=True)
class CountryFilters:
    search: str = ""
    region: str = ""
    language: str = ""

    def __post_init__(self):
        for field in ("search", "region", "language"):
            object.__setattr__(self, field, (getattr(self, field) or "").strip())

    @property
    def is_empty(self) -> bool:
        return not (self.search or self.region or self.language)


class CountryQueries:
    """Country API lookups memoized in a ``ResourceCache``."""

    def __init__(self, gateway: CountryGateway, cache: ResourceCache):
        self.gateway = gateway
        self.cache = cache

    def all(self) -> Resource[List[Country]]:
        return self.cache.get(ALL_COUNTRIES_KEY, self.gateway.all)

    def by_name(self, term: str) -> Resource[List[Country]]:
        return self.cache.get(name_key(term), lambda: self.gateway.by_name(term))

    def by_region(self, region: str) -> Resource[List[Country]]:
        return self.cache.get(region_key(region), lambda: self.gateway.by_region(region))

    def by_code(self, code: str) -> Resource[List[Country]]:
        return self.cache.get(code_key(code), lambda: self.gateway.by_code(code))

    def by_language(self, language: str) -> Resource[List[Country]]:
        async def fetch():
            return by_language(await self.gateway.all(), language)

        return self.cache.get(language_key(language), fetch)


def select_countries(queries: CountryQueries, filters: CountryFilters) -> List[Country]:
    """
    Resolve ``filters`` against cached queries.

    Raises ``ResourcePending`` while the source query is in flight; use
    ``filter_countries`` to await the result instead.
    """
    if filters.search:
        countries = queries.by_name(filters.search).read()
        if filters.region:
            countries = by_region(countries, filters.region)
        if filters.language:
            countries = by_language(countries, filters.language)
        return countries

    if filters.region:
        countries = queries.by_region(filters.region).read()
        if filters.language:
            countries = by_language(countries, filters.language)
        return countries

    if filters.language:
        return queries.by_language(filters.language).read()

    return queries.all().read()


async def filter_countries(queries: CountryQueries, filters: CountryFilters) -> List[Country]:
    return await suspend(lambda: select_countries(queries, filters))


async def find_country(queries: CountryQueries, code: str) -> Optional[Country]:
    countries = await suspend(queries.by_code(code).read)
    return countries[0] if countries else None


class CountryBrowser:
    """
    Filter state of the home view.

    Changing a filter drops the cache entry of the value it replaces, so a
    later return to that value refetches instead of showing old data.
    """

    def __init__(self, queries: CountryQueries, filters: CountryFilters = CountryFilters()):
        self.queries = queries
        self.filters = filters

    def search(self, term: str) -> None:
        previous = self.filters.search
        self.filters = replace(self.filters, search=term)
        if previous != self.filters.search:
            self.queries.cache.invalidate(name_key(previous))

    def filter_region(self, region: str) -> None:
        previous = self.filters.region
        self.filters = replace(self.filters, region=region)
        if previous != self.filters.region:
            self.queries.cache.invalidate(region_key(previous))

    def filter_language(self, language: str) -> None:
        previous = self.filters.language
        self.filters = replace(self.filters, language=language)
        if previous != self.filters.language:
            self.queries.cache.invalidate(language_key(previous))

    def read(self) -> List[Country]:
        return select_countries(self.queries, self.filters)

    async def countries(self) -> List[Country]:
        return await filter_countries(self.queries, self.filters)
