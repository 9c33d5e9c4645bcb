"""
Router for browsing, searching and filtering countries.

The list route has no per-client filter state, so it never drops the key
of a previous search, region or language. Every distinct value stays in
the application cache until ``DELETE /countries/cache`` clears it.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request

from schemas.auth import MessageSchema
from schemas.country import Country, CountryDetailSchema
from services.filters import LANGUAGES, REGIONS, CountryFilters, CountryQueries, filter_countries, find_country
from utils.errors import GatewayError, NotFoundError

router = APIRouter(prefix="/countries", tags=["countries"])


def get_queries(request: Request) -> CountryQueries:
    queries = getattr(request.app.state, "country_queries", None)
    if queries is None:
        raise RuntimeError("Country queries not initialized. Check lifespan setup.")
    return queries


@router.get(
    "",
    response_model=List[Country],
    summary="List countries matching the search term, region and language",
)
async def list_countries(
    search: str = Query("", description="Name search, delegated to the country API"),
    region: str = Query("", description="Exact region, case-insensitive"),
    language: str = Query("", description="Substring of a spoken language, case-insensitive"),
    queries: CountryQueries = Depends(get_queries),
):
    filters = CountryFilters(search=search, region=region, language=language)
    try:
        return await filter_countries(queries, filters)
    except GatewayError as e:
        # The country API answers 404 when a name or region matches nothing.
        if e.upstream_status == 404:
            return []
        raise


@router.get(
    "/filters",
    summary="Region and language choices offered by the home view",
)
def list_filter_options():
    return {"regions": list(REGIONS), "languages": list(LANGUAGES)}


@router.delete(
    "/cache",
    response_model=MessageSchema,
    summary="Invalidate one cached query, or all of them",
)
async def clear_cache(
    key: Optional[str] = Query(None, description="Cache key such as 'region-Europe'"),
    queries: CountryQueries = Depends(get_queries),
):
    if key:
        queries.cache.invalidate(key)
        return {"message": f"Cache entry {key} cleared"}
    queries.cache.invalidate_all()
    return {"message": "Cache cleared"}


@router.get(
    "/{code}",
    response_model=CountryDetailSchema,
    summary="Details view for one country",
)
async def get_country(code: str, queries: CountryQueries = Depends(get_queries)):
    try:
        country = await find_country(queries, code.strip().upper())
    except GatewayError as e:
        if e.upstream_status == 404:
            raise NotFoundError(f"No country found with code {code}") from e
        raise
    if country is None:
        raise NotFoundError(f"No country found with code {code}")
    return CountryDetailSchema.from_country(country)
