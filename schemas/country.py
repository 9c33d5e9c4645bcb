"""
Pydantic schemas for REST Countries (v3.1) payloads and the details view.

Only the fields the application reads are declared; anything else in the
upstream payload is ignored.
"""
from typing import Dict, List, Optional
from pydantic import BaseModel, Field


class CountryName(BaseModel):
    common: str
    official: str = ""


class Flags(BaseModel):
    png: Optional[str] = None
    svg: Optional[str] = None


class Currency(BaseModel):
    name: str
    symbol: Optional[str] = None


class Country(BaseModel):
    cca3: str = Field(..., description="ISO 3166-1 alpha-3 code")
    name: CountryName
    population: int = Field(0, ge=0)
    region: str = ""
    subregion: str = ""
    capital: List[str] = Field(default_factory=list)
    flags: Flags = Field(default_factory=Flags)
    languages: Dict[str, str] = Field(default_factory=dict)
    currencies: Dict[str, Currency] = Field(default_factory=dict)
    borders: List[str] = Field(default_factory=list)
    tld: List[str] = Field(default_factory=list)

    model_config = {"extra": "ignore", "frozen": True}

    @property
    def flag_url(self) -> str:
        return self.flags.svg or self.flags.png or ""

    @property
    def language_names(self) -> List[str]:
        return list(self.languages.values())


class CountryDetailSchema(BaseModel):
    code: str
    common_name: str
    official_name: str
    flag_url: str
    population: int
    region: str
    subregion: str
    capital: str
    top_level_domain: str
    currencies: List[str]
    languages: List[str]
    borders: List[str]

    @classmethod
    def from_country(cls, country: Country) -> "CountryDetailSchema":
        return cls(
            code=country.cca3,
            common_name=country.name.common,
            official_name=country.name.official,
            flag_url=country.flag_url,
            population=country.population,
            region=country.region,
            subregion=country.subregion or "N/A",
            capital=country.capital[0] if country.capital else "N/A",
            top_level_domain=country.tld[0] if country.tld else "N/A",
            currencies=[currency.name for currency in country.currencies.values()],
            languages=country.language_names,
            borders=list(country.borders),
        )
