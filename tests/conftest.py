"""Shared pytest fixtures."""

import os

# Configure before the application modules read their settings.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret"
os.environ["COUNTRIES_API_URL"] = "https://restcountries.com/v3.1"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
from main import app
from models import Users
from schemas.country import Country

test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


def make_country(code, name, region, languages=None, **extra):
    data = {
        "cca3": code,
        "name": {"common": name, "official": extra.pop("official", name)},
        "population": extra.pop("population", 1_000_000),
        "region": region,
        "subregion": extra.pop("subregion", ""),
        "capital": extra.pop("capital", []),
        "flags": {
            "png": f"https://flagcdn.com/w320/{code.lower()}.png",
            "svg": f"https://flagcdn.com/{code.lower()}.svg",
        },
        "borders": extra.pop("borders", []),
        "tld": extra.pop("tld", []),
        "currencies": extra.pop("currencies", {}),
    }
    if languages is not None:
        data["languages"] = languages
    data.update(extra)
    return data


@pytest.fixture
def country_payload() -> list:
    """Raw country API payload, in the order the API returns it."""
    return [
        make_country(
            "DEU", "Germany", "Europe", {"deu": "German"},
            official="Federal Republic of Germany",
            population=83240525,
            subregion="Western Europe",
            capital=["Berlin"],
            borders=["AUT", "BEL", "FRA"],
            tld=[".de"],
            currencies={"EUR": {"name": "Euro", "symbol": "€"}},
        ),
        make_country("FRA", "France", "Europe", {"fra": "French"}, capital=["Paris"]),
        make_country(
            "BEL", "Belgium", "Europe", {"deu": "German", "fra": "French", "nld": "Dutch"}
        ),
        make_country("CAN", "Canada", "Americas", {"eng": "English", "fra": "French"}),
        make_country("JPN", "Japan", "Asia", {"jpn": "Japanese"}),
        make_country("ATA", "Antarctica", "Antarctic"),
    ]


@pytest.fixture
def countries(country_payload) -> list:
    return [Country.model_validate(item) for item in country_payload]


@pytest.fixture(autouse=True)
def tables():
    """Give every test empty tables."""
    Base.metadata.create_all(bind=test_engine)
    yield
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def db():
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture
def user(db) -> Users:
    user = Users(username="ada", password="not-a-real-hash")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def client():
    """Create a test client backed by the in-memory database."""
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(client) -> dict:
    """Sign up and log in a user, returning its auth header."""
    client.post("/api/signup", json={"username": "grace", "password": "hopper123"})
    response = client.post("/api/login", json={"username": "grace", "password": "hopper123"})
    return {"x-auth-token": response.json()["token"]}
