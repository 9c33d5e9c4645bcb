from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from database import get_db
from models import Users
from routers.auth import get_current_user
from schemas.auth import MessageSchema
from schemas.favorite import CreateFavoriteSchema, FavoriteSchema
from services.favorites import FavoritesStore

router = APIRouter(
    prefix="/favorites",
    tags=["favorites"],
    dependencies=[Depends(get_current_user)],  # all routes require auth
)


def get_store(db: Session = Depends(get_db)) -> FavoritesStore:
    return FavoritesStore(db)


# ------------------------------------------------------
# GET /favorites – the user's favorites in insertion order
# ------------------------------------------------------
@router.get(
    "",
    response_model=List[FavoriteSchema],
    summary="List the current user's favorite countries",
)
def list_favorites(
    store: FavoritesStore = Depends(get_store),
    current_user: Users = Depends(get_current_user),
):
    return store.list(current_user)


# ------------------------------------------------------
# POST /favorites – add a country
# ------------------------------------------------------
@router.post(
    "",
    response_model=FavoriteSchema,
    status_code=status.HTTP_201_CREATED,
    summary="Add a country to the current user's favorites",
)
def add_favorite(
    payload: CreateFavoriteSchema,
    store: FavoritesStore = Depends(get_store),
    current_user: Users = Depends(get_current_user),
):
    """
    Fails with 400 when the country is already a favorite; adding is not
    idempotent.
    """
    return store.add(
        current_user,
        country_code=payload.country_code.strip().upper(),
        country_name=payload.country_name.strip(),
        flag_url=payload.flag_url.strip(),
    )


# ------------------------------------------------------
# DELETE /favorites/{country_code} – remove a country
# ------------------------------------------------------
@router.delete(
    "/{country_code}",
    response_model=MessageSchema,
    summary="Remove a country from the current user's favorites",
)
def remove_favorite(
    country_code: str,
    store: FavoritesStore = Depends(get_store),
    current_user: Users = Depends(get_current_user),
):
    store.remove(current_user, country_code.strip().upper())
    return {"message": "Favorite removed"}
