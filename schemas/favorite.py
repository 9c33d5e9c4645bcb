import datetime
from pydantic import BaseModel, Field


# -------------------------------
# Schema for adding a favorite
# -------------------------------
class CreateFavoriteSchema(BaseModel):
    country_code: str = Field(..., alias="countryCode", min_length=3, max_length=3)
    country_name: str = Field(..., alias="countryName", min_length=1)
    flag_url: str = Field(..., alias="flagUrl", min_length=1)

    model_config = {
        "populate_by_name": True,
        "json_schema_extra": {
            "example": {
                "countryCode": "DEU",
                "countryName": "Germany",
                "flagUrl": "https://flagcdn.com/de.svg",
            }
        },
    }


# -------------------------------
# Response schema for a single favorite
# -------------------------------
class FavoriteSchema(BaseModel):
    id: int
    user_id: int = Field(..., alias="user")
    country_code: str = Field(..., alias="countryCode")
    country_name: str = Field(..., alias="countryName")
    flag_url: str = Field(..., alias="flagUrl")
    created_at: datetime.datetime = Field(..., alias="createdAt")

    model_config = {"from_attributes": True, "populate_by_name": True}
