from database import Base
from sqlalchemy import Column, Integer, BigInteger, String, DateTime, ForeignKey, UniqueConstraint, func

# SQLite only autoincrements INTEGER primary keys.
Id = BigInteger().with_variant(Integer, "sqlite")


class Users(Base):
    __tablename__ = "users"

    id = Column(Id, primary_key=True, autoincrement=True)
    username = Column(String(150), nullable=False, unique=True)
    password = Column(String(255), nullable=False)
    created_at = Column(
        DateTime,
        nullable=False,
        default=func.now(),
        server_default=func.now()
    )


class Favorites(Base):
    """
    A user's saved reference to a country.

    Rows are created and deleted, never updated. A user may hold at most one
    favorite per country code.
    """
    __tablename__ = "favorites"
    __table_args__ = (
        UniqueConstraint("user_id", "country_code", name="uq_favorites_user_country"),
    )

    id = Column(Id, primary_key=True, autoincrement=True)
    user_id = Column(Id, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    country_code = Column(String(3), nullable=False)
    country_name = Column(String(255), nullable=False)
    flag_url = Column(String(512), nullable=False)
    created_at = Column(
        DateTime,
        nullable=False,
        default=func.now(),
        server_default=func.now()
    )
