from sqlalchemy import Column, Integer, String

from sqlbridge.core.database import Base


# =========================
# User
# =========================
class User(Base):
    """
    Sample table the service ships with.
    It is also what the schema fallback describes when the catalog is empty.
    """

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)

    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    age = Column(Integer, nullable=False)
