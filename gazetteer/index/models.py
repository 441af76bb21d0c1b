"""
Table holding gazetteer records for the SQLite name index.
"""

from typing import Optional

from sqlmodel import Field, SQLModel


class LocationRow(SQLModel, table=True):
    """One gazetteer record. Its id is also the rowid of its FTS5 entry."""

    __tablename__ = "location"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field()
    population: int = Field(default=0, index=True)
    country_code: Optional[str] = Field(default=None)
    admin1_code: Optional[str] = Field(default=None)
    feature_class: Optional[str] = Field(default=None)
    feature_code: Optional[str] = Field(default=None)
    latitude: Optional[float] = Field(default=None)
    longitude: Optional[float] = Field(default=None)
    attributes: Optional[str] = Field(default=None)  # JSON object
