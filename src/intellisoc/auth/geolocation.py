"""Geolocation capability."""

from typing import Optional, Protocol
from pydantic import BaseModel, Field


class Location(BaseModel):
    """Resolved network location of a source address."""
    ip_address: str = Field(...)
    ip_type: str = Field(default="IPv4")
    is_proxy: bool = Field(default=False)
    is_vpn: bool = Field(default=False)
    country: Optional[str] = Field(default=None)
    city: Optional[str] = Field(default=None)
    region: Optional[str] = Field(default=None)
    timezone: Optional[str] = Field(default=None)


class Geolocator(Protocol):
    def geolocate(self, address: str) -> Location:
        ...


class StaticGeolocator:
    """Returns the same demo location for every address."""

    def __init__(
        self,
        country: str = "Sri Lanka",
        city: str = "Negombo",
        region: str = "Western Province",
        timezone: str = "Asia/Colombo",
    ):
        self.country = country
        self.city = city
        self.region = region
        self.timezone = timezone

    def geolocate(self, address: str) -> Location:
        return Location(
            ip_address=address,
            ip_type="IPv6" if ":" in address else "IPv4",
            country=self.country,
            city=self.city,
            region=self.region,
            timezone=self.timezone,
        )
