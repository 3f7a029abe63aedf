"""Pluggable authentication and network capabilities."""

from intellisoc.auth.directory import (
    DEMO_USERS,
    InMemoryUserDirectory,
    UserAccount,
    UserDirectory,
)
from intellisoc.auth.geolocation import Geolocator, Location, StaticGeolocator

__all__ = [
    "DEMO_USERS",
    "InMemoryUserDirectory",
    "UserAccount",
    "UserDirectory",
    "Geolocator",
    "Location",
    "StaticGeolocator",
]
