"""People-search module."""

from .provider import HttpPeopleSearch, IPeopleSearch

__all__ = ["HttpPeopleSearch", "IPeopleSearch"]
