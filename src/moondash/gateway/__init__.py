"""Data Access Gateway: capability protocol and HTTP adapter."""

from .auth import TokenStore
from .base import DataGateway, Record
from .http import HttpGateway

__all__ = ["DataGateway", "Record", "TokenStore", "HttpGateway"]
