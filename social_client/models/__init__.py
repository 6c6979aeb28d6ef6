"""ORM models for the client's local database."""
from .client_setting import ClientSetting

__all__ = ["ClientSetting"]
