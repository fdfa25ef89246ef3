"""Credentials and token storage for prq."""

from .credentials import CredentialStore, select_credentials

__all__ = ["CredentialStore", "select_credentials"]
