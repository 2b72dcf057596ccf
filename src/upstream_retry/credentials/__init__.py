"""Credential pool and account rotation."""

from upstream_retry.credentials.pool import CredentialPool, mask_key

__all__ = ["CredentialPool", "mask_key"]
