"""IPFS (Kubo RPC) content store adapter."""

from egp.infrastructure.adapters.ipfs.ipfs_content_store import IpfsContentStore

__all__ = ["IpfsContentStore"]
