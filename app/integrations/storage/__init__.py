# Storage backends: blob containers and secret vault
from app.integrations.storage.blob import BlobStore, FileBlobStore, MemoryBlobStore
from app.integrations.storage.vault import SecretVault, FileSecretVault, MemorySecretVault

__all__ = [
    "BlobStore",
    "FileBlobStore",
    "MemoryBlobStore",
    "SecretVault",
    "FileSecretVault",
    "MemorySecretVault",
]
