"""
recordstore CLI

Commands:
- recordstore record normalize/inspect - Canonical form of documents and stored records
- recordstore key generate/show - Sealing key management
- recordstore seal/unseal - AES-GCM sealing of stored records
"""

__version__ = "0.1.0"
