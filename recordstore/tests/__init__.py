"""
Test suite for recordstore.

Focus areas:
- Classification precedence and fallbacks
- Flattening encodings and key-set invariants
- Typed record round trips through the JSON codec
- File / S3 persistence and AES-GCM sealing
"""
