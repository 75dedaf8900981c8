"""Cryptographic constants for pasetolite."""

# RSA-PSS parameters for v1.public
RSA_KEY_SIZE = 2048
RSA_PUBLIC_EXPONENT = 65537
RSA_PSS_SALT_LENGTH = 48
# One RSA block: modulus bits / 8
V1_PUBLIC_SIGNATURE_SIZE = 256

# v1.local: AES-256-CTR with HMAC-SHA384 (encrypt-then-MAC)
V1_LOCAL_KEY_SIZE = 32
V1_LOCAL_NONCE_SIZE = 32
V1_LOCAL_SEED_SIZE = 32
V1_LOCAL_TAG_SIZE = 48
# First half of the nonce salts HKDF, second half is the CTR counter block
V1_LOCAL_HKDF_SALT_SIZE = 16

# HKDF info strings for splitting the local key
HKDF_INFO_ENCRYPTION = b"paseto-encryption-key"
HKDF_INFO_AUTHENTICATION = b"paseto-auth-key-for-aead"

# PAE length prefix width in bytes
PAE_LENGTH_SIZE = 8
