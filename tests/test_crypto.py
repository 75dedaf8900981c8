"""Tests for crypto module."""

from dataclasses import replace

import pytest
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from pasetolite import V1_LOCAL, V1_PUBLIC, KeyPair, KeyPurposeError, KeyUsage, TokenKey
from pasetolite.crypto import (
    check_key_purpose,
    from_base64url,
    generate_keypair,
    generate_secret_key,
    le64,
    pae,
    sign_message,
    to_base64url,
    verify_message,
)
from pasetolite.crypto.cipher import aes_ctr, derive_keys, get_nonce, tags_match
from pasetolite.crypto.constants import V1_LOCAL_NONCE_SIZE, V1_PUBLIC_SIGNATURE_SIZE
from pasetolite.errors import Base64URLDecodeError


class TestBase64Url:
    """Tests for base64url encoding/decoding."""

    def test_round_trip(self) -> None:
        """Test that encoding and decoding produces original data."""
        data = b"Hello, World!"
        assert from_base64url(to_base64url(data)) == data

    def test_known_value(self) -> None:
        """Test encoding of a known footer."""
        assert to_base64url(b"footer1") == "Zm9vdGVyMQ"

    def test_no_padding(self) -> None:
        """Test that encoding produces no padding characters."""
        assert "=" not in to_base64url(b"test")

    def test_url_safe_chars(self) -> None:
        """Test that encoding uses URL-safe characters."""
        # Data that would produce + and / in standard base64
        encoded = to_base64url(b"\xfb\xff\xfe")
        assert "+" not in encoded
        assert "/" not in encoded

    def test_decode_rejects_plus(self) -> None:
        """Test that decoding rejects + character."""
        with pytest.raises(Base64URLDecodeError, match="contains forbidden characters"):
            from_base64url("abc+def")

    def test_decode_rejects_slash(self) -> None:
        """Test that decoding rejects / character."""
        with pytest.raises(Base64URLDecodeError, match="contains forbidden characters"):
            from_base64url("abc/def")

    def test_decode_rejects_padding(self) -> None:
        """Test that decoding rejects = padding."""
        with pytest.raises(Base64URLDecodeError, match="contains forbidden characters"):
            from_base64url("abc=")

    def test_decode_rejects_invalid_chars(self) -> None:
        """Test that decoding rejects other invalid characters."""
        with pytest.raises(Base64URLDecodeError, match="contains non-Base64URL characters"):
            from_base64url("abc!def")

    def test_decode_rejects_impossible_length(self) -> None:
        """A length of 4n+1 characters cannot come from any byte string."""
        with pytest.raises(Base64URLDecodeError, match="Invalid Base64URL length"):
            from_base64url("Zm9vdGVyM")

    def test_decode_rejects_non_canonical_trailing_bits(self) -> None:
        """Two strings must never decode to the same bytes."""
        with pytest.raises(Base64URLDecodeError, match="trailing bits"):
            from_base64url("Zm9vdGVyMR")

    def test_decode_empty(self) -> None:
        assert from_base64url("") == b""


class TestPAE:
    """Tests for Pre-Authentication Encoding."""

    def test_empty_list(self) -> None:
        """Test that an empty list encodes to a zero count."""
        assert pae([]) == b"\x00" * 8

    def test_single_empty_part(self) -> None:
        assert pae([b""]) == b"\x01" + b"\x00" * 7 + b"\x00" * 8

    def test_single_part(self) -> None:
        """Test count, length prefix and raw bytes layout."""
        assert pae([b"test"]) == (
            b"\x01\x00\x00\x00\x00\x00\x00\x00" + b"\x04\x00\x00\x00\x00\x00\x00\x00" + b"test"
        )

    def test_strings_are_utf8_encoded(self) -> None:
        assert pae(["v1.public", "é"]) == pae([b"v1.public", "é".encode()])

    def test_le64_little_endian(self) -> None:
        assert le64(256) == b"\x00\x01\x00\x00\x00\x00\x00\x00"

    def test_le64_largest_length(self) -> None:
        assert le64((1 << 63) - 1) == b"\xff" * 7 + b"\x7f"

    def test_le64_rejects_lengths_over_63_bits(self) -> None:
        """Lengths that would set the top bit are refused, not truncated."""
        with pytest.raises(ValueError, match="too large"):
            le64(1 << 63)
        with pytest.raises(ValueError, match="too large"):
            le64(1 << 64)

    def test_le64_rejects_negative(self) -> None:
        with pytest.raises(ValueError, match="negative"):
            le64(-1)

    def test_concatenation_differs_from_split(self) -> None:
        """PAE([a, b]) must differ from PAE([a || b])."""
        assert pae([b"ab", b"cd"]) != pae([b"abcd"])

    def test_no_two_splits_collide(self) -> None:
        """Every way of splitting the same bytes encodes differently."""
        data = b"v1.public{}"
        encodings = set()
        splits = 0
        for i in range(len(data) + 1):
            for j in range(i, len(data) + 1):
                encodings.add(pae([data[:i], data[i:j], data[j:]]))
                splits += 1
        assert len(encodings) == splits

    def test_order_matters(self) -> None:
        assert pae([b"a", b"b"]) != pae([b"b", b"a"])

    def test_part_count_matters(self) -> None:
        assert pae([b"a", b""]) != pae([b"a"])


class TestKeyPurpose:
    """Tests for check_key_purpose."""

    def test_missing_key(self) -> None:
        with pytest.raises(KeyPurposeError, match="No key available to sign"):
            check_key_purpose("sign", None, V1_PUBLIC.header)

    def test_sign_accepts_signing_key(self, keypair: KeyPair) -> None:
        assert check_key_purpose("sign", keypair.signing_key, V1_PUBLIC.header) is (
            keypair.signing_key
        )

    def test_sign_rejects_verification_key(self, keypair: KeyPair) -> None:
        """A public key must never be used to sign."""
        with pytest.raises(KeyPurposeError, match="usage 'verify' cannot be used to sign"):
            check_key_purpose("sign", keypair.verification_key, V1_PUBLIC.header)

    def test_verify_rejects_signing_key(self, keypair: KeyPair) -> None:
        with pytest.raises(KeyPurposeError, match="usage 'sign' cannot be used to verify"):
            check_key_purpose("verify", keypair.signing_key, V1_PUBLIC.header)

    def test_rejects_key_for_other_protocol(self, keypair: KeyPair) -> None:
        with pytest.raises(KeyPurposeError, match="cannot be used with 'v2.public'"):
            check_key_purpose("verify", keypair.verification_key, "v2.public")

    def test_rejects_mislabelled_material(self, keypair: KeyPair) -> None:
        """The usage tag alone is not trusted; the material is checked too."""
        forged = TokenKey(
            keypair.verification_key.material, KeyUsage.SIGN, V1_PUBLIC.header, V1_PUBLIC.params
        )
        with pytest.raises(KeyPurposeError, match="Key material is not valid to sign"):
            check_key_purpose("sign", forged, V1_PUBLIC.header)

    def test_rejects_wrong_modulus_size(self) -> None:
        small = rsa.generate_private_key(public_exponent=65537, key_size=1024)
        key = TokenKey(small, KeyUsage.SIGN, V1_PUBLIC.header, V1_PUBLIC.params)
        with pytest.raises(KeyPurposeError, match="Invalid RSA modulus size: 1024"):
            check_key_purpose("sign", key, V1_PUBLIC.header)

    def test_rejects_non_token_key(self) -> None:
        with pytest.raises(KeyPurposeError, match="Expected a TokenKey"):
            check_key_purpose("encrypt", b"\x00" * 32, V1_LOCAL.header)  # type: ignore[arg-type]

    def test_local_key_for_encrypt_and_decrypt(self) -> None:
        key = generate_secret_key(V1_LOCAL.header, V1_LOCAL.params)
        assert check_key_purpose("encrypt", key, V1_LOCAL.header) is key
        assert check_key_purpose("decrypt", key, V1_LOCAL.header) is key

    def test_local_key_wrong_length(self) -> None:
        key = TokenKey(b"short", KeyUsage.LOCAL, V1_LOCAL.header, V1_LOCAL.params)
        with pytest.raises(KeyPurposeError, match="not valid to encrypt"):
            check_key_purpose("encrypt", key, V1_LOCAL.header)

    def test_local_key_cannot_sign(self) -> None:
        key = generate_secret_key(V1_LOCAL.header, V1_LOCAL.params)
        with pytest.raises(KeyPurposeError):
            check_key_purpose("sign", key, V1_LOCAL.header)

    def test_repr_hides_material(self, keypair: KeyPair) -> None:
        assert "PRIVATE" not in repr(keypair.signing_key)
        assert repr(keypair.signing_key) == "TokenKey(usage='sign', protocol='v1.public')"


class TestSignature:
    """Tests for the RSA-PSS adapter."""

    def test_signature_length(self, keypair: KeyPair) -> None:
        signature = sign_message(b"message", keypair.signing_key)
        assert len(signature) == V1_PUBLIC_SIGNATURE_SIZE

    def test_signatures_are_randomized(self, keypair: KeyPair) -> None:
        """PSS uses a random salt, so two signatures differ."""
        assert sign_message(b"m", keypair.signing_key) != sign_message(b"m", keypair.signing_key)

    def test_verify_valid(self, keypair: KeyPair) -> None:
        signature = sign_message(b"message", keypair.signing_key)
        assert verify_message(b"message", signature, keypair.verification_key) is True

    def test_verify_other_message(self, keypair: KeyPair) -> None:
        signature = sign_message(b"message", keypair.signing_key)
        assert verify_message(b"massage", signature, keypair.verification_key) is False

    def test_verify_other_key(self, keypair: KeyPair, other_keypair: KeyPair) -> None:
        signature = sign_message(b"message", keypair.signing_key)
        assert verify_message(b"message", signature, other_keypair.verification_key) is False

    def test_salt_length_is_48(self, keypair: KeyPair) -> None:
        """Signatures carry a 48-byte PSS salt with MGF1-SHA384."""
        signature = sign_message(b"message", keypair.signing_key)
        keypair.verification_key.material.verify(
            signature,
            b"message",
            padding.PSS(mgf=padding.MGF1(hashes.SHA384()), salt_length=48),
            hashes.SHA384(),
        )

    def test_missing_salt_length_is_rejected(self, keypair: KeyPair) -> None:
        params = replace(V1_PUBLIC.params, salt_length=None)
        key = replace(keypair.signing_key, params=params)
        with pytest.raises(ValueError, match="salt length"):
            sign_message(b"message", key)

    def test_generated_public_exponent(self, keypair: KeyPair) -> None:
        assert keypair.verification_key.material.public_numbers().e == 65537

    def test_missing_public_exponent_is_rejected(self) -> None:
        params = replace(V1_PUBLIC.params, public_exponent=None)
        with pytest.raises(ValueError, match="public exponent"):
            generate_keypair(V1_PUBLIC.header, params)


class TestLocalCipher:
    """Tests for the local encrypt-then-MAC primitives."""

    def test_nonce_is_deterministic_for_seed(self) -> None:
        seed = b"\x01" * 32
        assert get_nonce(b"m", seed) == get_nonce(b"m", seed)
        assert len(get_nonce(b"m", seed)) == V1_LOCAL_NONCE_SIZE

    def test_nonce_depends_on_message(self) -> None:
        seed = b"\x01" * 32
        assert get_nonce(b"m1", seed) != get_nonce(b"m2", seed)

    def test_derived_keys_differ(self) -> None:
        encryption_key, authentication_key = derive_keys(b"\x02" * 32, b"\x03" * 32)
        assert len(encryption_key) == 32
        assert len(authentication_key) == 32
        assert encryption_key != authentication_key

    def test_ctr_round_trip(self) -> None:
        key, nonce = b"\x04" * 32, b"\x05" * 32
        ciphertext = aes_ctr(key, nonce, b"plaintext")
        assert ciphertext != b"plaintext"
        assert aes_ctr(key, nonce, ciphertext) == b"plaintext"

    def test_tags_match(self) -> None:
        assert tags_match(b"abc", b"abc") is True
        assert tags_match(b"abc", b"abd") is False
