"""Unit tests for access-token issue/verify (HS256 and RS256), invalid signature, expiration."""

from datetime import timedelta
from unittest.mock import patch

import pytest
from jose import jwt

from app.config import settings
from app.core.exceptions import AuthenticationError
from app.core.tokens import TokenConfig, TokenIssuer


def _issuer(clock, **overrides) -> TokenIssuer:
    config = TokenConfig(
        signing_key=overrides.get("signing_key", "unit-test-secret"),
        verification_key=overrides.get("verification_key", "unit-test-secret"),
        algorithm="HS256",
        ttl=timedelta(minutes=15),
        issuer="blog-backend",
    )
    return TokenIssuer(config, clock=clock)


def test_issue_and_verify_roundtrip_hs256(clock):
    issuer = _issuer(clock)
    issued = issuer.issue("user-42")
    assert isinstance(issued.token, str)
    assert issued.expires_at == clock.now + timedelta(minutes=15)
    assert issuer.verify(issued.token) == "user-42"
    payload = issuer.decode(issued.token)
    assert payload["sub"] == "user-42"
    assert payload["type"] == "access"
    assert payload["exp"] - payload["iat"] == 15 * 60


def test_verify_invalid_signature_raises(clock):
    issuer = _issuer(clock)
    token = issuer.issue("u1").token
    # Tamper: replace one character so signature is invalid
    bad_token = token[:-1] + ("x" if token[-1] != "x" else "y")
    with pytest.raises(AuthenticationError):
        issuer.verify(bad_token)


def test_verify_expired_token_raises(clock):
    issuer = _issuer(clock)
    token = issuer.issue("u1").token
    clock.advance(minutes=15, seconds=1)
    with pytest.raises(AuthenticationError) as exc:
        issuer.verify(token)
    assert exc.value.code == "TOKEN_EXPIRED"


def test_verify_just_before_expiry_passes(clock):
    issuer = _issuer(clock)
    token = issuer.issue("u1").token
    clock.advance(minutes=14, seconds=59)
    assert issuer.verify(token) == "u1"


def test_verify_wrong_key_raises(clock):
    token = _issuer(clock).issue("u1").token
    other = _issuer(clock, signing_key="other-secret", verification_key="other-secret")
    with pytest.raises(AuthenticationError):
        other.verify(token)


def test_verify_malformed_token_raises(clock):
    with pytest.raises(AuthenticationError):
        _issuer(clock).verify("not-a-jwt")


def test_verify_rejects_non_access_token(clock):
    """A token signed with the right key but without type=access is not an access token."""
    payload = {
        "iss": "blog-backend",
        "sub": "u1",
        "exp": int((clock.now + timedelta(minutes=5)).timestamp()),
        "type": "refresh",
    }
    token = jwt.encode(payload, "unit-test-secret", algorithm="HS256")
    with pytest.raises(AuthenticationError):
        _issuer(clock).verify(token)


def test_verify_rejects_missing_subject(clock):
    payload = {
        "iss": "blog-backend",
        "exp": int((clock.now + timedelta(minutes=5)).timestamp()),
        "type": "access",
    }
    token = jwt.encode(payload, "unit-test-secret", algorithm="HS256")
    with pytest.raises(AuthenticationError):
        _issuer(clock).verify(token)


def test_config_from_settings_defaults_to_hs256_with_secret_key():
    config = TokenConfig.from_settings(settings)
    assert config.algorithm == settings.jwt_algorithm
    assert config.signing_key == settings.secret_key
    assert config.ttl == timedelta(minutes=settings.access_token_expire_minutes)


def test_issue_and_verify_roundtrip_rs256(clock):
    """When RSA keys are set (mocked), sign with private key and verify with public key."""
    from cryptography.hazmat.primitives.asymmetric import rsa
    from cryptography.hazmat.primitives import serialization

    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("utf-8")
    public_pem = (
        key.public_key()
        .public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
        .decode("utf-8")
    )
    with patch.object(settings, "jwt_private_key", private_pem):
        with patch.object(settings, "jwt_public_key", public_pem):
            config = TokenConfig.from_settings(settings)
    assert config.algorithm == "RS256"
    issuer = TokenIssuer(config, clock=clock)
    token = issuer.issue("rs-user").token
    assert issuer.verify(token) == "rs-user"


def test_validate_jwt_config_rejects_half_rsa_pair_in_production():
    with patch.object(settings, "app_env", "production"):
        with patch.object(settings, "jwt_private_key", "-----BEGIN KEY-----"):
            with pytest.raises(RuntimeError):
                settings.validate_jwt_config()


def test_validate_jwt_config_rejects_default_secret_in_production():
    with patch.object(settings, "app_env", "production"):
        with patch.object(settings, "secret_key", "change-me-in-production"):
            with pytest.raises(RuntimeError):
                settings.validate_jwt_config()
