import uuid
from datetime import timedelta

import jwt
import pytest

from finance_api.core.config import Settings, settings
from finance_api.core.security import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)


def test_password_hash_round_trip():
    hashed = get_password_hash("secret123")
    assert hashed != "secret123"
    assert hashed.startswith("$2b$")
    assert verify_password("secret123", hashed)
    assert not verify_password("secret124", hashed)


def test_default_bcrypt_cost_and_token_lifetime():
    assert Settings.model_fields["BCRYPT_ROUNDS"].default == 12
    assert Settings.model_fields["ACCESS_TOKEN_EXPIRE_MINUTES"].default == 7 * 24 * 60


def test_token_carries_user_id_and_expiry():
    user_id = uuid.uuid4()
    token = create_access_token(str(user_id))
    assert decode_access_token(token) == user_id

    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    assert payload["exp"] - payload["iat"] == settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60


def test_expired_token_is_rejected():
    token = create_access_token(str(uuid.uuid4()), expires_delta=timedelta(minutes=-1))
    with pytest.raises(jwt.ExpiredSignatureError):
        decode_access_token(token)


def test_token_signed_with_other_key_is_rejected():
    token = jwt.encode({"sub": str(uuid.uuid4()), "exp": 9999999999}, "another-secret-key-of-decent-length!", algorithm="HS256")
    with pytest.raises(jwt.InvalidSignatureError):
        decode_access_token(token)


def test_token_with_non_uuid_subject_is_rejected():
    token = create_access_token("not-a-uuid")
    with pytest.raises(ValueError):
        decode_access_token(token)
