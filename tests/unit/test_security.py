from jose import jwt

from booking_calendar.config import settings
from booking_calendar.core.security import ALGO, create_access_token, entity_from_token


def test_token_round_trip():
    assert entity_from_token(create_access_token("artist-9")) == "artist-9"


def test_expired_token_is_rejected():
    assert entity_from_token(create_access_token("artist-9", expires_min=-1)) is None


def test_foreign_signature_is_rejected():
    token = jwt.encode({"sub": "artist-9"}, "another-secret", algorithm=ALGO)

    assert entity_from_token(token) is None


def test_token_type_is_checked_when_present():
    bare = jwt.encode({"sub": "artist-9"}, settings.SECRET_KEY, algorithm=ALGO)
    other = jwt.encode({"sub": "artist-9", "typ": "refresh"}, settings.SECRET_KEY, algorithm=ALGO)

    assert entity_from_token(bare) == "artist-9"
    assert entity_from_token(other) is None
