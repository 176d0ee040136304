from datetime import UTC, datetime, timedelta

from vibe_magazine.adapters.auth.tokens import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)
from vibe_magazine.adapters.clock import FixedClock, SystemClock


class TestPasswordHashing:
    def test_hash_is_argon2(self) -> None:
        hashed = get_password_hash("s3cret-pass")
        assert hashed.startswith("$argon2")
        assert hashed != "s3cret-pass"

    def test_verify(self) -> None:
        hashed = get_password_hash("s3cret-pass")
        assert verify_password("s3cret-pass", hashed) is True
        assert verify_password("wrong", hashed) is False


class TestAccessTokens:
    def test_round_trip_claims(self) -> None:
        token = create_access_token("user-1", extra_claims={"email": "a@vibe.test"})

        payload = decode_access_token(token)

        assert payload is not None
        assert payload["sub"] == "user-1"
        assert payload["email"] == "a@vibe.test"

    def test_expired_token_rejected(self) -> None:
        issued = datetime.now(UTC) - timedelta(hours=2)

        token = create_access_token("user-1", expires_delta=timedelta(minutes=5), now_utc=issued)

        assert decode_access_token(token) is None

    def test_tampered_token_rejected(self) -> None:
        token = create_access_token("user-1")
        assert decode_access_token(token[:-2] + "xx") is None

    def test_garbage_rejected(self) -> None:
        assert decode_access_token("not-a-jwt") is None


class TestClocks:
    def test_system_clock_is_utc(self) -> None:
        assert SystemClock().now_utc().tzinfo is UTC

    def test_fixed_clock_assumes_utc_for_naive(self) -> None:
        clock = FixedClock(datetime(2026, 10, 19, 8, 0))
        assert clock.now_utc() == datetime(2026, 10, 19, 8, 0, tzinfo=UTC)
