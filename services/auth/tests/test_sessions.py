from __future__ import annotations

from datetime import timedelta

import jwt
import pytest

from dairy_auth.core.errors import ConflictError, ForbiddenError, NotFoundError, UnauthorizedError
from dairy_auth.db.models import RefreshToken
from dairy_auth.security.utils import now_utc, token_sha256

from conftest import JWT_TEST_SECRET


def _count_tokens(database) -> int:
    with database.session() as db:
        return db.query(RefreshToken).count()


def test_register_issues_one_stored_refresh_token(make_issuer, database) -> None:
    issued = make_issuer().register("Alice", "alice@x.com", "pass123")

    assert issued.user.role == "farmer"
    assert issued.refresh_expires_at > now_utc() + timedelta(days=6)
    assert _count_tokens(database) == 1


def test_register_duplicate_email_raises_conflict(make_issuer) -> None:
    issuer = make_issuer()
    issuer.register("Alice", "alice@x.com", "pass123")

    with pytest.raises(ConflictError):
        issuer.register("Alice Again", "alice@x.com", "pass456")


def test_login_wrong_password_raises_unauthorized(make_issuer) -> None:
    issuer = make_issuer()
    issuer.register("Alice", "alice@x.com", "pass123")

    with pytest.raises(UnauthorizedError):
        issuer.login("alice@x.com", "nope123")


def test_each_login_adds_a_refresh_row(make_issuer, database) -> None:
    issuer = make_issuer()
    issuer.register("Alice", "alice@x.com", "pass123")
    first = issuer.login("alice@x.com", "pass123")
    second = issuer.login("alice@x.com", "pass123")

    assert first.refresh_token != second.refresh_token
    assert _count_tokens(database) == 3


def test_refresh_deletes_consumed_row_and_inserts_new_one(make_issuer, database) -> None:
    issuer = make_issuer()
    issued = issuer.register("Alice", "alice@x.com", "pass123")

    rotated = issuer.refresh(issued.refresh_token)

    assert rotated.refresh_token != issued.refresh_token
    assert _count_tokens(database) == 1
    with database.session() as db:
        hashes = {row.token_hash for row in db.query(RefreshToken)}
    assert hashes == {token_sha256(rotated.refresh_token)}
    claims = jwt.decode(rotated.access_token, JWT_TEST_SECRET, algorithms=["HS256"])
    assert claims["id"] == issued.user.id


def test_refresh_without_token_is_unauthorized(make_issuer) -> None:
    with pytest.raises(UnauthorizedError):
        make_issuer().refresh(None)
    with pytest.raises(UnauthorizedError):
        make_issuer().refresh("")


def test_expired_refresh_token_is_forbidden_and_purged(make_issuer, database) -> None:
    issuer = make_issuer()
    issued = issuer.register("Alice", "alice@x.com", "pass123")
    with database.session() as db:
        db.query(RefreshToken).update({RefreshToken.expires_at: now_utc() - timedelta(seconds=1)})
        db.commit()

    with pytest.raises(ForbiddenError):
        make_issuer().refresh(issued.refresh_token)

    assert _count_tokens(database) == 0


def test_concurrent_refresh_of_one_token_has_single_winner(make_issuer, monkeypatch) -> None:
    issued = make_issuer().register("Alice", "alice@x.com", "pass123")
    winner, loser = make_issuer(), make_issuer()

    # The loser has already read the row when the winner deletes it.
    stale = loser._find_token(issued.refresh_token)
    assert stale is not None
    rotated = winner.refresh(issued.refresh_token)
    monkeypatch.setattr(loser, "_find_token", lambda presented: stale)

    with pytest.raises(ForbiddenError):
        loser.refresh(issued.refresh_token)

    # The loser must not have consumed the winner's freshly inserted row.
    assert make_issuer().refresh(rotated.refresh_token).refresh_token != rotated.refresh_token


def test_logout_is_idempotent(make_issuer, database) -> None:
    issuer = make_issuer()
    issued = issuer.register("Alice", "alice@x.com", "pass123")

    issuer.logout(issued.refresh_token)
    issuer.logout(issued.refresh_token)
    issuer.logout(None)

    assert _count_tokens(database) == 0
    with pytest.raises(ForbiddenError):
        issuer.refresh(issued.refresh_token)


def test_forgot_password(make_issuer) -> None:
    issuer = make_issuer()
    issued = issuer.register("Alice", "alice@x.com", "pass123")

    assert issuer.forgot_password("alice@x.com").id == issued.user.id
    with pytest.raises(NotFoundError):
        issuer.forgot_password("ghost@x.com")
