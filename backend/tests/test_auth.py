"""
Authentication tests.

Verifies:
- Sign-up validation messages
- Sign-in, restore and sign-out through AuthService
- Auth change notifications
- Session expiry and revocation
"""

from datetime import timedelta

import pytest

from medsupply.extensions import db
from medsupply.models import SessionToken
from medsupply.services import session_service
from medsupply.services.auth_service import AuthError, AuthService, hash_password, verify_password
from medsupply.time_utils import utcnow


class TestSignUp:
    def test_creates_user_and_session(self, app):
        user, token = AuthService().sign_up("Staff@Example.com ", "secret1")

        assert user.email == "staff@example.com"
        assert session_service.validate_session(token).user.id == user.id

    @pytest.mark.parametrize(
        "email,password,message",
        [
            ("not-an-email", "secret1", "Invalid email address"),
            ("", "secret1", "Invalid email address"),
            ("staff@example.com", "12345", "Password should be at least 6 characters"),
            ("staff@example.com", None, "Password should be at least 6 characters"),
        ],
    )
    def test_validation_messages(self, app, email, password, message):
        with pytest.raises(AuthError, match=message):
            AuthService().sign_up(email, password)

    def test_duplicate_email(self, app):
        auth = AuthService()
        auth.sign_up("staff@example.com", "secret1")

        with pytest.raises(AuthError, match="This email is already registered"):
            auth.sign_up("STAFF@example.com", "secret2")


class TestSignIn:
    def test_sign_in_updates_last_login(self, app):
        auth = AuthService()
        auth.sign_up("staff@example.com", "secret1")

        user, token = auth.sign_in("staff@example.com", "secret1")

        assert user.last_login_at is not None
        assert token

    @pytest.mark.parametrize(
        "email,password",
        [("staff@example.com", "wrong-pass"), ("nobody@example.com", "secret1")],
    )
    def test_bad_credentials(self, app, email, password):
        auth = AuthService()
        auth.sign_up("staff@example.com", "secret1")

        with pytest.raises(AuthError, match="Invalid email or password"):
            auth.sign_in(email, password)

    def test_password_hashing(self):
        hashed = hash_password("secret1")

        assert hashed != "secret1"
        assert verify_password("secret1", hashed)
        assert not verify_password("secret2", hashed)
        assert not verify_password("secret1", "not-a-bcrypt-hash")


class TestAuthChanges:
    def test_listener_gets_current_state_then_changes(self, app):
        auth = AuthService()
        seen = []
        unsubscribe = auth.on_auth_change(lambda user: seen.append(user.email if user else None))

        _, token = auth.sign_up("staff@example.com", "secret1")
        auth.sign_out(token)
        unsubscribe()
        auth.sign_in("staff@example.com", "secret1")

        assert seen == [None, "staff@example.com", None]

    def test_restore_resumes_session(self, app):
        first = AuthService()
        _, token = first.sign_up("staff@example.com", "secret1")

        # e.g. after a restart
        second = AuthService()
        assert second.restore(token).email == "staff@example.com"
        assert second.current_user is not None
        assert second.restore("unknown-token") is None
        assert second.current_user is None

    def test_close_drops_listeners(self, app):
        auth = AuthService()
        seen = []
        auth.on_auth_change(seen.append)
        auth.close()

        auth.sign_up("staff@example.com", "secret1")
        assert seen == [None]


class TestSessions:
    def test_revoked_session_is_invalid(self, app):
        _, token = AuthService().sign_up("staff@example.com", "secret1")

        assert session_service.revoke_session(token) is True
        assert session_service.validate_session(token) is None
        assert session_service.revoke_session("unknown") is False

    def test_expired_session_is_invalid(self, app):
        _, token = AuthService().sign_up("staff@example.com", "secret1")
        session = db.session.query(SessionToken).filter_by(token_hash=session_service.hash_token(token)).one()
        session.expires_at = utcnow() - timedelta(seconds=1)
        db.session.commit()

        assert session_service.validate_session(token) is None

    def test_sessions_last_thirty_days(self, app):
        session, _ = session_service.create_session(
            AuthService().sign_up("staff@example.com", "secret1")[0].id
        )

        assert session.expires_at - session.created_at == timedelta(days=30)

    def test_only_hash_is_stored(self, app):
        _, token = AuthService().sign_up("staff@example.com", "secret1")

        hashes = [s.token_hash for s in db.session.query(SessionToken).all()]
        assert token not in hashes
        assert session_service.hash_token(token) in hashes
