"""Application tests for sign-up, sessions and the address book via domain.process()."""

from datetime import UTC, datetime, timedelta

import pytest
from marketplace.errors import Conflict, Unauthorized
from marketplace.user.addresses import AddAddress
from marketplace.user.registration import SignUp
from marketplace.user.session import LogIn, LogOut, Session, UserIdentity, resolve
from marketplace.user.user import User
from protean import current_domain


class TestSignUpFlow:
    def test_sign_up_returns_user_and_session(self, sign_up):
        result = sign_up("jane")
        user = current_domain.repository_for(User).get(result["user_id"])
        assert user.username == "jane"
        assert resolve(result["session_id"]) == UserIdentity(
            user_id=result["user_id"], session_id=result["session_id"]
        )

    def test_duplicate_username_conflicts(self, sign_up):
        sign_up("jane")
        with pytest.raises(Conflict):
            current_domain.process(
                SignUp(username="jane", email="other@example.com", password="s3cret-pass"),
                asynchronous=False,
            )

    def test_duplicate_email_conflicts(self, sign_up):
        sign_up("jane")
        with pytest.raises(Conflict):
            current_domain.process(
                SignUp(username="janet", email="JANE@example.com", password="s3cret-pass"),
                asynchronous=False,
            )


class TestSessions:
    def test_log_in_with_correct_password(self, sign_up):
        user_id = sign_up("jane")["user_id"]
        session_id = current_domain.process(LogIn(username="jane", password="s3cret-pass"), asynchronous=False)
        assert resolve(session_id).user_id == user_id

    def test_log_in_with_wrong_password(self, sign_up):
        sign_up("jane")
        with pytest.raises(Unauthorized):
            current_domain.process(LogIn(username="jane", password="wrong-pass"), asynchronous=False)

    def test_log_in_unknown_user(self):
        with pytest.raises(Unauthorized):
            current_domain.process(LogIn(username="ghost", password="s3cret-pass"), asynchronous=False)

    def test_log_out_invalidates_session(self, sign_up):
        session_id = sign_up("jane")["session_id"]
        current_domain.process(LogOut(session_id=session_id), asynchronous=False)
        assert resolve(session_id) is None

    def test_log_out_unknown_session(self):
        with pytest.raises(Unauthorized):
            current_domain.process(LogOut(session_id="no-such-session"), asynchronous=False)

    def test_unknown_token_resolves_to_nothing(self):
        assert resolve("no-such-session") is None
        assert resolve(None) is None

    def test_expired_session_resolves_to_nothing(self, sign_up):
        user_id = sign_up("jane")["user_id"]
        stale = Session.start(user_id, now=datetime.now(UTC) - timedelta(days=30))
        current_domain.repository_for(Session).add(stale)
        assert resolve(stale.id) is None

    def test_log_in_purges_expired_sessions(self, sign_up):
        user_id = sign_up("jane")["user_id"]
        repo = current_domain.repository_for(Session)
        stale = Session.start(user_id, now=datetime.now(UTC) - timedelta(days=30))
        repo.add(stale)

        current_domain.process(LogIn(username="jane", password="s3cret-pass"), asynchronous=False)

        remaining = {str(s.id) for s in repo.for_user(user_id)}
        assert str(stale.id) not in remaining
        assert len(remaining) == 2


class TestAddressBook:
    def test_add_address(self, buyer, add_address):
        address_id = add_address(buyer)
        user = current_domain.repository_for(User).get(buyer)
        assert user.find_address(address_id).street == "1 Market Street"

    def test_label_defaults_to_home(self, buyer):
        address_id = current_domain.process(
            AddAddress(user_id=buyer, street="2 Elm", city="Springfield", postal_code="1", country="US"),
            asynchronous=False,
        )
        user = current_domain.repository_for(User).get(buyer)
        assert user.find_address(address_id).label == "Home"
