"""Tests for credential resolution, session storage and tabs."""

import json

import pytest

from storefront.core.config import Settings
from storefront.core.session import Browser, CredentialKind, SessionContext
from storefront.core.storage import DurableStore, EphemeralStore, StorageEvent
from storefront.models.auth import UserProfile


@pytest.fixture
def session(config) -> SessionContext:
    return SessionContext(durable=DurableStore(), config=config)


def _user() -> UserProfile:
    return UserProfile(id="u1", email="shopper@example.com", full_name="Sam Shopper")


class TestCredentialResolution:
    def test_guest_credential_without_token(self, session):
        credential = session.resolve_credential()
        headers = credential.to_headers()

        assert credential.kind == CredentialKind.GUEST
        assert headers == {"x-guest-id": session.get_guest_id()}
        assert "Authorization" not in headers

    def test_bearer_credential_with_token(self, session):
        session.save_auth("tok-123", _user())
        headers = session.resolve_credential().to_headers()

        assert headers == {"Authorization": "Bearer tok-123"}
        assert "x-guest-id" not in headers

    def test_back_to_guest_after_clearing(self, session):
        guest_id = session.get_guest_id()
        session.save_auth("tok-123", _user())
        session.clear_auth()

        assert session.resolve_credential().to_headers() == {"x-guest-id": guest_id}


class TestGuestIdentity:
    def test_guest_id_is_stable_within_tab(self, session):
        assert session.get_guest_id() == session.get_guest_id()

    def test_guest_id_is_created_lazily(self, session):
        assert session.ephemeral.get(session.config.guest_id_key) is None
        guest_id = session.get_guest_id()
        assert session.ephemeral.get(session.config.guest_id_key) == guest_id

    def test_regenerate_never_reuses(self, session):
        seen = {session.get_guest_id()}
        for _ in range(20):
            new_id = session.regenerate_guest_id()
            assert new_id not in seen
            seen.add(new_id)
        assert session.get_guest_id() == new_id

    def test_tabs_have_separate_guest_ids(self, browser):
        first = browser.open_tab()
        second = browser.open_tab()
        assert first.get_guest_id() != second.get_guest_id()

    def test_tabs_share_bearer_token(self, browser):
        first = browser.open_tab()
        second = browser.open_tab()
        first.save_auth("tok-123", _user())

        assert second.get_token() == "tok-123"
        assert second.get_user().email == "shopper@example.com"

    def test_closing_tab_drops_guest_id(self, browser):
        tab = browser.open_tab()
        tab.get_guest_id()
        assert browser.close_tab(tab.tab_id) is True
        assert tab.ephemeral.get(tab.config.guest_id_key) is None
        assert browser.close_tab(tab.tab_id) is False


class TestStoredProfile:
    def test_profile_round_trips_through_store(self, session):
        session.save_auth("tok", _user())
        user = session.get_user()
        assert user.id == "u1"
        assert user.display_name == "Sam Shopper"

    def test_unreadable_profile_is_ignored(self, session):
        session.durable.set(session.config.user_key, "{not json")
        assert session.get_user() is None

    def test_numeric_user_id_is_accepted(self):
        user = UserProfile.model_validate({"id": 42, "email": "a@b.co", "name": "Al"})
        assert user.id == "42"
        assert user.full_name == "Al"


class TestRedirectToLogin:
    def test_redirects_from_other_pages(self, session):
        session.navigate("/cart")
        session.redirect_to_login()
        assert session.location == "/login"

    @pytest.mark.parametrize("path", ["/login", "/register", "/register?next=/cart"])
    def test_stays_on_auth_entry_points(self, session, path):
        session.navigate(path)
        session.redirect_to_login()
        assert session.location == path


class TestDurableStore:
    def test_other_tabs_are_notified(self):
        store = DurableStore()
        events: list[StorageEvent] = []
        store.subscribe(events.append, tab_id="tab-b")

        store.set("greenshoes_token", "abc", origin="tab-a")
        store.remove("greenshoes_token", origin="tab-a")

        assert [(e.key, e.old_value, e.new_value) for e in events] == [
            ("greenshoes_token", None, "abc"),
            ("greenshoes_token", "abc", None),
        ]

    def test_writer_is_not_notified(self):
        store = DurableStore()
        events = []
        store.subscribe(events.append, tab_id="tab-a")
        store.set("greenshoes_token", "abc", origin="tab-a")
        assert events == []

    def test_unchanged_value_is_silent(self):
        store = DurableStore()
        store.set("k", "v")
        events = []
        store.subscribe(events.append)
        store.set("k", "v")
        store.remove("missing")
        assert events == []

    def test_unsubscribe(self):
        store = DurableStore()
        events = []
        subscription = store.subscribe(events.append)
        subscription.unsubscribe()
        subscription.unsubscribe()
        store.set("k", "v")
        assert events == []

    def test_failing_listener_does_not_block_others(self):
        store = DurableStore()
        events = []

        def broken(event):
            raise RuntimeError("listener bug")

        store.subscribe(broken)
        store.subscribe(events.append)
        store.set("k", "v")
        assert len(events) == 1

    def test_persists_to_file(self, tmp_path):
        path = tmp_path / "storage.json"
        store = DurableStore(str(path))
        store.set("greenshoes_token", "abc")

        assert json.loads(path.read_text()) == {"greenshoes_token": "abc"}
        assert DurableStore(str(path)).get("greenshoes_token") == "abc"

    def test_corrupt_file_starts_empty(self, tmp_path):
        path = tmp_path / "storage.json"
        path.write_text("][")
        assert DurableStore(str(path)).keys() == []

    def test_browser_uses_configured_path(self, tmp_path):
        config = Settings(storage_path=str(tmp_path / "s.json"))
        browser = Browser(config=config)
        browser.open_tab().save_auth("tok", _user())

        reopened = Browser(config=config)
        assert reopened.open_tab().get_token() == "tok"


class TestEphemeralStore:
    def test_basic_operations(self):
        store = EphemeralStore()
        store.set("a", "1")
        assert store.get("a") == "1"
        store.remove("a")
        store.remove("a")
        assert store.get("a") is None
