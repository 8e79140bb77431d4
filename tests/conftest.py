"""Shared test fixtures."""

import os

import pytest

# Tests must not pick up a developer's real CIF settings.
for _name in [n for n in os.environ if n.startswith("CIF_")]:
    del os.environ[_name]


@pytest.fixture(autouse=True)
def no_keychain(monkeypatch):
    """Keep tests away from the system keychain."""
    store: dict[tuple[str, str], str] = {}

    def get_password(service, username):
        return store.get((service, username))

    def set_password(service, username, password):
        store[(service, username)] = password

    def delete_password(service, username):
        import keyring.errors

        if (service, username) not in store:
            raise keyring.errors.PasswordDeleteError("not found")
        del store[(service, username)]

    monkeypatch.setattr("keyring.get_password", get_password)
    monkeypatch.setattr("keyring.set_password", set_password)
    monkeypatch.setattr("keyring.delete_password", delete_password)
    return store
