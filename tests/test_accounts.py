"""Tests for customer accounts and admin credentials."""

import pytest

from storefront.accounts import (
    authenticate,
    check_admin_credentials,
    hash_password,
    pwd_context,
    register_user,
    verify_password,
)
from storefront.errors import (
    InvalidCredentialsError,
    InvalidRegistrationError,
    UserExistsError,
)


class TestPasswordHashing:
    def test_verify_round_trip(self):
        stored = hash_password("s3cret!")

        assert verify_password("s3cret!", stored)
        assert not verify_password("wrong", stored)

    def test_salted(self):
        assert hash_password("same") != hash_password("same")

    def test_format(self):
        stored = hash_password("pw1234")

        assert stored.startswith("$scrypt$")
        assert "pw1234" not in stored
        assert pwd_context.identify(stored) == "scrypt"

    def test_hash_is_current(self):
        assert not pwd_context.needs_update(hash_password("pw1234"))

    @pytest.mark.parametrize("stored", [None, "", "nocolon", ":abc", "abc:", "$scrypt$garbage"])
    def test_malformed_hash_never_verifies(self, stored):
        assert verify_password("anything", stored) is False


class TestRegistration:
    def test_register_and_login(self, user_store):
        user = register_user(user_store, "Ada", "Ada@Example.com", "hunter22")

        assert user.id == 1
        assert user.email == "ada@example.com"
        assert user.password_hash != "hunter22"
        assert authenticate(user_store, "ADA@example.com", "hunter22").id == 1

    def test_duplicate_email(self, user_store):
        register_user(user_store, "Ada", "ada@example.com", "hunter22")

        with pytest.raises(UserExistsError):
            register_user(user_store, "Ada Two", " ADA@example.com ", "hunter22")

    @pytest.mark.parametrize("name,email,password", [
        ("", "a@b.co", "hunter22"),
        ("Ada", "", "hunter22"),
        ("Ada", "a@b.co", ""),
        ("Ada", "a@b.co", "short"),
    ])
    def test_invalid_fields(self, user_store, name, email, password):
        with pytest.raises(InvalidRegistrationError):
            register_user(user_store, name, email, password)

    def test_wrong_password(self, user_store):
        register_user(user_store, "Ada", "ada@example.com", "hunter22")

        with pytest.raises(InvalidCredentialsError):
            authenticate(user_store, "ada@example.com", "hunter23")

    def test_unknown_email(self, user_store):
        with pytest.raises(InvalidCredentialsError):
            authenticate(user_store, "nobody@example.com", "whatever")

    def test_public_dict_hides_hash(self, user_store):
        user = register_user(user_store, "Ada", "ada@example.com", "hunter22")
        assert "password_hash" not in user.to_public_dict()


class TestAdminCredentials:
    def test_match(self):
        assert check_admin_credentials("root", "pw", expected_user="root", expected_password="pw")

    def test_mismatch(self):
        assert not check_admin_credentials("root", "nope", expected_user="root", expected_password="pw")
        assert not check_admin_credentials("admin", "pw", expected_user="root", expected_password="pw")

    def test_defaults_from_config(self, monkeypatch):
        from storefront import config

        monkeypatch.setattr(config, "ADMIN_USER", "boss")
        monkeypatch.setattr(config, "ADMIN_PASSWORD", "letmein")

        assert check_admin_credentials("boss", "letmein")
        assert not check_admin_credentials("admin", "admin123")
