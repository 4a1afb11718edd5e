"""Unit tests for the user store."""
import pytest

from feature_board.errors import ConflictError, UnauthorizedError, ValidationError
from feature_board.services.user_store import UserStore, hash_password, verify_password


@pytest.fixture
def users():
    return UserStore()


class TestPasswords:
    """Test password hashing."""

    def test_hash_round_trip(self):
        """Test a hash verifies only its own password."""
        hashed = hash_password("secret123")
        assert hashed != "secret123"
        assert verify_password("secret123", hashed)
        assert not verify_password("secret124", hashed)

    def test_long_passwords_distinguished(self):
        """Test passwords beyond 72 bytes still differ."""
        base = "x" * 80
        hashed = hash_password(base + "a")
        assert not verify_password(base + "b", hashed)


class TestUserStore:
    """Test sign-up and login."""

    def test_create_and_authenticate(self, users):
        """Test a new user can log in with a case-insensitive email."""
        user = users.create_user("merchant_1", "Merchant@Example.com", "secret123")
        assert user.email == "merchant@example.com"
        assert users.authenticate("MERCHANT@example.com", "secret123").id == user.id
        assert users.find_by_email("merchant@example.com") == user

    def test_wrong_password(self, users):
        """Test a wrong password is unauthorized."""
        users.create_user("merchant_1", "m@example.com", "secret123")
        with pytest.raises(UnauthorizedError):
            users.authenticate("m@example.com", "nope-nope")

    def test_unknown_email(self, users):
        """Test an unknown email is unauthorized."""
        with pytest.raises(UnauthorizedError):
            users.authenticate("ghost@example.com", "secret123")

    @pytest.mark.parametrize("username,email,password", [
        ("", "m@example.com", "secret123"),
        ("merchant", "not-an-email", "secret123"),
        ("ab", "m@example.com", "secret123"),
        ("bad name!", "m@example.com", "secret123"),
        ("merchant", "m@example.com", "12345"),
    ])
    def test_invalid_signup(self, users, username, email, password):
        """Test malformed sign-up data is rejected."""
        with pytest.raises(ValidationError):
            users.create_user(username, email, password)

    def test_duplicate_email_or_username(self, users):
        """Test email and username are unique."""
        users.create_user("merchant", "m@example.com", "secret123")
        with pytest.raises(ConflictError):
            users.create_user("other", "M@example.com", "secret123")
        with pytest.raises(ConflictError):
            users.create_user("Merchant", "other@example.com", "secret123")
