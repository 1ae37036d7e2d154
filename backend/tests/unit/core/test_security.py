"""
Unit Tests for Security Module
Tests for: access tokens, principal extraction
"""
import pytest
from datetime import timedelta
from jose import jwt

from internship.core.config import settings
from internship.core.exceptions import UnauthorizedError
from internship.core.security import (
    Principal,
    PrincipalRole,
    create_access_token,
    create_principal_token,
    decode_token,
    principal_from_token,
)


class TestAccessTokens:
    """Test JWT creation and decoding"""

    def test_create_access_token_sets_type_and_expiry(self):
        token = create_access_token({"sub": "s-1", "email": "a@b.edu", "role": "student"})
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])

        assert payload["type"] == "access"
        assert payload["sub"] == "s-1"
        assert "exp" in payload

    def test_decode_token_roundtrip(self):
        token = create_principal_token("a@b.edu", "staff", "staff-1")

        payload = decode_token(token)

        assert payload["email"] == "a@b.edu"
        assert payload["role"] == "staff"

    def test_expired_token_rejected(self):
        token = create_principal_token("a@b.edu", "staff", "staff-1", expires_delta=timedelta(seconds=-10))

        with pytest.raises(UnauthorizedError) as exc_info:
            decode_token(token)

        assert exc_info.value.message == "Token has expired"
        assert exc_info.value.status_code == 401

    def test_token_signed_with_other_key_rejected(self):
        token = jwt.encode({"email": "a@b.edu", "role": "staff", "type": "access"}, "another-key", algorithm="HS256")

        with pytest.raises(UnauthorizedError):
            decode_token(token)

    def test_garbage_token_rejected(self):
        with pytest.raises(UnauthorizedError):
            decode_token("not-a-jwt")


class TestPrincipalFromToken:
    """Test building the request principal"""

    def test_valid_student_token(self):
        token = create_principal_token("21mx101@psgtech.ac.in", "student", "stu-1")

        principal = principal_from_token(token)

        assert principal == Principal(email="21mx101@psgtech.ac.in", role="student", subject_id="stu-1")
        assert principal.is_student
        assert not principal.is_staff
        assert not principal.is_admin

    def test_staff_and_admin_flags(self):
        staff = principal_from_token(create_principal_token("t1@psgtech.ac.in", "staff", "t-1"))
        admin = principal_from_token(create_principal_token("root@psgtech.ac.in", "admin", "a-1"))

        assert staff.is_staff
        assert admin.is_admin

    def test_refresh_type_rejected(self):
        token = jwt.encode(
            {"email": "a@b.edu", "role": "staff", "type": "refresh"},
            settings.JWT_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM,
        )

        with pytest.raises(UnauthorizedError) as exc_info:
            principal_from_token(token)

        assert exc_info.value.message == "Invalid token type"

    def test_missing_email_rejected(self):
        token = create_access_token({"sub": "x", "role": "student"})

        with pytest.raises(UnauthorizedError):
            principal_from_token(token)

    def test_unknown_role_rejected(self):
        token = create_principal_token("a@b.edu", "visitor", "x")

        with pytest.raises(UnauthorizedError) as exc_info:
            principal_from_token(token)

        assert "visitor" in exc_info.value.message

    def test_roles_enum_values(self):
        assert {r.value for r in PrincipalRole} == {"student", "staff", "admin"}
