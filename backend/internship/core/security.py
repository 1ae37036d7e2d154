from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Dict, Any
import enum

from jose import JWTError, ExpiredSignatureError, jwt

from internship.core.config import settings
from internship.core.exceptions import UnauthorizedError


class PrincipalRole(str, enum.Enum):
    """Roles carried by an access token"""
    STUDENT = "student"
    STAFF = "staff"
    ADMIN = "admin"


@dataclass(frozen=True)
class Principal:
    """Authenticated actor of a request, derived from a validated bearer token"""
    email: str
    role: str
    subject_id: str

    @property
    def is_student(self) -> bool:
        return self.role == PrincipalRole.STUDENT.value

    @property
    def is_staff(self) -> bool:
        return self.role == PrincipalRole.STAFF.value

    @property
    def is_admin(self) -> bool:
        return self.role == PrincipalRole.ADMIN.value


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token"""
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire, "type": "access"})
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_principal_token(email: str, role: str, subject_id: str,
                           expires_delta: Optional[timedelta] = None) -> str:
    """Mint an access token for a principal (used by the admin CLI and tests)"""
    return create_access_token(
        {"sub": subject_id, "email": email, "role": role},
        expires_delta=expires_delta,
    )


def decode_token(token: str) -> Dict[str, Any]:
    """Decode JWT token"""
    try:
        return jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise UnauthorizedError("Token has expired")
    except JWTError:
        raise UnauthorizedError("Could not validate credentials")


def principal_from_token(token: str) -> Principal:
    """Validate an access token and build the request principal"""
    payload = decode_token(token)

    if payload.get("type") != "access":
        raise UnauthorizedError("Invalid token type")

    email = payload.get("email")
    role = payload.get("role")
    if not email or not role:
        raise UnauthorizedError("Invalid token payload")

    if role not in {r.value for r in PrincipalRole}:
        raise UnauthorizedError(f"Unknown role '{role}'")

    return Principal(email=email, role=role, subject_id=str(payload.get("sub") or ""))
