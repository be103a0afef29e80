"""HTTP digest authentication with per-client sessions."""

from __future__ import annotations

import enum
import hashlib
import os
import re
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional

SESSION_TIMEOUT = 600
_HEADER_LIMIT = 99
_NC_PATTERN = re.compile(r"\s*([+-]?)(?:0[xX])?([0-9a-fA-F]*)")
_METHODS = ("GET", "POST", "PUT", "DELETE")


class AuthLevel(enum.Enum):
    """Authorization level a request must satisfy."""

    ADMIN = "admin"
    USER = "user"
    NONE = "none"


@dataclass
class AuthSession:
    """An outstanding digest challenge issued to one client."""

    ip: str
    last_used: int
    nonce: bytes = field(default_factory=lambda: os.urandom(16))
    nc: int = 0


def extract_param(auth_req: str, param: str) -> str:
    """Return the value of ``param`` in a digest header, or an empty string."""
    begin = auth_req.find(param)
    if begin == -1:
        return ""
    begin += len(param)
    if auth_req[begin:begin + 1] == '"':
        begin += 1
        delim = '"'
    else:
        delim = ","
    end = auth_req.find(delim, begin)
    if end == -1:
        end = len(auth_req)
    return auth_req[begin:end]


def calc_h1(username: str, realm: str, password: str) -> str:
    """Return the digest H1 value md5("user:realm:password") as hex."""
    return _md5(f"{username}:{realm}:{password}")


def _md5(text: str) -> str:
    return hashlib.md5(text.encode("utf-8")).hexdigest()


def _parse_nc(nc: str) -> int:
    match = _NC_PATTERN.match(nc)
    sign, digits = match.group(1), match.group(2)
    if not digits:
        return 0
    value = int(digits, 16)
    return -value if sign == "-" else value


class DigestAuthenticator:
    """Validates digest Authorization headers against stored password digests."""

    def __init__(self, device_name: str, clock: Optional[Callable[[], int]] = None):
        self.device_name = device_name
        self.clock = clock or (lambda: int(time.time()))
        self.admin_h1: Optional[bytes] = None
        self.user_h1: Optional[bytes] = None
        self.sessions: list[AuthSession] = []

    def authenticate(self, level: AuthLevel, method: str, header: Optional[str]) -> bool:
        """Return True if the request with this Authorization header is allowed."""
        if self.admin_h1 is None or level is AuthLevel.NONE:
            return True
        if header is None or not header.startswith("Digest"):
            return False
        auth_req = header[7:]
        username = extract_param(auth_req, "username=")
        realm = extract_param(auth_req, "realm=")
        nonce = extract_param(auth_req, "nonce=")
        uri = extract_param(auth_req, "uri=")
        response = extract_param(auth_req, "response=")
        nc = extract_param(auth_req, "nc=")
        cnonce = extract_param(auth_req, "cnonce=")
        qop = extract_param(auth_req, "qop=")

        if not (realm and nonce and uri and response and cnonce):
            return False
        if level is AuthLevel.ADMIN and username != "admin":
            return False

        session = self.get_session(nonce, nc)
        if session is None:
            return False

        h1_bytes = self.user_h1 if username == "user" else self.admin_h1
        if h1_bytes is None:
            return False
        h1 = h1_bytes.hex()

        verb = method.upper() if method and method.upper() in _METHODS else "GET"
        h2 = _md5(f"{verb}:{uri}")
        if qop == "auth":
            expected = _md5(f"{h1}:{nonce}:{nc}:{cnonce}:auth:{h2}")
        else:
            expected = _md5(f"{h1}:{nonce}:{h2}")

        if response == expected:
            session.last_used = self.clock()
            return True
        return False

    def challenge(self, remote_ip: str) -> str:
        """Open a session for the client and return the WWW-Authenticate value."""
        session = self.new_session(remote_ip)
        value = (
            f'Digest realm="{self.device_name}",qop="auth",'
            f'nonce="{session.nonce.hex()}"'
        )
        return value[:_HEADER_LIMIT]

    def new_session(self, remote_ip: str) -> AuthSession:
        """Create a session, dropping used sessions from the same address."""
        self.sessions = [
            s for s in self.sessions if not (s.ip == remote_ip and s.nc > 0)
        ]
        session = AuthSession(ip=remote_ip, last_used=self.clock())
        self.sessions.append(session)
        return session

    def get_session(self, nonce: str, nc: str) -> Optional[AuthSession]:
        """Find the session for a nonce whose count advances, updating its count."""
        if not self.sessions or len(nonce) != 32 or not nc:
            return None
        self.purge_sessions()
        try:
            nonce_bytes = bytes.fromhex(nonce)
        except ValueError:
            return None
        count = _parse_nc(nc)
        for session in self.sessions:
            if session.nonce == nonce_bytes and session.nc < count:
                session.nc = count
                return session
        return None

    def purge_sessions(self) -> None:
        """Drop sessions unused for longer than the timeout."""
        now = self.clock()
        self.sessions = [
            s for s in self.sessions if s.last_used + SESSION_TIMEOUT >= now
        ]

    def session_count(self) -> int:
        """Number of sessions currently held."""
        return len(self.sessions)

    def set_passwords(self, admin_password: Optional[str], user_password: Optional[str] = None) -> None:
        """Store digests of the admin and optional user passwords."""
        if admin_password is None:
            self.admin_h1 = None
            self.user_h1 = None
            return
        self.admin_h1 = bytes.fromhex(calc_h1("admin", self.device_name, admin_password))
        if user_password is None:
            self.user_h1 = None
        else:
            self.user_h1 = bytes.fromhex(calc_h1("user", self.device_name, user_password))

    def save_passwords(self, path: str | os.PathLike) -> None:
        """Write the password digests to ``path``; remove it if none are set."""
        target = Path(path)
        target.unlink(missing_ok=True)
        if self.admin_h1 is None:
            return
        text = self.admin_h1.hex()
        if self.user_h1 is not None:
            text += self.user_h1.hex()
        target.write_text(text, encoding="ascii")

    def load_passwords(self, path: str | os.PathLike) -> None:
        """Load password digests from ``path``; a missing file clears them."""
        self.admin_h1 = None
        self.user_h1 = None
        try:
            text = Path(path).read_text(encoding="ascii")
        except FileNotFoundError:
            return
        if len(text) >= 32:
            self.admin_h1 = bytes.fromhex(text[:32])
        if len(text) >= 64:
            self.user_h1 = bytes.fromhex(text[32:64])