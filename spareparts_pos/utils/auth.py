# spareparts_pos/utils/auth.py
from __future__ import annotations

import hmac
from typing import Callable, Optional, Tuple, Union

import bcrypt

# ---- bcrypt defaults / policy ----
BCRYPT_ROUNDS = 12          # used when hashing; tests lower this for speed
_BCRYPT_MIN_ROUNDS = 4      # lowest cost bcrypt itself accepts
_BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")


def _is_bcrypt(hash_str: str) -> bool:
    return hash_str.startswith(_BCRYPT_PREFIXES)


def _parse_bcrypt_cost(hash_str: str) -> int | None:
    """
    Extract the cost from a bcrypt hash: $2b$12$...
    Returns None if not parseable.
    """
    parts = hash_str.split("$")
    # ['', '2b', '12', 'rest...']
    if len(parts) < 4:
        return None
    try:
        return int(parts[2])
    except ValueError:
        return None


def _as_text(stored_hash: Union[str, bytes, None]) -> str:
    if stored_hash is None:
        return ""
    if isinstance(stored_hash, bytes):
        try:
            stored_hash = stored_hash.decode("utf-8")
        except UnicodeDecodeError:
            return ""
    return stored_hash.strip()


# ------------------------------- Public API -------------------------------

def hash_password(password: str, *, rounds: Optional[int] = None) -> str:
    """
    Hash `password` with bcrypt. `rounds` defaults to BCRYPT_ROUNDS and is
    clamped to bcrypt's minimum.
    """
    if not isinstance(password, str) or password == "":
        raise ValueError("Password must be a non-empty string")
    cost = BCRYPT_ROUNDS if rounds is None else int(rounds)
    cost = max(cost, _BCRYPT_MIN_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(cost)).decode("utf-8")


def verify_password(password: str, stored_hash: Union[str, bytes, None]) -> bool:
    """
    Verify `password` against `stored_hash`.

    Supports bcrypt hashes and, for databases created by earlier
    releases, legacy plaintext values (compared in constant time).
    """
    if password is None:
        return False
    h = _as_text(stored_hash)
    if not h:
        return False
    if _is_bcrypt(h):
        try:
            return bcrypt.checkpw(password.encode("utf-8"), h.encode("utf-8"))
        except ValueError:
            return False
    return hmac.compare_digest(password.encode("utf-8"), h.encode("utf-8"))


def needs_rehash(stored_hash: Union[str, bytes, None], *, min_rounds: Optional[int] = None) -> bool:
    """
    True if the stored value should be replaced: legacy plaintext, malformed
    bcrypt, or bcrypt with a cost below `min_rounds` (default BCRYPT_ROUNDS).
    """
    h = _as_text(stored_hash)
    if not h or not _is_bcrypt(h):
        return True
    cost = _parse_bcrypt_cost(h)
    floor = BCRYPT_ROUNDS if min_rounds is None else min_rounds
    return cost is None or cost < floor


def verify_and_maybe_upgrade(
    password: str,
    stored_hash: Union[str, bytes, None],
    *,
    on_rehash: Optional[Callable[[str], None]] = None,
) -> Tuple[bool, Optional[str]]:
    """
    Verify the password and, if policy recommends, produce an upgraded hash.

    Returns (ok, new_hash_or_None). When a new hash is produced it is also
    passed to `on_rehash` so the caller can persist it.
    """
    if not verify_password(password, stored_hash):
        return False, None
    if not needs_rehash(stored_hash):
        return True, None
    new_hash = hash_password(password)
    if on_rehash is not None:
        on_rehash(new_hash)
    return True, new_hash
