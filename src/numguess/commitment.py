"""One-way commitments for player secrets.

A player's secret is stored as a SHA-256 digest so that guesses can be checked
without comparing raw strings.

"""
import hashlib
import hmac


def commit(secret: str) -> str:
    """Return the hex digest committing to ``secret``."""
    return hashlib.sha256(str(secret).encode('utf-8')).hexdigest()


def matches(candidate: str, digest: str) -> bool:
    """Check whether ``candidate`` commits to the stored ``digest``.

    Only digests are compared, in constant time.

    """
    if not digest:
        return False
    return hmac.compare_digest(commit(candidate), digest)
