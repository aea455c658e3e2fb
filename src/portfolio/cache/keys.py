"""Cache key schema.

Key format: {prefix}:{namespace}:{kind}:{identifier}

- prefix: deployment namespace (``cache.prefix``, default "portfolio")
- namespace: "articles", "banners", "login", "admin"
- kind: "detail", "list", "ratelimit", "setup"
"""

from __future__ import annotations


def normalize_identity(identity: str) -> str:
    """Case-fold and trim a claimed identity (e-mail) before keying on it."""
    return identity.strip().lower()


class CacheKeys:
    """Builds every cache and counter key used by the service."""

    def __init__(self, prefix: str = "portfolio") -> None:
        self.prefix = prefix

    def detail_key(self, namespace: str, id_or_slug: str) -> str:
        """Key for a single entity, addressed by primary id or slug."""
        return f"{self.prefix}:{namespace}:detail:{id_or_slug}"

    def list_key(self, namespace: str, fingerprint: str) -> str:
        """Key for one collection query, addressed by its filter fingerprint."""
        return f"{self.prefix}:{namespace}:list:{fingerprint}"

    def list_pattern(self, namespace: str) -> str:
        """Pattern matching every list key of a namespace."""
        return f"{self.prefix}:{namespace}:list:*"

    def login_attempts(self, identity: str, client_address: str) -> str:
        """Failed-login counter keyed by identity and caller address together."""
        return (
            f"{self.prefix}:login:ratelimit:"
            f"{normalize_identity(identity)}:{client_address}"
        )

    def admin_setup_attempts(self, client_address: str) -> str:
        """Admin bootstrap attempt counter keyed by caller address."""
        return f"{self.prefix}:admin:setup:attempts:{client_address}"
