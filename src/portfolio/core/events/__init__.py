"""Application lifecycle events."""

from portfolio.core.events.lifespan import build_services, lifespan


__all__ = ["build_services", "lifespan"]
