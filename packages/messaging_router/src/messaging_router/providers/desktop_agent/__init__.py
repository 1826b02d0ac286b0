"""Desktop Agent (pull-queue) provider."""

from messaging_router.providers.desktop_agent.client import DesktopAgentAdapter

__all__ = ["DesktopAgentAdapter"]
