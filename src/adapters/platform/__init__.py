"""CI platform bindings."""

from src.adapters.platform.github import GitHubActionsPlatform

__all__ = ["GitHubActionsPlatform"]
