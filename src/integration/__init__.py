"""
Host-side integration for the credibility matcher.
"""

from .matcher_host import HostConfigError, HostError, HostResult, MatcherHost, MatcherHostConfig

__all__ = [
    "HostConfigError",
    "HostError",
    "HostResult",
    "MatcherHost",
    "MatcherHostConfig",
]
