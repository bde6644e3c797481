"""Slackbridge: persistence layer for a Matrix <-> Slack bridge.

Stores the user, room, event, reaction and team mappings the bridge
needs to route traffic in both directions.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
