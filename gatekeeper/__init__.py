"""Doc Gatekeeper - host layer: configuration, logging, sessions and events."""

# Use explicit imports when needed:
# from gatekeeper.service import AnalysisService
# from gatekeeper.session import AnalysisSession, AnalysisState
# from gatekeeper.events import EventChannel, EventType
# from gatekeeper.config import Settings, get_settings

__all__ = [
    "AnalysisService",
    "AnalysisSession",
    "AnalysisState",
    "EventChannel",
    "EventType",
    "Settings",
    "get_settings",
]
