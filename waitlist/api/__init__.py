"""API subpackage for the waitlist REST router."""

from waitlist.api.waitlist import router as waitlist_router

__all__ = ["waitlist_router"]
