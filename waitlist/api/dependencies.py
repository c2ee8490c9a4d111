"""FastAPI dependencies for the waitlist router.

- get_waitlist_store(): the WaitlistStore for the configured CSV path
"""

import logging
from functools import lru_cache
from pathlib import Path

from fastapi import Depends

from config.settings import Settings, get_settings
from waitlist.storage import WaitlistStore

logger = logging.getLogger(__name__)


@lru_cache(maxsize=8)
def _store_for(path: Path, lock_timeout: float, fsync: bool, dir_mode: int) -> WaitlistStore:
    logger.info("Using waitlist storage at %s", path)
    return WaitlistStore(path, lock_timeout=lock_timeout, fsync=fsync, dir_mode=dir_mode)


def get_waitlist_store(settings: Settings = Depends(get_settings)) -> WaitlistStore:
    """FastAPI dependency returning the store for the configured path.

    Stores are cached per storage configuration, so repeated requests
    share one instance (and its locks).
    """
    storage = settings.storage
    return _store_for(storage.csv_path, storage.lock_timeout, storage.fsync, storage.dir_mode)
