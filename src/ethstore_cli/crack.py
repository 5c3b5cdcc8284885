"""Password search against a presale wallet."""

from __future__ import annotations

import logging
import os
import threading
from collections import deque
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor

from ethstore_cli.crypto.presale import PresaleWallet
from ethstore_cli.errors import InvalidPasswordError

logger = logging.getLogger(__name__)

BATCH_SIZE = 32


def find_wallet_password(
    candidates: Iterable[str],
    wallet: PresaleWallet,
    *,
    workers: int | None = None,
) -> str | None:
    """Try each candidate against ``wallet``; return the first that decrypts it.

    Workers take candidates from a shared queue in batches of ``BATCH_SIZE``.
    Once one worker finds the password the others stop at their next attempt.
    """
    queue = deque(candidates)
    if not queue:
        return None

    worker_count = max(1, workers or os.cpu_count() or 1)
    lock = threading.Lock()
    found = threading.Event()
    result: list[str] = []

    def _take_batch() -> list[str]:
        with lock:
            return [queue.popleft() for _ in range(min(BATCH_SIZE, len(queue)))]

    def _search() -> int:
        attempts = 0
        while not found.is_set():
            batch = _take_batch()
            if not batch:
                break
            for candidate in batch:
                if found.is_set():
                    break
                attempts += 1
                try:
                    wallet.decrypt(candidate)
                except InvalidPasswordError:
                    continue
                with lock:
                    result.append(candidate)
                found.set()
                break
        return attempts

    with ThreadPoolExecutor(max_workers=worker_count) as pool:
        futures = [pool.submit(_search) for _ in range(worker_count)]
        attempts = sum(future.result() for future in futures)

    logger.debug("tried %d password candidate(s) with %d worker(s)", attempts, worker_count)
    return result[0] if result else None
