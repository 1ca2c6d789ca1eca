"""Tracking of the chain head with reorganisation handling."""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Protocol

from .primitives import Block, Hash

LATEST = "latest"
DEFAULT_MAX_BLOCK_BACKLOG = 10
DEFAULT_POLL_INTERVAL = 1.0

_log = logging.getLogger(__name__)


class BlockProvider(Protocol):
    """The node methods the block tracker needs."""

    def get_block_by_hash(self, block_hash: Hash, full: bool) -> Block: ...

    def get_block_by_number(self, number: Any, full: bool) -> Block: ...


class Tracker(Protocol):
    """A source of new head blocks."""

    def track(self, stop_event: threading.Event, handler: Callable[[Block], None]) -> Any: ...


class EventType(Enum):
    """Whether an event adds to the chain or removes from it in a reorg."""

    ADD = 0
    DEL = 1


@dataclass
class BlockEvent:
    """Blocks added to and removed from the tracked chain."""

    type: EventType = EventType.ADD
    added: list[Block] = field(default_factory=list)
    removed: list[Block] = field(default_factory=list)


@dataclass
class Config:
    """Settings for a block tracker."""

    tracker: Tracker | None = None
    max_block_backlog: int = DEFAULT_MAX_BLOCK_BACKLOG


class BlockTracker:
    """Keeps the most recent blocks of the chain and reports changes to subscribers."""

    def __init__(self, provider: BlockProvider, config: Config | None = None):
        self.config = config if config is not None else Config()
        self.provider = provider
        self._tracker = self.config.tracker or JSONBlockTracker(provider)
        self._blocks: list[Block] = []
        self._lock = threading.Lock()
        self._subscribers: list[queue.Queue] = []
        self._subscribers_lock = threading.Lock()
        self._initialized = False
        self._init_lock = threading.Lock()
        self._stop = threading.Event()

    @property
    def max_block_backlog(self) -> int:
        return self.config.max_block_backlog

    def __len__(self) -> int:
        return len(self._blocks)

    def subscribe(self) -> queue.Queue:
        """Return a queue that receives block events; a full queue drops events."""
        sub: queue.Queue = queue.Queue(maxsize=1)
        with self._subscribers_lock:
            self._subscribers.append(sub)
        return sub

    def init(self) -> None:
        """Fill the history with the latest blocks; only the first call does work."""
        with self._init_lock:
            if self._initialized:
                return
            self._initialized = True

            block = self.provider.get_block_by_number(LATEST, False)
            if block.number == 0:
                return
            collected: list[Block] = []
            for _ in range(self.max_block_backlog):
                collected.append(block)
                if block.number == 0:
                    break
                block = self.provider.get_block_by_hash(block.parent_hash, False)
            self._blocks = collected[::-1]

    def start(self) -> Any:
        """Start following the chain head until :meth:`close` is called."""
        return self._tracker.track(self._stop, self.handle_reconcile)

    def close(self) -> None:
        """Stop following the chain head."""
        self._stop.set()

    def last_block(self) -> Block | None:
        """Return a copy of the most recent block, or None when there is none."""
        if not self._blocks:
            return None
        return self._blocks[-1].copy()

    def blocks_snapshot(self) -> list[Block]:
        """Return copies of the tracked blocks, oldest first."""
        return [block.copy() for block in self._blocks]

    def add_block_locked(self, block: Block) -> None:
        """Append ``block`` to the history; the caller must hold the lock."""
        if len(self._blocks) == self.max_block_backlog:
            self._blocks = self._blocks[1:]
        if self._blocks:
            last = self._blocks[-1].number
            if last + 1 != block.number:
                raise ValueError(f"bad number sequence. {last} and {block.number}")
        self._blocks.append(block)

    def _index_of(self, block_hash: Hash) -> int:
        return next(
            (index for index, block in enumerate(self._blocks) if block.hash == block_hash),
            -1,
        )

    def _reconcile(self, block: Block) -> tuple[list[Block], int]:
        if self._index_of(block.hash) != -1:
            return [], -1
        if not self._blocks:
            return [block], -1
        if self._blocks[-1].hash == block.parent_hash:
            return [block], -1
        index = self._index_of(block.parent_hash)
        if index != -1:
            return [block], index

        # backfill until a known ancestor is found
        added = [block]
        count = 0
        while True:
            if count > self.max_block_backlog:
                raise ValueError("cannot reconcile more than max backlog values")
            count += 1
            try:
                parent = self.provider.get_block_by_hash(block.parent_hash, False)
            except Exception as err:
                raise ValueError(f"parent with hash {block.parent_hash} not found") from err
            if parent is None:
                raise ValueError(f"parent with hash {block.parent_hash} not found")
            added.append(parent)
            index = self._index_of(parent.parent_hash)
            if index != -1:
                break
            block = parent
        return added[::-1], index

    def handle_block_event(self, block: Block) -> BlockEvent | None:
        """Merge ``block`` into the history and return what changed, if anything."""
        with self._lock:
            blocks, index = self._reconcile(block)
            if not blocks:
                return None
            event = BlockEvent()
            if index != -1:
                event.removed.extend(self._blocks[index + 1:])
                self._blocks = self._blocks[:index + 1]
            for new_block in blocks:
                event.added.append(new_block)
                self.add_block_locked(new_block)
            return event

    def handle_reconcile(self, block: Block) -> None:
        """Merge ``block`` and notify subscribers of the resulting event."""
        event = self.handle_block_event(block)
        if event is None:
            return
        with self._subscribers_lock:
            for sub in self._subscribers:
                try:
                    sub.put_nowait(event)
                except queue.Full:
                    pass


class JSONBlockTracker:
    """Finds new head blocks by polling the provider."""

    def __init__(
        self,
        provider: BlockProvider,
        logger: logging.Logger | None = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ):
        self.provider = provider
        self.logger = logger or _log
        self.poll_interval = poll_interval

    def track(
        self, stop_event: threading.Event, handler: Callable[[Block], None]
    ) -> threading.Thread:
        """Poll in a background thread and pass each new head to ``handler``."""
        thread = threading.Thread(target=self._poll, args=(stop_event, handler), daemon=True)
        thread.start()
        return thread

    def _poll(self, stop_event: threading.Event, handler: Callable[[Block], None]) -> None:
        last: Block | None = None
        while not stop_event.wait(self.poll_interval):
            try:
                block = self.provider.get_block_by_number(LATEST, False)
            except Exception as err:
                self.logger.error("tracker failed to get last block: %s", err)
                continue
            if last is not None and last.hash == block.hash:
                continue
            try:
                handler(block)
            except Exception as err:
                self.logger.error("blocktracker: failed to handle block: %s", err)
            else:
                last = block