"""Background discovery of extra navigable items.

Two best-effort sources feed the finder beyond what the help text lists:
the toolpack's discovery recipes and a ``man -k`` lookup for ``<base>-*``
pages. Both run in parallel on a worker thread; the combined list crosses
back to the UI thread through a single-shot ``DiscoveryChannel``.
"""

from __future__ import annotations

import logging
import re
import threading
from concurrent.futures import ThreadPoolExecutor
from queue import Empty, Full, Queue

from .parser import Subcommand, merge_subcommands
from .process import CommandRunner, run_command
from .toolpacks import DiscoverySource, ToolPackRegistry, expand_template

logger = logging.getLogger("helpv.discovery")

MAN_PAGES_LABEL = "Man Pages"
MAN_INVOKE_TEMPLATE = "man {name}"
MAN_K_ENTRY_RE = re.compile(r"^([\w][\w.-]*)\s*\(\d+\)\s*-\s*(.*)$")
SEE_ALSO_HEADERS: frozenset[str] = frozenset({"SEE ALSO", "See Also", "SEE  ALSO"})
SEE_ALSO_REFERENCE_RE = re.compile(r"([\w][\w.-]*)\(\d+\)")
ERE_SPECIAL_CHARS = frozenset(".[]()*+?{}|^$\\")


def run_discovery_source(
    source: DiscoverySource,
    base: str,
    runner: CommandRunner = run_command,
) -> list[Subcommand]:
    """Run one discovery recipe and parse its stdout into entries."""
    result = runner(expand_template(source.run, [base]))
    if result is None or not result.ok:
        return []
    entry_re = re.compile(source.pattern)
    section_re = re.compile(source.section) if source.section else None
    in_section = section_re is None
    items: list[Subcommand] = []
    for line in result.stdout.splitlines():
        if not in_section:
            if section_re is not None and section_re.search(line):
                in_section = True
            continue
        match = entry_re.search(line)
        if not match or not match.group(1):
            continue
        name = match.group(1)
        if name.startswith("-"):
            continue
        description = None
        if entry_re.groups >= 2 and match.group(2) is not None:
            description = match.group(2).strip() or None
        items.append(
            Subcommand(
                name=name,
                description=description,
                label=source.label,
                invoke_template=source.invoke,
            )
        )
    return items


def discover_toolpack_items(
    base: str,
    registry: ToolPackRegistry,
    runner: CommandRunner = run_command,
) -> list[Subcommand]:
    """Run every discovery source configured for ``base``."""
    pack = registry.lookup(base)
    if pack is None:
        return []
    items: list[Subcommand] = []
    for source in pack.discover:
        try:
            found = run_discovery_source(source, base, runner)
        except re.error as exc:
            logger.debug("discovery source %r for %s has a bad pattern: %s", source.label, base, exc)
            continue
        merge_subcommands(items, found)
    return items


def ere_escape(text: str) -> str:
    """Backslash-escape POSIX extended regex metacharacters only."""
    return "".join(f"\\{ch}" if ch in ERE_SPECIAL_CHARS else ch for ch in text)


def discover_man_pages(base: str, runner: CommandRunner = run_command) -> list[Subcommand]:
    """List ``<base>-*`` manual pages via the ``man -k`` index."""
    result = runner(f"man -k ^{ere_escape(base)}-")
    if result is None or not result.ok:
        return []
    prefix = f"{base}-"
    items: list[Subcommand] = []
    for line in result.stdout.splitlines():
        match = MAN_K_ENTRY_RE.match(line.strip())
        if not match:
            continue
        name = match.group(1)
        if not name.startswith(prefix):
            continue
        items.append(
            Subcommand(
                name=name,
                description=match.group(2).strip() or None,
                label=MAN_PAGES_LABEL,
                invoke_template=MAN_INVOKE_TEMPLATE,
            )
        )
    return items


def _ends_see_also(line: str) -> bool:
    stripped = line.strip()
    return (
        bool(stripped)
        and not line[:1].isspace()
        and stripped[0].isupper()
        and "(" not in stripped
    )


def parse_see_also(content: str, base: str) -> list[Subcommand]:
    """Extract ``<base>-*`` references from a manual page's SEE ALSO section."""
    collected: list[str] = []
    in_section = False
    for line in content.splitlines():
        if not in_section:
            if line.strip() in SEE_ALSO_HEADERS:
                in_section = True
            continue
        if _ends_see_also(line):
            break
        collected.append(line)
    if not collected:
        return []

    prefix = f"{base}-"
    items: list[Subcommand] = []
    for match in SEE_ALSO_REFERENCE_RE.finditer(" ".join(collected)):
        name = match.group(1)
        if name == base or not name.startswith(prefix):
            continue
        items.append(
            Subcommand(
                name=name,
                label=MAN_PAGES_LABEL,
                invoke_template=MAN_INVOKE_TEMPLATE,
            )
        )
    return merge_subcommands([], items)


def run_discovery(
    base: str,
    registry: ToolPackRegistry,
    runner: CommandRunner = run_command,
) -> list[Subcommand]:
    """Run toolpack discovery and the man-page lookup in parallel.

    Results merge in a fixed order (toolpack first) so de-duplication is
    deterministic. A failing sub-task contributes nothing.
    """
    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="helpv-discover") as pool:
        toolpack_future = pool.submit(discover_toolpack_items, base, registry, runner)
        man_future = pool.submit(discover_man_pages, base, runner)
        combined: list[Subcommand] = []
        for label, future in (("toolpack", toolpack_future), ("man -k", man_future)):
            try:
                merge_subcommands(combined, future.result())
            except Exception:
                logger.debug("%s discovery for %s failed", label, base, exc_info=True)
    return combined


class DiscoveryChannel:
    """Single-shot, capacity-one channel from one worker to the UI thread.

    Closing the receiver is the cancellation signal: later sends are dropped.
    A sender that finishes without sending marks the channel disconnected.
    """

    def __init__(self) -> None:
        self._queue: Queue[list[Subcommand]] = Queue(maxsize=1)
        self._lock = threading.Lock()
        self._receiver_closed = False
        self._sender_done = False

    def send(self, items: list[Subcommand]) -> bool:
        """Deliver ``items`` unless the receiver is gone or a payload is queued."""
        with self._lock:
            if self._receiver_closed or self._sender_done:
                return False
            self._sender_done = True
            try:
                self._queue.put_nowait(items)
            except Full:
                return False
            return True

    def close_sender(self) -> None:
        with self._lock:
            self._sender_done = True

    def close(self) -> None:
        """Drop the receiving side; pending and future payloads are discarded."""
        with self._lock:
            self._receiver_closed = True
        try:
            self._queue.get_nowait()
        except Empty:
            pass

    @property
    def closed(self) -> bool:
        return self._receiver_closed

    def disconnected(self) -> bool:
        """Whether the sender finished and nothing is left to receive."""
        with self._lock:
            return self._sender_done and self._queue.empty()

    def try_receive(self) -> list[Subcommand] | None:
        """Non-blocking receive; ``None`` when nothing has arrived."""
        if self._receiver_closed:
            return None
        try:
            return self._queue.get_nowait()
        except Empty:
            return None


def spawn_discovery(
    base: str,
    registry: ToolPackRegistry,
    runner: CommandRunner = run_command,
) -> DiscoveryChannel:
    """Start a daemon worker for ``base`` and return the channel it reports on."""
    channel = DiscoveryChannel()

    def worker() -> None:
        try:
            items = run_discovery(base, registry, runner)
        except Exception:
            logger.debug("discovery worker for %s crashed", base, exc_info=True)
            channel.close_sender()
            return
        if not channel.send(items):
            logger.debug("discovery result for %s discarded", base)
        else:
            logger.debug("discovered %d item(s) for %s", len(items), base)

    thread = threading.Thread(target=worker, name="helpv-discovery", daemon=True)
    thread.start()
    return channel


__all__ = [
    "DiscoveryChannel",
    "MAN_INVOKE_TEMPLATE",
    "MAN_PAGES_LABEL",
    "discover_man_pages",
    "discover_toolpack_items",
    "ere_escape",
    "parse_see_also",
    "run_discovery",
    "run_discovery_source",
    "spawn_discovery",
]
