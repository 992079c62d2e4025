"""Serialise chat commands onto the up/down workflows.

One control loop consumes a single event queue. Chat commands, workflow
progress lines and workflow completions all arrive on that queue, so they
are handled strictly in arrival order and only the loop ever touches the
busy slot. Workflows run in a worker thread; each reports back through its
own ``Completion`` event.
"""

import asyncio
import threading
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from functools import partial

from .errors import LifecycleError
from .utils import log, logger, warn

COMMANDS = ("up", "down", "ping", "status")
WORKFLOWS = ("up", "down")

NOT_PERMITTED = "I'm not permitted to work with you"
BUSY = "I'm busy"
DONE = "Done!"

Send = Callable[[int, str], Awaitable[None]]
Workflow = Callable[..., None]


@dataclass(frozen=True)
class ChatCommand:
    chat_id: int
    text: str


@dataclass(frozen=True)
class Progress:
    text: str


@dataclass(frozen=True)
class Completion:
    workflow: str
    error: BaseException | None = None


@dataclass(frozen=True)
class Reply:
    chat_id: int
    text: str


class _Stop:
    pass


class BusySlot:
    """Which workflow is in flight, if any. Owned by the control loop."""

    def __init__(self) -> None:
        self.workflow: str | None = None

    @property
    def busy(self) -> bool:
        return self.workflow is not None

    def acquire(self, workflow: str) -> None:
        if self.workflow is not None:
            raise RuntimeError(f"'{self.workflow}' is already running")
        self.workflow = workflow

    def release(self) -> None:
        self.workflow = None


def parse_command(text: str, bot_username: str | None = None) -> str | None:
    """Extract a recognised command from a message.

    Accepts ``/up`` and ``/up@<bot_username>``; a command addressed to a
    different bot, or any other text, yields None.
    """
    if not text.startswith("/"):
        return None
    head = text.split()[0][1:]
    command, _, handle = head.partition("@")
    if handle and (bot_username is None or handle.lower() != bot_username.lower()):
        return None
    return command if command in COMMANDS else None


class Dispatcher:
    """Accepts chat commands and runs at most one workflow at a time.

    :param workflows: ``{"up": fn, "down": fn}``; each is called in a worker
        thread as ``fn(notify, cancel=event)`` and raises on failure
    :param target_chat: The only chat allowed to issue commands; progress
        and results go there
    :param send: Coroutine function delivering a text to a chat
    :param bot_username: Own handle, for ``/up@handle`` style commands
    :param status: Optional blocking callable returning a status summary
    """

    def __init__(
        self,
        workflows: dict[str, Workflow],
        target_chat: int,
        send: Send,
        *,
        bot_username: str | None = None,
        status: Callable[[], str] | None = None,
    ):
        missing = set(WORKFLOWS) - set(workflows)
        if missing:
            raise ValueError(f"missing workflows: {', '.join(sorted(missing))}")
        self.workflows = workflows
        self.target_chat = target_chat
        self.send = send
        self.bot_username = bot_username
        self.status = status
        self.slot = BusySlot()
        self.cancel = threading.Event()
        self._events: asyncio.Queue = asyncio.Queue()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._stopping = False
        self._status_tasks: set[asyncio.Future] = set()

    def submit(self, command: ChatCommand) -> None:
        """Queue an inbound command. Call from the event loop thread."""
        self._events.put_nowait(command)

    def stop(self) -> None:
        """Cancel any running workflow and end the loop once it and any
        pending status replies have been sent.
        """
        self.cancel.set()
        self._events.put_nowait(_Stop())

    async def run(self) -> None:
        self._loop = asyncio.get_running_loop()
        while True:
            event = await self._events.get()
            try:
                if isinstance(event, _Stop):
                    self._stopping = True
                elif isinstance(event, ChatCommand):
                    await self._on_command(event)
                elif isinstance(event, Progress):
                    await self._reply(self.target_chat, event.text)
                elif isinstance(event, Completion):
                    await self._on_completion(event)
                elif isinstance(event, Reply):
                    await self._reply(event.chat_id, event.text)
            finally:
                self._events.task_done()
            if self._stopping and not self.slot.busy and not self._status_tasks:
                log("Dispatcher stopped")
                return

    async def _reply(self, chat_id: int, text: str) -> None:
        try:
            await self.send(chat_id, text)
        except Exception as e:
            warn(f"Failed to send message to chat {chat_id}: {e}")

    async def _on_command(self, event: ChatCommand) -> None:
        command = parse_command(event.text, self.bot_username)
        if command is None:
            return

        if event.chat_id != self.target_chat:
            warn(f"Rejected '/{command}' from chat {event.chat_id}")
            await self._reply(event.chat_id, NOT_PERMITTED)
            return

        if command == "ping":
            await self._reply(event.chat_id, "pong")
        elif command == "status":
            self._start_status(event.chat_id)
        elif self._stopping:
            await self._reply(event.chat_id, "I'm shutting down")
        elif self.slot.busy:
            await self._reply(event.chat_id, BUSY)
        else:
            self._start_workflow(command)

    def _start_workflow(self, name: str) -> None:
        self.slot.acquire(name)
        log(f"Starting '{name}'")
        task = asyncio.ensure_future(
            asyncio.to_thread(self.workflows[name], self._progress, cancel=self.cancel)
        )
        task.add_done_callback(partial(self._finished, name))

    def _finished(self, name: str, task: asyncio.Future) -> None:
        if task.cancelled():
            error = LifecycleError(f"'{name}' was interrupted")
        else:
            error = task.exception()
        self._events.put_nowait(Completion(name, error))

    def _progress(self, text: str) -> None:
        # Called from the worker thread.
        log(text)
        self._loop.call_soon_threadsafe(self._events.put_nowait, Progress(text))

    async def _on_completion(self, event: Completion) -> None:
        if event.error is None:
            log(f"'{event.workflow}' finished")
            await self._reply(self.target_chat, DONE)
        else:
            if isinstance(event.error, LifecycleError):
                warn(f"'{event.workflow}' failed: {event.error}")
            else:
                logger.error(
                    f"'{event.workflow}' crashed",
                    exc_info=(type(event.error), event.error, event.error.__traceback__),
                )
            await self._reply(self.target_chat, str(event.error) or type(event.error).__name__)
        self.slot.release()

    def _start_status(self, chat_id: int) -> None:
        running = self.slot.workflow

        def build() -> str:
            lines = [f"Running: {running}" if running else "Idle"]
            if self.status is not None:
                lines.append(self.status())
            return "\n".join(lines)

        def done(task: asyncio.Future) -> None:
            if task.cancelled():
                return
            error = task.exception()
            text = task.result() if error is None else f"failed to get status: {error}"
            self._events.put_nowait(Reply(chat_id, text))

        task = asyncio.ensure_future(asyncio.to_thread(build))
        self._status_tasks.add(task)
        task.add_done_callback(self._status_tasks.discard)
        task.add_done_callback(done)
