"""Telegram front end for the dispatcher."""

import asyncio
import signal
from functools import partial

from telegram import Update
from telegram.ext import Application, CommandHandler, ContextTypes, filters

from . import lifecycle
from .config import BotConfig
from .dispatcher import COMMANDS, ChatCommand, Dispatcher
from .providers import DigitalOcean
from .utils import log


class TelegramBot:
    """Long-polls Telegram and feeds commands to a ``Dispatcher``.

    :param timeout: Upper bound in seconds for each provider wait
    """

    def __init__(
        self, config: BotConfig, client: DigitalOcean, timeout: float | None = None
    ):
        self.config = config
        self.client = client
        self.timeout = timeout
        self._app = Application.builder().token(config.token).build()
        self.dispatcher: Dispatcher | None = None

    def _build_dispatcher(self, bot_username: str | None) -> Dispatcher:
        workflows = {
            "up": partial(lifecycle.up, self.client, self.config.up, timeout=self.timeout),
            "down": partial(
                lifecycle.down, self.client, self.config.down, timeout=self.timeout
            ),
        }
        return Dispatcher(
            workflows,
            self.config.target_chat,
            self._send,
            bot_username=bot_username,
            status=self._status,
        )

    def _status(self) -> str:
        return lifecycle.format_status(lifecycle.status(self.client, self.config.up))

    async def _send(self, chat_id: int, text: str) -> None:
        await self._app.bot.send_message(chat_id, text)

    def command_handler(self) -> CommandHandler:
        """Handler for new messages only; edits of old messages are not commands."""
        return CommandHandler(
            list(COMMANDS), self._on_command, filters=filters.UpdateType.MESSAGE
        )

    async def _on_command(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        message = update.message
        if message is None or not message.text:
            return
        self.dispatcher.submit(ChatCommand(message.chat.id, message.text))

    async def run(self) -> None:
        """Run until SIGINT/SIGTERM; an in-flight workflow is cancelled and reported.

        :raises telegram.error.InvalidToken: If Telegram rejects the bot token
        """
        async with self._app:
            username = self._app.bot.username
            log(f"Authorized on account '{username}'")

            self.dispatcher = self._build_dispatcher(username)
            self._app.add_handler(self.command_handler())

            loop = asyncio.get_running_loop()
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.add_signal_handler(sig, self.dispatcher.stop)

            await self._app.start()
            await self._app.updater.start_polling()
            try:
                await self.dispatcher.run()
            finally:
                for sig in (signal.SIGINT, signal.SIGTERM):
                    loop.remove_signal_handler(sig)
                await self._app.updater.stop()
                await self._app.stop()
