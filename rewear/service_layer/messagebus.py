from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

from rewear.adapters.notifications import AbstractNotificationSink
from rewear.domain.base import Message, command_registry, event_registry
from rewear.service_layer import handlers
from rewear.service_layer.unit_of_work import AbstractUnitOfWork

logger = logging.getLogger(__name__)


class MessageBus:
    """
    Routes a command to its handler inside a fresh unit of work, then hands
    the events raised by the committed aggregates to the event handlers.
    Event handlers run concurrently; their failures are logged and never undo the committed change.
    """

    def __init__(
        self,
        uow_factory: Callable[[], AbstractUnitOfWork],
        sink: AbstractNotificationSink,
        event_handlers: dict[type, list[Callable]] | None = None,
        command_handlers: dict[type, Callable] | None = None,
    ):
        self.uow_factory = uow_factory
        self.sink = sink
        self.event_handlers = handlers.EVENT_HANDLERS if event_handlers is None else event_handlers
        self.command_handlers = handlers.COMMAND_HANDLERS if command_handlers is None else command_handlers

    async def handle(self, message: Message) -> Any:
        if message.signature in command_registry:
            return await self.handle_command(message)
        if message.signature in event_registry:
            await self.handle_event(message)
            return None
        raise Exception(f"{message} was not a Command or Event")

    async def handle_command(self, command: Message) -> Any:
        logger.debug("handling command %s", command)
        handler = self.command_handlers[type(command)]
        uow = self.uow_factory()
        result = await handler(command, uow)
        await asyncio.gather(*(self.handle_event(event) for event in uow.collect_new_events()))
        return result

    async def handle_event(self, event: Message):
        await asyncio.gather(
            *(self._run_event_handler(handler, event) for handler in self.event_handlers.get(type(event), []))
        )

    async def _run_event_handler(self, handler: Callable, event: Message):
        try:
            logger.debug("handling event %s with handler %s", event, handler.__name__)
            await handler(event, self.sink)
        except Exception:
            logger.exception("Exception handling event %s", event)
