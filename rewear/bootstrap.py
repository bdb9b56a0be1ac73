from typing import Callable

from rewear import config
from rewear.adapters.notifications import AbstractNotificationSink, HttpNotificationSink, LoggingNotificationSink
from rewear.service_layer.messagebus import MessageBus
from rewear.service_layer.unit_of_work import AbstractUnitOfWork, SqlAlchemyUnitOfWork


def bootstrap(
    uow_factory: Callable[[], AbstractUnitOfWork] = SqlAlchemyUnitOfWork,
    sink: AbstractNotificationSink | None = None,
) -> MessageBus:
    if sink is None:
        local = config.STAGE in ("local", "testing", "ci-testing")
        sink = LoggingNotificationSink() if local else HttpNotificationSink()
    return MessageBus(uow_factory=uow_factory, sink=sink)
