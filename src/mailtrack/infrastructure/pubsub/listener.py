"""Google Cloud Pub/Sub listener for Gmail push notifications."""

from __future__ import annotations

from typing import Any, Literal, Optional

from google.api_core.exceptions import AlreadyExists
from google.cloud import pubsub_v1
from loguru import logger
from pydantic import AliasChoices, BaseModel, Field, ValidationError

from mailtrack.application.use_cases.sync_history import HistorySyncUseCase
from mailtrack.domain.entities.history import NotificationEvent
from mailtrack.domain.errors import AuthRevoked, ListenerFatal

ListenerState = Literal["idle", "subscribed", "closed"]


class GmailNotification(BaseModel):
    """Decoded payload of a Gmail push notification."""

    email_address: str = Field(validation_alias=AliasChoices("emailAddress", "accountEmail"))
    history_id: int = Field(validation_alias=AliasChoices("historyId", "history_id"))


class NotificationListener:
    """Streaming-pull subscriber that dispatches each notification to sync.

    The Pub/Sub client runs callbacks on its own thread pool, so one slow
    sync never blocks delivery of the next notification; syncs for the
    same account are serialized by the sync use case.

    Every delivered message is acknowledged once dispatch returns, whether
    the sync succeeded or not. A subscription error closes the listener
    and surfaces as ``ListenerFatal``.
    """

    def __init__(
        self,
        sync: HistorySyncUseCase,
        subscription_path: str,
        topic_path: str,
        subscriber: Optional[Any] = None,
        credentials_file: Optional[str] = None,
        max_messages: int = 10,
    ) -> None:
        self.sync = sync
        self.subscription_path = subscription_path
        self.topic_path = topic_path
        self.max_messages = max_messages
        self.state: ListenerState = "idle"
        self._credentials_file = credentials_file
        self._subscriber = subscriber
        self._future: Optional[Any] = None

    @property
    def subscriber(self) -> Any:
        if self._subscriber is None:
            if self._credentials_file:
                self._subscriber = pubsub_v1.SubscriberClient.from_service_account_file(self._credentials_file)
            else:
                self._subscriber = pubsub_v1.SubscriberClient()
        return self._subscriber

    def ensure_subscription(self) -> None:
        try:
            self.subscriber.create_subscription(
                request={"name": self.subscription_path, "topic": self.topic_path}
            )
            logger.info(f"Created subscription {self.subscription_path} on {self.topic_path}")
        except AlreadyExists:
            logger.debug(f"Subscription {self.subscription_path} already exists")

    def start(self) -> None:
        if self.state != "idle":
            raise RuntimeError(f"Listener cannot start from state {self.state}")

        self.ensure_subscription()
        self._future = self.subscriber.subscribe(
            self.subscription_path,
            callback=self.handle_message,
            flow_control=pubsub_v1.types.FlowControl(max_messages=self.max_messages),
        )
        self.state = "subscribed"
        logger.info(f"Listening for Gmail notifications on {self.subscription_path}")

    def run(self) -> None:
        """Block until the subscription ends; raise ``ListenerFatal`` on error."""
        if self.state == "idle":
            self.start()
        if self._future is None:
            return

        try:
            self._future.result()
        except Exception as e:
            if self.state == "closed":
                return
            self._unsubscribe()
            logger.error(f"Notification subscription failed: {e}")
            raise ListenerFatal(f"Subscription {self.subscription_path} failed: {e}") from e

    def close(self) -> None:
        if self.state == "closed":
            return
        self._unsubscribe()
        logger.info("Notification listener closed")

    def _unsubscribe(self) -> None:
        self.state = "closed"
        if self._future is not None:
            self._future.cancel()

    def handle_message(self, message: Any) -> None:
        """Pub/Sub callback."""
        self.dispatch(
            NotificationEvent(
                data=message.data,
                ack=message.ack,
                delivery_id=getattr(message, "message_id", None),
            )
        )

    def dispatch(self, event: NotificationEvent) -> None:
        try:
            notification = GmailNotification.model_validate_json(event.data)
            logger.debug(
                f"Notification {event.delivery_id}: {notification.email_address} "
                f"historyId={notification.history_id}"
            )
            self.sync.handle_notification(notification.email_address, notification.history_id)
        except ValidationError as e:
            logger.warning(f"Discarding malformed notification {event.delivery_id}: {e}")
        except AuthRevoked as e:
            logger.error(str(e))
        except Exception as e:
            logger.exception(f"Sync failed for notification {event.delivery_id}: {e}")
        finally:
            # Acknowledge regardless of outcome; cursor state makes redelivery safe
            event.ack()
