import abc


class MessagePublisherInterface(abc.ABC):
    @abc.abstractmethod
    def publish(self, message: str) -> None:
        """
        Deliver a single serialized message.

        Raises DeliveryError if the message could not be delivered.
        """
        pass

    def close(self) -> None:
        """Release any connection held by the publisher."""
        pass
