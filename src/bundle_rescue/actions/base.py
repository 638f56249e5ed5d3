"""Capability shared by every rescue action."""

from typing import Protocol, runtime_checkable

from ..models import TransactionIntent


@runtime_checkable
class ActionProducer(Protocol):
    """Produces the unsigned transactions that move one class of asset.
    
    Implementations may read chain state to size the transfer but must
    never submit anything. A failed read propagates and aborts the run.
    """

    async def get_sponsored_transactions(self) -> list[TransactionIntent]:
        """Return the intents to execute from the compromised account, in order."""
        ...

    def description(self) -> str:
        """Short human-readable summary of the action."""
        ...


async def collect_sponsored_transactions(
    producers: list[ActionProducer],
) -> list[TransactionIntent]:
    """Run producers one after another and concatenate their intents.
    
    Producer order is kept: an action whose transactions depend on the
    effects of an earlier one must come after it.
    """
    intents: list[TransactionIntent] = []
    for producer in producers:
        intents.extend(await producer.get_sponsored_transactions())
    return intents
