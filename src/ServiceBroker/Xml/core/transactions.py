# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Transaction participant notifications.

The broker performs no writes, so it takes part in host transactions only to
acknowledge them: Prepare votes "ready" and Commit, Rollback and InDoubt
report completion. No compensating action exists for Rollback.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class Enlistment(Protocol):
    """Host handle used to acknowledge the final phase of a transaction."""

    def done(self) -> None:
        ...


@runtime_checkable
class PreparingEnlistment(Enlistment, Protocol):
    """Host handle used during the Prepare phase."""

    def prepared(self) -> None:
        ...


class TransactionParticipant:
    """
    Two-phase commit participant that acknowledges every notification.

    Each notification tolerates a ``None`` enlistment.

    Example::

        participant = broker.transactions
        participant.prepare(preparing_enlistment)   # calls prepared()
        participant.commit(enlistment)              # calls done()
    """

    def prepare(self, preparing_enlistment: Optional[PreparingEnlistment]) -> None:
        """Respond to the Prepare notification by voting ready."""
        if preparing_enlistment is not None:
            logger.debug("Transaction prepare acknowledged")
            preparing_enlistment.prepared()

    def commit(self, enlistment: Optional[Enlistment]) -> None:
        """Respond to the Commit notification."""
        self._done(enlistment, "commit")

    def rollback(self, enlistment: Optional[Enlistment]) -> None:
        """Respond to the Rollback notification; there is no work to undo."""
        self._done(enlistment, "rollback")

    def in_doubt(self, enlistment: Optional[Enlistment]) -> None:
        """Respond to the InDoubt notification."""
        self._done(enlistment, "in_doubt")

    @staticmethod
    def _done(enlistment: Optional[Enlistment], notification: str) -> None:
        if enlistment is not None:
            logger.debug("Transaction %s acknowledged", notification)
            enlistment.done()


__all__ = ["Enlistment", "PreparingEnlistment", "TransactionParticipant"]
