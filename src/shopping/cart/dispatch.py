"""Synchronous command dispatch for the API and the CLI.

A command runs inline while holding the lock of every owner it names. A
version conflict that outlasts the handler's own retries surfaces as
``ConcurrentCartUpdate``.
"""

from protean.exceptions import ExpectedVersionError
from protean.utils.globals import current_domain

from shopping.cart.cart import OwnerKind
from shopping.cart.locks import OwnerLocks
from shopping.exceptions import ConcurrentCartUpdate
from shopping.utils.logging import get_logger

logger = get_logger(__name__)

owner_locks = OwnerLocks()


def owner_keys(command) -> list[str]:
    keys = []
    if getattr(command, "account_id", None):
        keys.append(f"{OwnerKind.ACCOUNT.value}:{command.account_id}")
    if getattr(command, "session_token", None):
        keys.append(f"{OwnerKind.SESSION.value}:{command.session_token}")
    return keys


def process(command):
    """Handle ``command`` now and return what its handler returned."""
    keys = owner_keys(command)
    with owner_locks.hold(*keys):
        try:
            return current_domain.process(command, asynchronous=False)
        except ExpectedVersionError as exc:
            logger.error("Giving up on cart write after version conflicts", owners=keys)
            raise ConcurrentCartUpdate(", ".join(keys)) from exc
