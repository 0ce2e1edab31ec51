"""Anonymous cart expiry: command and handler for purging stale carts.

Designed to be triggered periodically by an external scheduler (cron, K8s
CronJob) via the maintenance API endpoint or ``manage.py purge-expired``.
Anonymous carts expire a fixed retention window after they were created;
account carts never expire.
"""

from protean import handle
from protean.fields import DateTime
from protean.utils.globals import current_domain

from shopping.cart.cart import Cart, as_utc
from shopping.domain import shopping
from shopping.utils.logging import get_logger

logger = get_logger(__name__)


@shopping.command(part_of="Cart")
class PurgeExpiredCarts:
    """Delete anonymous carts whose expiry is at or before ``as_of``."""

    as_of = DateTime()  # Optional: defaults to now


@shopping.command_handler(part_of=Cart)
class PurgeExpiredCartsHandler:
    @handle(PurgeExpiredCarts)
    def purge_expired_carts(self, command):
        as_of = as_utc(command.as_of) or current_domain.clock.now()
        logger.info("Purging expired anonymous carts", as_of=as_of.isoformat())

        purged = current_domain.repository_for(Cart).purge_expired(as_of)

        logger.info("Expired cart purge complete", purged_count=purged)
        return purged
