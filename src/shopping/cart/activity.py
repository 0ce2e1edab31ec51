"""Cart activity log: every committed cart event becomes one structured log line."""

from protean import handle

from shopping.cart.cart import Cart
from shopping.domain import shopping
from shopping.utils.logging import get_logger

logger = get_logger(__name__)


@shopping.event_handler(part_of=Cart)
class CartActivityLogger:
    @handle("$any")
    def log_event(self, event):
        logger.info("Cart event", event_type=type(event).__name__, version=event.__version__, **event.payload)
