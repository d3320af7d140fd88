import asyncio
import logging

from redis.asyncio import Redis

import config
from utils.logging_config import setup_logging

# Initialize centralized logging configuration
setup_logging()

from context import StorefrontContext
from db import init_db


async def main():
    """
    Startup check for the checkout core.

    Creates the tables, rehydrates the stored cart and checkout session and
    logs what was restored. Storefront handlers build their own context the
    same way.
    """
    await init_db()
    redis = Redis(host=config.REDIS_HOST, password=config.REDIS_PASSWORD)
    try:
        context = await StorefrontContext.create(redis)
        logging.info(f"Runtime environment: {config.RUNTIME_ENVIRONMENT.value}")
        logging.info(f"Cart restored with {context.cart.count()} item(s)")
        for line in context.cart_summary():
            logging.info(line)
        if context.checkout.session_id is not None:
            logging.info(f"Checkout session {context.checkout.session_id} restored in state {context.checkout.state.value}")
        if not config.WEBHOOK_CHECKOUT_STARTED_URL:
            logging.warning("WEBHOOK_CHECKOUT_STARTED_URL is not set, abandoned checkouts will not be reported")
    finally:
        await redis.aclose()


if __name__ == "__main__":
    asyncio.run(main())
