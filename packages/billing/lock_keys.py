"""Lock key generators for billing package."""


# Lock TTL for a single charge attempt (seconds) - safety net if process crashes.
# Must exceed the gateway timeout plus the database writes that follow it.
RECURRING_SUBSCRIPTION_LOCK_TTL = 120


def recurring_subscription_lock_key(subscription_id: int) -> str:
    """Generate lock key for charging a recurring subscription.

    Held for the whole attempt so that overlapping passes (a slow run and the
    next scheduled one, or two worker replicas) never charge the same
    subscription twice.
    """
    return f"recurring_subscription:{subscription_id}"
