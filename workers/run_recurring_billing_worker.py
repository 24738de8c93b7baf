import argparse
import sys

from common.core.config import settings
from common.workers.launcher import WorkerLauncher
from packages.billing.models.domain.processing import RecurringPaymentConfig
from packages.billing.workers.recurring_billing_worker import RecurringBillingWorker


def setup_cli(argv=None):
    """Setup CLI arguments and return parsed args with factory parameters."""
    parser = argparse.ArgumentParser(description="Recurring Billing Worker")
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single processing pass and exit",
    )
    parser.add_argument(
        "--tenant-id",
        type=int,
        default=None,
        help="Only process subscriptions of this tenant",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=settings.recurring_dry_run,
        help="Simulate charges without calling the gateway or writing state",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=settings.recurring_billing_interval_seconds,
        help="Seconds between passes (default: from settings)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Log level (default: INFO)",
    )

    args = parser.parse_args(argv)

    factory_args = ()
    factory_kwargs = {
        "interval_seconds": args.interval,
        "tenant_id": args.tenant_id,
        "run_once": args.once,
        "config": RecurringPaymentConfig.from_settings(dry_run=args.dry_run),
    }

    return args, factory_args, factory_kwargs


def main():
    """Main entry point with command-line argument support."""

    return WorkerLauncher().run_with_cli(
        worker_factory=RecurringBillingWorker,
        worker_name="Recurring Billing Worker",
        cli_setup_func=setup_cli,
    )


if __name__ == "__main__":
    from packages.tenants.models.database.tenant import TenantEntity  # noqa
    from packages.customers.models.database.customer_profile import (  # noqa
        CustomerProfileEntity,
    )
    from packages.billing.models.database import (  # noqa
        SubscriptionEntity,
        PaymentLogEntity,
    )

    sys.exit(main())
