from coupon_drop.workers.tasks.pool_maintenance import run_release_expired_codes

__all__ = [
    "run_release_expired_codes",
]
