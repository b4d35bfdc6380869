from coupon_drop.db.repo.codes_repo import CodesRepo
from coupon_drop.db.repo.cooldowns_repo import CooldownsRepo

__all__ = [
    "CodesRepo",
    "CooldownsRepo",
]
