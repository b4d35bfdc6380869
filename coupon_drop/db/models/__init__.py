from coupon_drop.db.models.codes import Code
from coupon_drop.db.models.cooldowns import CooldownEntry

__all__ = [
    "Code",
    "CooldownEntry",
]
