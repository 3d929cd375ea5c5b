from libs.schemas.coupon import Coupon
from libs.schemas.coupon_redemption import CouponRedemption
from libs.schemas.rental import Rental
from libs.schemas.vehicle import Vehicle

__all__ = [
    "Coupon",
    "CouponRedemption",
    "Rental",
    "Vehicle",
]
