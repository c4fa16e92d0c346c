from ninja_extra.throttling import AnonRateThrottle, UserRateThrottle


class AuthThrottle(AnonRateThrottle):
    rate = "100/min"


class AnonDefaultThrottle(AnonRateThrottle):
    rate = "60/min"


class UserDefaultThrottle(UserRateThrottle):
    rate = "100/min"


class WriteThrottle(UserRateThrottle):
    rate = "100/min"


class PurchaseThrottle(AnonRateThrottle):
    rate = "30/min"


class GateThrottle(UserRateThrottle):
    """Gate scanners check in a whole crowd, so they get a much higher budget."""

    rate = "600/min"
