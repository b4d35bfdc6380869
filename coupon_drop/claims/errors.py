class ClaimError(Exception):
    pass


class ClaimBlockedError(ClaimError):
    def __init__(self, remaining_seconds: int) -> None:
        super().__init__(f"cooldown active for {remaining_seconds}s")
        self.remaining_seconds = remaining_seconds


class PoolExhaustedError(ClaimError):
    pass


class DuplicateCodeError(ClaimError):
    def __init__(self, value: str) -> None:
        super().__init__(f"code already exists: {value}")
        self.value = value


class InvalidInputError(ClaimError):
    pass


class StoreUnavailableError(ClaimError):
    pass
