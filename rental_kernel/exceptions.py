"""
Typed Exception Hierarchy for the Rental Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Every rejection of a ledger operation is a typed exception with:
  1. A TYPED class (catch by type, not message)
  2. A CODE class attribute (machine-readable, API-safe)
  3. Structured DATA attributes (token_id, account, amounts)

Example:
    try:
        marketplace.accept_lease(token_id, payment, renter)
    except IncorrectPaymentError as e:
        api_response(code=e.code, expected=e.expected, received=e.received)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    RentalKernelError (base)
    |
    +-- AuthorizationError        caller lacks the relationship or role
    |   +-- NotOwnerError
    |   +-- NotOwnerOrApprovedError
    |   +-- NotOperatorError
    |   +-- UnapprovedMarketplaceError
    |   +-- SelfRentalError
    |
    +-- ValidationError           input violates a precondition
    |   +-- InsufficientPaymentError
    |   +-- IncorrectPaymentError
    |   +-- InvalidExpiryError
    |   +-- RentalPeriodTooShortError
    |   +-- SupplyExhaustedError
    |   +-- InvalidAmountError
    |   +-- InvalidRecipientError
    |
    +-- StateConflictError        transition illegal in the current state
    |   +-- AssetNotFoundError
    |   +-- DoubleDelegationError
    |   +-- NotListedError
    |   +-- NoActiveDelegationError
    |   +-- TokenInUseError
    |
    +-- FundsError                host fund-movement primitive failed
        +-- InsufficientFundsError
        +-- FundsRejectedError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                      | When Raised
----------------|---------------------------|-----------------------------------
Authorization   | NOT_OWNER                 | Caller does not own the asset
                | NOT_OWNER_OR_APPROVED     | Caller neither owns nor is approved
                | NOT_OPERATOR              | Withdrawal by a non-operator
                | UNAPPROVED_MARKETPLACE    | Owner has not approved marketplace
                | SELF_RENTAL               | Owner tries to rent own asset
----------------|---------------------------|-----------------------------------
Validation      | INSUFFICIENT_PAYMENT      | Issue payment below price floor
                | INCORRECT_PAYMENT         | Payment differs from exact rent
                | INVALID_EXPIRY            | Expiry not in the future
                | RENTAL_PERIOD_TOO_SHORT   | duration_days < MIN_RENTAL_DAYS
                | SUPPLY_EXHAUSTED          | Supply cap reached
                | INVALID_AMOUNT            | Negative or non-integer amount
                | INVALID_RECIPIENT         | Target is the zero account
----------------|---------------------------|-----------------------------------
State conflict  | ASSET_NOT_FOUND           | Token id was never issued
                | DOUBLE_DELEGATION         | Active delegation already exists
                | NOT_LISTED                | No live lease for the asset
                | NO_ACTIVE_DELEGATION      | Nothing to revoke
                | TOKEN_IN_USE              | Transfer while delegated
----------------|---------------------------|-----------------------------------
Funds           | INSUFFICIENT_FUNDS        | Debit exceeds balance
                | FUNDS_REJECTED            | Account refuses incoming funds

None of these are retried by the kernel.  The operation that raised them has
been rolled back in full; the caller corrects the input and resubmits.
"""


class RentalKernelError(Exception):
    """
    Base exception for all rental kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "RENTAL_KERNEL_ERROR"


# Authorization


class AuthorizationError(RentalKernelError):
    """Base exception for authorization failures."""

    code: str = "AUTHORIZATION_ERROR"


class NotOwnerError(AuthorizationError):
    """Caller is not the owner of the asset."""

    code: str = "NOT_OWNER"

    def __init__(self, token_id: int, account: object):
        self.token_id = token_id
        self.account = str(account)
        super().__init__(f"Account {account} is not the owner of token {token_id}")


class NotOwnerOrApprovedError(AuthorizationError):
    """Caller is neither the owner nor approved for the asset."""

    code: str = "NOT_OWNER_OR_APPROVED"

    def __init__(self, token_id: int, account: object):
        self.token_id = token_id
        self.account = str(account)
        super().__init__(
            f"Account {account} is not owner nor approved for token {token_id}"
        )


class NotOperatorError(AuthorizationError):
    """Caller is not the privileged operator."""

    code: str = "NOT_OPERATOR"

    def __init__(self, account: object):
        self.account = str(account)
        super().__init__(f"Account {account} is not the operator")


class UnapprovedMarketplaceError(AuthorizationError):
    """Owner has not approved the marketplace to delegate usage."""

    code: str = "UNAPPROVED_MARKETPLACE"

    def __init__(self, token_id: int, marketplace: object):
        self.token_id = token_id
        self.marketplace = str(marketplace)
        super().__init__(
            f"Marketplace {marketplace} is not approved for token {token_id}"
        )


class SelfRentalError(AuthorizationError):
    """The owner tried to accept a lease on their own asset."""

    code: str = "SELF_RENTAL"

    def __init__(self, token_id: int, account: object):
        self.token_id = token_id
        self.account = str(account)
        super().__init__(f"Account {account} cannot rent its own token {token_id}")


# Validation


class ValidationError(RentalKernelError):
    """Base exception for input validation failures."""

    code: str = "VALIDATION_ERROR"


class InsufficientPaymentError(ValidationError):
    """Issuance payment is below the price floor."""

    code: str = "INSUFFICIENT_PAYMENT"

    def __init__(self, price: int, received: int):
        self.price = price
        self.received = received
        super().__init__(f"Insufficient payment: price {price}, received {received}")


class IncorrectPaymentError(ValidationError):
    """Payment does not exactly match the amount due."""

    code: str = "INCORRECT_PAYMENT"

    def __init__(self, token_id: int, expected: int, received: int):
        self.token_id = token_id
        self.expected = expected
        self.received = received
        super().__init__(
            f"Incorrect payment for token {token_id}: "
            f"expected {expected}, received {received}"
        )


class InvalidExpiryError(ValidationError):
    """Delegation expiry is not strictly after the current time."""

    code: str = "INVALID_EXPIRY"

    def __init__(self, token_id: int, expires: int, now: int):
        self.token_id = token_id
        self.expires = expires
        self.now = now
        super().__init__(
            f"Invalid expiry {expires} for token {token_id} (now {now})"
        )


class RentalPeriodTooShortError(ValidationError):
    """Lease duration is below the minimum rental days."""

    code: str = "RENTAL_PERIOD_TOO_SHORT"

    def __init__(self, duration_days: int, minimum_days: int):
        self.duration_days = duration_days
        self.minimum_days = minimum_days
        super().__init__(
            f"Rental period too short: {duration_days} day(s), "
            f"minimum {minimum_days}"
        )


class SupplyExhaustedError(ValidationError):
    """Issuance would exceed the supply cap."""

    code: str = "SUPPLY_EXHAUSTED"

    def __init__(self, supply_cap: int):
        self.supply_cap = supply_cap
        super().__init__(f"Supply exhausted: cap of {supply_cap} reached")


class InvalidAmountError(ValidationError):
    """Amount is negative or not an integer."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, field: str, value: object):
        self.field = field
        self.value = repr(value)
        super().__init__(f"Invalid {field}: {value!r}")


class InvalidRecipientError(ValidationError):
    """Transfer or delegation target is the zero account."""

    code: str = "INVALID_RECIPIENT"

    def __init__(self, token_id: int):
        self.token_id = token_id
        super().__init__(f"Token {token_id} cannot be assigned to the zero account")


# State conflicts


class StateConflictError(RentalKernelError):
    """Base exception for illegal state transitions."""

    code: str = "STATE_CONFLICT"


class AssetNotFoundError(StateConflictError):
    """Token id has not been issued."""

    code: str = "ASSET_NOT_FOUND"

    def __init__(self, token_id: int):
        self.token_id = token_id
        super().__init__(f"Token not found: {token_id}")


class DoubleDelegationError(StateConflictError):
    """An active delegation already exists for the asset."""

    code: str = "DOUBLE_DELEGATION"

    def __init__(self, token_id: int, delegate: object, expires: int):
        self.token_id = token_id
        self.delegate = str(delegate)
        self.expires = expires
        super().__init__(
            f"Token {token_id} already delegated to {delegate} until {expires}"
        )


class NotListedError(StateConflictError):
    """No live lease exists for the asset."""

    code: str = "NOT_LISTED"

    def __init__(self, token_id: int):
        self.token_id = token_id
        super().__init__(f"Token {token_id} is not for rent")


class NoActiveDelegationError(StateConflictError):
    """No delegation is stored for the asset."""

    code: str = "NO_ACTIVE_DELEGATION"

    def __init__(self, token_id: int):
        self.token_id = token_id
        super().__init__(f"Token {token_id} is not in use")


class TokenInUseError(StateConflictError):
    """Ownership transfer blocked by an active delegation."""

    code: str = "TOKEN_IN_USE"

    def __init__(self, token_id: int, delegate: object, expires: int):
        self.token_id = token_id
        self.delegate = str(delegate)
        self.expires = expires
        super().__init__(
            f"Token {token_id} still in use by {delegate} until {expires}"
        )


# Funds


class FundsError(RentalKernelError):
    """Base exception for fund-movement failures."""

    code: str = "FUNDS_ERROR"


class InsufficientFundsError(FundsError):
    """Debit exceeds the account balance."""

    code: str = "INSUFFICIENT_FUNDS"

    def __init__(self, account: object, balance: int, requested: int):
        self.account = str(account)
        self.balance = balance
        self.requested = requested
        super().__init__(
            f"Insufficient funds in {account}: balance {balance}, "
            f"requested {requested}"
        )


class FundsRejectedError(FundsError):
    """Account does not accept incoming funds."""

    code: str = "FUNDS_REJECTED"

    def __init__(self, account: object, amount: int):
        self.account = str(account)
        self.amount = amount
        super().__init__(f"Account {account} rejected incoming funds of {amount}")
