"""
LedgerParameters -- the kernel's view of configuration.

The kernel never reads configuration files.  rental_config compiles a
configuration set and bridges it into this frozen value object
(rental_config.bridges.build_ledger_parameters).
"""

from dataclasses import dataclass

MIN_RENTAL_DAYS = 1
FEE_PERCENT = 2
SECONDS_PER_DAY = 86_400


@dataclass(frozen=True)
class LedgerParameters:
    """
    Constants governing issuance and leasing.

    Guarantees (checked in __post_init__):
        - mint_price >= 0
        - supply_cap > 0
        - 0 <= fee_percent <= 100
        - min_rental_days >= 1
        - seconds_per_day > 0
    """

    mint_price: int
    supply_cap: int
    fee_percent: int = FEE_PERCENT
    min_rental_days: int = MIN_RENTAL_DAYS
    seconds_per_day: int = SECONDS_PER_DAY

    def __post_init__(self) -> None:
        if self.mint_price < 0:
            raise ValueError(f"mint_price must be >= 0, got {self.mint_price}")
        if self.supply_cap <= 0:
            raise ValueError(f"supply_cap must be > 0, got {self.supply_cap}")
        if not 0 <= self.fee_percent <= 100:
            raise ValueError(f"fee_percent must be in 0..100, got {self.fee_percent}")
        if self.min_rental_days < 1:
            raise ValueError(
                f"min_rental_days must be >= 1, got {self.min_rental_days}"
            )
        if self.seconds_per_day <= 0:
            raise ValueError(
                f"seconds_per_day must be > 0, got {self.seconds_per_day}"
            )
