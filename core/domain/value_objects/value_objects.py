"""Domain value objects - pure Python immutable types."""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Iterable, Optional


@dataclass(frozen=True)
class Budget:
    """
    Immutable amount of a given token.

    Used both for a task's spending limit and an agent's estimated cost
    per step. Amounts are only comparable when the tokens match.

    CRITICAL: Always use Decimal, never float!
    """
    amount: Decimal
    token: str

    def __post_init__(self):
        if not isinstance(self.amount, Decimal):
            try:
                object.__setattr__(self, 'amount', Decimal(str(self.amount)))
            except InvalidOperation:
                raise ValueError(f"Invalid budget amount: {self.amount!r}")

        if self.amount < 0:
            raise ValueError(f"Budget amount cannot be negative: {self.amount}")

        if not isinstance(self.token, str) or not self.token:
            raise ValueError("Budget token must be a non-empty string")

    def __str__(self) -> str:
        return f"{self.amount} {self.token}"

    def same_token(self, other: 'Budget') -> bool:
        """Check whether two amounts are denominated in the same token."""
        return self.token == other.token

    def exceeds(self, other: 'Budget') -> bool:
        """
        Check if this amount is larger than another of the same token.

        Amounts in different tokens are never compared and never exceed.
        """
        return self.same_token(other) and self.amount > other.amount


def _frozen(values: Optional[Iterable[str]]) -> frozenset:
    return frozenset(values) if values else frozenset()


@dataclass(frozen=True)
class AgentRequirements:
    """
    Capabilities and networks a step needs from its worker.

    An empty ``networks`` set means the step runs on any network.
    """
    capabilities: frozenset = field(default_factory=frozenset)
    networks: frozenset = field(default_factory=frozenset)

    def __post_init__(self):
        object.__setattr__(self, 'capabilities', _frozen(self.capabilities))
        object.__setattr__(self, 'networks', _frozen(self.networks))

    @classmethod
    def of(
        cls,
        capabilities: Iterable[str],
        networks: Optional[Iterable[str]] = None,
    ) -> "AgentRequirements":
        """Build requirements from plain iterables."""
        return cls(capabilities=_frozen(capabilities), networks=_frozen(networks))
