"""Ready-made producers for producer-backed generators.

A producer is any object with a zero-argument next() method. It owns its
state, so the registry never remembers what it returned:

    >>> Customer.generator_for("email", producer=FakerValue("email", seed=42))
    >>> Order.generator_for("number", producer=Sequence("ORD-{n:05d}"))
    >>> Order.generator_for("status", producer=Weighted({"completed": 60, "pending": 40}))

All producers backed by Faker support deterministic seeding for
reproducible tests.
"""

from __future__ import annotations

import itertools
from abc import ABC, abstractmethod
from collections import OrderedDict
from collections.abc import Iterable
from typing import Any

from faker import Faker


class Producer(ABC):
    """Base class for stateful value producers.

    Producers are also iterators, so they can be consumed directly:

        >>> list(itertools.islice(Sequence(), 3))
        [1, 2, 3]
    """

    @abstractmethod
    def next(self) -> Any:  # pragma: no cover - abstract method
        """Return the next value."""
        ...

    def __iter__(self) -> Producer:
        return self

    def __next__(self) -> Any:
        return self.next()


class Sequence(Producer):
    """Counter, optionally rendered through a str.format template.

    Args:
        template: Format string receiving the counter as ``n``. When None the
            bare integer is produced.
        start: First counter value.

    Example:
        >>> numbers = Sequence("user{n}@example.com")
        >>> numbers.next(), numbers.next()
        ('user1@example.com', 'user2@example.com')
    """

    def __init__(self, template: str | None = None, start: int = 1) -> None:
        self.template = template
        self._counter = itertools.count(start)

    def next(self) -> Any:
        n = next(self._counter)
        return n if self.template is None else self.template.format(n=n)


class Cycle(Producer):
    """Repeat a fixed list of values forever.

    Example:
        >>> colors = Cycle(["red", "green"])
        >>> [colors.next() for _ in range(3)]
        ['red', 'green', 'red']
    """

    def __init__(self, values: Iterable[Any]) -> None:
        self.values = list(values)
        if not self.values:
            msg = "Cycle requires at least one value"
            raise ValueError(msg)
        self._values = itertools.cycle(self.values)

    def next(self) -> Any:
        return next(self._values)


class FakerValue(Producer):
    """Value from a Faker provider method.

    Args:
        provider: Name of the Faker provider method (e.g. "email", "name").
        seed: Seed for reproducible values; unseeded when None.
        locale: Faker locale.
        **kwargs: Arguments passed to the provider on every call.

    Raises:
        AttributeError: If Faker has no such provider.

    Example:
        >>> emails = FakerValue("email", seed=42)
        >>> emails.next()  # doctest: +SKIP
        'john87@example.org'
    """

    def __init__(
        self,
        provider: str,
        *,
        seed: int | None = None,
        locale: str | None = None,
        **kwargs: Any,
    ) -> None:
        self.provider = provider
        self.kwargs = kwargs
        self.fake = Faker(locale)
        if seed is not None:
            self.fake.seed_instance(seed)
        self._method = getattr(self.fake, provider)

    def next(self) -> Any:
        return self._method(**self.kwargs)


class Weighted(Producer):
    """Random choice following relative weights.

    Args:
        weights: Mapping of values to their relative weights.
            Weights are relative, not percentages.
        seed: Seed for reproducible choices.

    Example:
        >>> statuses = Weighted({"completed": 3, "pending": 1}, seed=42)  # 75% / 25%
        >>> statuses.next() in {"completed", "pending"}
        True
    """

    def __init__(self, weights: dict[Any, int], *, seed: int | None = None) -> None:
        if not weights or sum(weights.values()) <= 0:
            msg = "Weighted requires at least one positive weight"
            raise ValueError(msg)
        self.values = list(weights.keys())
        self.weights = list(weights.values())
        total = sum(self.weights)
        self.probabilities = [w / total for w in self.weights]
        self.fake = Faker()
        if seed is not None:
            self.fake.seed_instance(seed)

    def next(self) -> Any:
        return self.fake.random_element(elements=self._build_weighted_elements())

    def _build_weighted_elements(self) -> OrderedDict[Any, float]:
        """Build elements OrderedDict for Faker's random_element."""
        return OrderedDict(zip(self.values, self.probabilities, strict=True))
