"""Registry of lab steps keyed by a stable identifier.

Steps are plain functions taking a context object. Binding a context
turns each registered function into a zero-argument ``TestStep``
operation, so no step is ever evaluated from a string.
"""

from __future__ import annotations

import functools
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, TypeVar

from .models import Expectation, TestStep

StepFunc = Callable[[Any], Any]
F = TypeVar("F", bound=StepFunc)


@dataclass(frozen=True)
class StepDefinition:
    """A registered step before it is bound to a context."""

    lab: str
    step_id: str
    description: str
    func: StepFunc
    expectation: Expectation
    source: str | None = None

    @property
    def key(self) -> str:
        return step_key(self.lab, self.step_id)

    def bind(self, context: Any) -> TestStep:
        return TestStep(
            lab=self.lab,
            step_id=self.step_id,
            description=self.description,
            operation=functools.partial(self.func, context),
            expectation=self.expectation,
            source=self.source,
        )


def step_key(lab: str, step_id: str) -> str:
    return f"{lab}.{step_id}"


class StepRegistry:
    """Ordered collection of step definitions."""

    def __init__(self) -> None:
        self._steps: dict[str, StepDefinition] = {}

    def __len__(self) -> int:
        return len(self._steps)

    def __contains__(self, key: object) -> bool:
        return key in self._steps

    def register(self, definition: StepDefinition) -> StepDefinition:
        if definition.key in self._steps:
            raise ValueError(f"Duplicate step id: {definition.key}")
        self._steps[definition.key] = definition
        return definition

    def step(
        self,
        lab: str,
        step_id: str,
        description: str,
        *,
        min_results: int = 1,
        source: str | None = None,
    ) -> Callable[[F], F]:
        """Decorator registering ``func(context)`` as a lab step."""
        def decorator(func: F) -> F:
            self.register(StepDefinition(
                lab=lab,
                step_id=step_id,
                description=description,
                func=func,
                expectation=Expectation(min_results=min_results),
                source=source,
            ))
            return func
        return decorator

    def get(self, lab: str, step_id: str) -> StepDefinition:
        return self._steps[step_key(lab, step_id)]

    @property
    def labs(self) -> list[str]:
        """Lab names in declaration order."""
        return list(dict.fromkeys(d.lab for d in self._steps.values()))

    def definitions(self, labs: Iterable[str] | None = None) -> list[StepDefinition]:
        """Definitions in declaration order, optionally filtered by lab."""
        if labs is None:
            return list(self._steps.values())
        wanted = set(labs)
        unknown = wanted.difference(self.labs)
        if unknown:
            raise KeyError(f"Unknown lab(s): {', '.join(sorted(unknown))}")
        return [d for d in self._steps.values() if d.lab in wanted]

    def bind(self, context: Any, labs: Iterable[str] | None = None) -> list[TestStep]:
        """Bind a context to every selected step."""
        return [d.bind(context) for d in self.definitions(labs)]
