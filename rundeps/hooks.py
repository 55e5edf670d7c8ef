"""Explicit composition of dependency checks into a host's run lifecycle."""

from __future__ import annotations

import logging
from typing import Protocol

from .dependency import Dependency, DependencySpec, PatternLike
from .watcher import ChangeDetector

logger = logging.getLogger(__name__)


class RunHooks(Protocol):
    """Callbacks a host invokes around each test run."""

    def on_initialize(self, host: ChangeDetector) -> None: ...

    def before_run(self) -> None: ...

    def on_interrupt(self) -> None: ...


class Registrar:
    """Holds the hook sets a host runs, in the order they were registered.

    Usage::

        registrar = Registrar()
        registrar.add(
            name="database",
            command="pg_isready",
            satisfied_pattern=r"accepting connections",
            errors_pattern=r"error: (.*)",
        )
        registrar.initialize(watcher)
        registrar.before_run()  # blocks until every dependency is satisfied
    """

    def __init__(self) -> None:
        self._hooks: list[RunHooks] = []

    @property
    def hooks(self) -> list[RunHooks]:
        return list(self._hooks)

    @property
    def dependencies(self) -> list[Dependency]:
        return [hook for hook in self._hooks if isinstance(hook, Dependency)]

    def register(self, hooks: RunHooks) -> RunHooks:
        self._hooks.append(hooks)
        return hooks

    def add(
        self,
        spec: DependencySpec | None = None,
        *,
        name: str | None = None,
        command: str | None = None,
        satisfied_pattern: PatternLike = None,
        errors_pattern: PatternLike = None,
    ) -> Dependency:
        """Build a dependency and register its hooks.

        Either pass a :class:`DependencySpec` or the individual fields, not both.
        A dependency without a command or satisfied pattern is accepted here; the
        omission is reported when it is first checked.
        """
        if spec is None:
            spec = DependencySpec(
                name=name,
                command=command,
                satisfied_pattern=satisfied_pattern,
                errors_pattern=errors_pattern,
            )
        elif any(value is not None for value in (name, command, satisfied_pattern, errors_pattern)):
            raise TypeError("Pass either a DependencySpec or individual fields, not both.")
        dependency = spec.build()
        _ = self.register(dependency)
        logger.debug("Registered %r", dependency)
        return dependency

    def initialize(self, host: ChangeDetector) -> None:
        for hooks in self._hooks:
            hooks.on_initialize(host)

    def before_run(self) -> None:
        for hooks in self._hooks:
            hooks.before_run()

    def interrupt(self) -> None:
        for hooks in self._hooks:
            hooks.on_interrupt()
