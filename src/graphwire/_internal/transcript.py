from __future__ import annotations

import builtins
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from importlib.metadata import PackageNotFoundError, version
from inspect import Parameter
from textwrap import dedent, indent
from typing import Any, TypeVar, get_args, get_origin

from graphwire._internal.descriptors import (
    ComponentDescriptor,
    ConstructorRecipe,
    FactoryRecipe,
    Quantifier,
    ResolvedInstance,
)
from graphwire._internal.engine import ResolvedArgument
from graphwire._internal.keys import capability_key
from graphwire.exceptions import GraphWireConfigurationError

_INDENT = " " * 4
_GENERATOR_SOURCE = "graphwire._internal.transcript.TranscriptRenderer.render"
logger = logging.getLogger(__name__)

MODULE_TEMPLATE = dedent(
    '''
    """{docstring}"""

    from __future__ import annotations

    {imports_block}


    def {function_name}() -> {return_type}:
    {body_block}
    ''',
).strip()


@dataclass(frozen=True, slots=True)
class TranscriptArgument:
    """One call argument of a recorded construction."""

    parameter: Parameter
    quantifier: Quantifier
    container: type[Any]
    symbols: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class TranscriptStatement:
    """One recorded construction: ``symbol = recipe(arguments...)``."""

    symbol: str
    descriptor: ComponentDescriptor
    arguments: tuple[TranscriptArgument, ...]

    @property
    def dependencies(self) -> tuple[str, ...]:
        """Return the statement symbols referenced by the arguments."""
        return tuple(
            dict.fromkeys(
                statement_symbol(symbol)
                for argument in self.arguments
                for symbol in argument.symbols
            ),
        )


def statement_symbol(symbol: str) -> str:
    """Strip a ``[i]`` element suffix from a factory array element symbol."""
    return symbol.split("[", 1)[0]


class TranscriptRecorder:
    """Append-only log of every real construction made by a context, in order."""

    def __init__(self) -> None:
        self._statements: dict[str, TranscriptStatement] = {}

    def record(
        self,
        *,
        descriptor: ComponentDescriptor,
        symbol: str,
        arguments: Sequence[ResolvedArgument],
    ) -> None:
        self._statements[symbol] = TranscriptStatement(
            symbol=symbol,
            descriptor=descriptor,
            arguments=tuple(
                TranscriptArgument(
                    parameter=requirement.parameter,
                    quantifier=requirement.quantifier,
                    container=requirement.container,
                    symbols=tuple(instance.symbolic_name for instance in instances),
                )
                for requirement, instances in arguments
            ),
        )

    @property
    def statements(self) -> list[TranscriptStatement]:
        return list(self._statements.values())

    def closure(self, root_symbol: str) -> list[TranscriptStatement]:
        """Return the statements ``root_symbol`` depends on, in recorded order.

        Args:
            root_symbol: Symbol of the root instance, possibly an array element.

        Raises:
            GraphWireConfigurationError: If the root was never constructed here.

        """
        root = statement_symbol(root_symbol)
        if root not in self._statements:
            msg = f"Symbol {root_symbol} was not constructed by this context."
            raise GraphWireConfigurationError(msg)

        needed: set[str] = set()
        pending = [root]
        while pending:
            symbol = pending.pop()
            if symbol in needed:
                continue
            needed.add(symbol)
            pending.extend(self._statements[symbol].dependencies)
        return [statement for statement in self._statements.values() if statement.symbol in needed]

    def __len__(self) -> int:
        return len(self._statements)


class TranscriptRenderer:
    """Render recorded constructions as an importable Python module.

    Executing the module and calling the generated function rebuilds a graph
    isomorphic to the live one: every construction appears once, in the order
    it happened, with arguments referring to earlier symbols.
    """

    def render(
        self,
        *,
        recorder: TranscriptRecorder,
        root: ResolvedInstance,
        capability: Any,
        function_name: str = "create",
    ) -> str:
        """Render the transcript that rebuilds ``root``.

        Args:
            recorder: Recorder the root was resolved with.
            root: Resolved root instance.
            capability: Capability the root was requested as.
            function_name: Name of the generated factory function.

        Raises:
            GraphWireConfigurationError: If a referenced type is not importable.

        """
        if not function_name.isidentifier():
            msg = f"Transcript function name {function_name!r} is not a valid identifier."
            raise GraphWireConfigurationError(msg)

        statements = recorder.closure(root.symbolic_name)
        modules: set[str] = set()
        lines = [self._render_statement(statement, modules=modules) for statement in statements]
        lines.append(f"return {root.symbolic_name}")
        return_type = type_expression(capability, modules=modules)

        imports_block = "\n".join(f"import {module}" for module in sorted(modules))
        module = MODULE_TEMPLATE.format(
            docstring=self._render_docstring(capability=capability, statements=statements),
            imports_block=imports_block,
            function_name=function_name,
            return_type=return_type,
            body_block=indent("\n".join(lines), _INDENT),
        )
        logger.info(
            "Rendered transcript for %s with %d statements",
            capability_key(capability),
            len(statements),
        )
        return f"{module}\n"

    def _render_statement(self, statement: TranscriptStatement, *, modules: set[str]) -> str:
        recipe = statement.descriptor.recipe
        if isinstance(recipe, ConstructorRecipe):
            target = type_expression(statement.descriptor.concrete_type, modules=modules)
        elif isinstance(recipe, FactoryRecipe):
            owner = type_expression(recipe.owner, modules=modules)
            target = f"{owner}.{recipe.factory.__name__}"
        else:
            msg = f"Statement {statement.symbol} has no recipe."
            raise GraphWireConfigurationError(msg)

        arguments = ", ".join(self._render_argument(argument) for argument in statement.arguments)
        return f"{statement.symbol} = {target}({arguments})"

    def _render_argument(self, argument: TranscriptArgument) -> str:
        if argument.quantifier is Quantifier.SINGLE:
            expression = argument.symbols[0]
        elif argument.container is list:
            expression = f"[{', '.join(argument.symbols)}]"
        elif len(argument.symbols) == 1:
            expression = f"({argument.symbols[0]},)"
        else:
            expression = f"({', '.join(argument.symbols)})"

        if argument.parameter.kind is Parameter.POSITIONAL_ONLY:
            return expression
        return f"{argument.parameter.name}={expression}"

    def _render_docstring(
        self,
        *,
        capability: Any,
        statements: list[TranscriptStatement],
    ) -> str:
        lines = [
            f"Construction transcript for {capability_key(capability)}.",
            "",
            f"Generated by: {_GENERATOR_SOURCE}",
            f"graphwire version used for generation: {self._resolve_version()}",
            f"Statements: {len(statements)}",
        ]
        return "\n".join(lines) + "\n"

    def _resolve_version(self) -> str:
        try:
            return version("graphwire")
        except PackageNotFoundError:
            return "unknown"


def type_expression(value: Any, *, modules: set[str]) -> str:
    """Return a source expression naming ``value`` and collect the modules it needs.

    Args:
        value: Class or closed generic alias.
        modules: Set receiving the module names to import.

    Raises:
        GraphWireConfigurationError: If ``value`` cannot be referenced by import.

    """
    origin = get_origin(value)
    if origin is not None:
        arguments = ", ".join(type_expression(argument, modules=modules) for argument in get_args(value))
        return f"{type_expression(origin, modules=modules)}[{arguments}]"

    if value is None or value is type(None):
        return "None"
    if value is Ellipsis:
        return "..."
    if isinstance(value, TypeVar):
        msg = f"Cannot reference unbound type parameter {value!r} in a transcript."
        raise GraphWireConfigurationError(msg)

    module = getattr(value, "__module__", None)
    qualname = getattr(value, "__qualname__", None)
    if module is None or qualname is None:
        msg = f"Cannot reference {value!r} in a transcript."
        raise GraphWireConfigurationError(msg)
    if module == builtins.__name__:
        return qualname
    if "<locals>" in qualname or module == "__main__":
        msg = f"Type {module}.{qualname} is not importable and cannot appear in a transcript."
        raise GraphWireConfigurationError(msg)
    modules.add(module)
    return f"{module}.{qualname}"
