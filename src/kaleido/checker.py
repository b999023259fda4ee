"""
Call-Site Arity Checker
=======================

Arity checking is the only semantic analysis the front end performs. The
checker remembers the prototype of every extern declaration and function
definition it has accepted and verifies each call in later bodies:

- the callee must have been declared (extern) or defined (def) already
- the call must pass exactly as many arguments as the prototype names

A definition's own prototype is registered before its body is checked,
so recursive calls are accepted. A definition that fails the check is not
registered. Anonymous top-level wrappers are never registered.

Usage
-----
>>> from kaleido.checker import ArityChecker
>>> from kaleido.driver import parse_program
>>> report = parse_program("extern sin(x); sin(1, 2)")
>>> errors = ArityChecker().check_all(report.entities)
>>> errors[0].message
"Incorrect # arguments passed: 'sin' expects 1 argument, got 2"
"""

from typing import Iterable, Union

from kaleido.ast import ASTVisitor, Call, FunctionDef, Prototype
from kaleido.errors import ArgumentCountError, KSemanticError, UnknownFunctionError


Entity = Union[FunctionDef, Prototype]


class _CallCollector(ASTVisitor):
    """Collects every Call node in an expression, outermost first."""

    def __init__(self):
        self.calls: list[Call] = []

    def visit_Call(self, node: Call):
        self.calls.append(node)
        self.generic_visit(node)


class ArityChecker:
    """
    Checks call sites against known prototypes.

    Attributes:
        prototypes: Known functions by name (latest declaration wins)
    """

    def __init__(self):
        self.prototypes: dict[str, Prototype] = {}

    def declare(self, proto: Prototype) -> None:
        """Register a prototype without checking anything."""
        if not proto.is_anonymous:
            self.prototypes[proto.name] = proto

    def check(self, entity: Entity) -> None:
        """
        Check one entity and register its prototype on success.

        Raises:
            UnknownFunctionError: If a call names an undeclared function
            ArgumentCountError: If a call passes the wrong number of arguments
        """
        if isinstance(entity, Prototype):
            self.declare(entity)
            return

        previous = self.prototypes.get(entity.proto.name)
        self.declare(entity.proto)
        try:
            self._check_calls(entity)
        except KSemanticError:
            # Undo the registration of a rejected definition
            if not entity.is_anonymous:
                if previous is None:
                    del self.prototypes[entity.proto.name]
                else:
                    self.prototypes[entity.proto.name] = previous
            raise

    def _check_calls(self, function: FunctionDef) -> None:
        collector = _CallCollector()
        collector.visit(function.body)

        for call in collector.calls:
            proto = self.prototypes.get(call.callee)
            if proto is None:
                raise UnknownFunctionError(call.callee, location=call.location)
            if proto.arity != len(call.args):
                raise ArgumentCountError(
                    call.callee,
                    expected=proto.arity,
                    actual=len(call.args),
                    location=call.location,
                )

    def check_all(self, entities: Iterable[Entity]) -> list[KSemanticError]:
        """Check entities in order, collecting errors instead of raising."""
        errors: list[KSemanticError] = []
        for entity in entities:
            try:
                self.check(entity)
            except KSemanticError as e:
                errors.append(e)
        return errors
