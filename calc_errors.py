"""Exceptions raised while evaluating a calculator line."""


class CalcError(Exception):
    """Base class for every per-line evaluation failure"""
    pass


class LexError(CalcError):
    """Invalid character or malformed literal in an expression"""
    pass


class ParseError(CalcError):
    """Malformed expression, unknown function or unresolvable reference"""
    pass


class DomainError(CalcError):
    """A domain evaluator recognised the phrase but could not compute it"""
    pass
