"""Restricted arithmetic evaluator for prompts classified as `Intent.ARITHMETIC`.

Supported grammar:
    Numbers (integers and decimals), `+ - * /`, `^` as exponent, unary signs and
    parentheses. Anything else, including empty input, raises `EvaluationError`.

Safety:
    The expression is parsed with `ast` in `eval` mode and walked node by node;
    nothing is ever executed. Input length, exponents and the digit count of every
    power and product are bounded before computing, so `((9^999)^999)^99` is rejected
    instead of stalling the event loop. Nesting deep enough to exhaust the parser or
    the recursion limit is reported as an invalid expression too.

Output formatting:
    Integral results are rendered without a decimal part (`"8"`), other results use
    `repr(float)` (`"3.5"`, `"0.3333333333333333"`).
"""

import ast
import math
import operator

from loph.core.errors import EvaluationError


INVALID_EXPRESSION_MESSAGE = "Expressão matemática inválida."

MAX_EXPRESSION_LENGTH = 1000
MAX_EXPONENT = 1000
# matches the default int -> str conversion limit
MAX_RESULT_DIGITS = 4300

_BINARY_OPERATORS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.Pow: operator.pow,
}

_UNARY_OPERATORS = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}


def _digits(value) -> float:
    """Approximate decimal digit count of `value` (0 for zero and |value| <= 1)."""
    if not value:
        return 0.0
    return math.log10(abs(value))


def _check_result_size(op, left, right):
    if isinstance(op, ast.Pow):
        if abs(right) > MAX_EXPONENT:
            raise EvaluationError(f"Exponent too large: {right}")
        if right > 0 and _digits(left) * right > MAX_RESULT_DIGITS:
            raise EvaluationError("Result too large")

    elif isinstance(op, ast.Mult):
        if _digits(left) + _digits(right) > MAX_RESULT_DIGITS:
            raise EvaluationError("Result too large")


def _evaluate_node(node):
    if isinstance(node, ast.Expression):
        return _evaluate_node(node.body)

    if isinstance(node, ast.Constant) and type(node.value) in (int, float):
        return node.value

    if isinstance(node, ast.UnaryOp) and type(node.op) in _UNARY_OPERATORS:
        return _UNARY_OPERATORS[type(node.op)](_evaluate_node(node.operand))

    if isinstance(node, ast.BinOp) and type(node.op) in _BINARY_OPERATORS:
        left = _evaluate_node(node.left)
        right = _evaluate_node(node.right)

        _check_result_size(node.op, left, right)

        try:
            value = _BINARY_OPERATORS[type(node.op)](left, right)
        except (ZeroDivisionError, OverflowError) as err:
            raise EvaluationError(str(err)) from err

        if isinstance(value, complex):
            raise EvaluationError("Complex result")
        return value

    raise EvaluationError(f"Unsupported expression element: {type(node).__name__}")


def _format_number(value) -> str:
    if isinstance(value, complex):
        raise EvaluationError("Complex result")
    if isinstance(value, float):
        if not math.isfinite(value):
            raise EvaluationError("Non-finite result")
        if value.is_integer():
            return str(int(value))
        return repr(value)
    try:
        return str(value)
    except ValueError as err:
        # int -> str conversion limit on very large results
        raise EvaluationError("Result too large") from err


def evaluate_expression(expression: str) -> str:
    """Evaluate an arithmetic expression and return its textual result.

    Raises:
        EvaluationError: empty or overlong input, syntax errors, excessive nesting,
            division by zero, oversized exponents or results, non-finite results.
    """
    source = (expression or "").strip()
    if not source:
        raise EvaluationError("Empty expression")
    if len(source) > MAX_EXPRESSION_LENGTH:
        raise EvaluationError(f"Expression longer than {MAX_EXPRESSION_LENGTH} characters")

    try:
        tree = ast.parse(source.replace("^", "**"), mode="eval")
    except SyntaxError as err:
        raise EvaluationError(f"Invalid syntax: {source}") from err
    except (RecursionError, MemoryError) as err:
        raise EvaluationError("Expression nested too deeply") from err

    try:
        value = _evaluate_node(tree)
    except (RecursionError, MemoryError) as err:
        raise EvaluationError("Expression nested too deeply") from err

    return _format_number(value)


def calculate(expression: str) -> str:
    """Evaluate `expression`, mapping any failure to the fixed invalid-expression reply."""
    try:
        return evaluate_expression(expression)
    except EvaluationError:
        return INVALID_EXPRESSION_MESSAGE
