"""
Original work Copyright 2024 The Ray Optics Simulation authors and contributors
Python translation Copyright 2026 ray-tracing-shapely authors and contributors

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at

    http://www.apache.org/licenses/LICENSE-2.0

Unless required by applicable law or agreed to in writing, software
distributed under the License is distributed on an "AS IS" BASIS,
WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
See the License for the specific language governing permissions and
limitations under the License.
"""

"""
Expression compilation module using SymPy.

Material profiles (e.g. the radial index of a GRIN lens) are given as
strings in plain or light LaTeX notation. This module parses them once,
differentiates them symbolically and returns fast numeric callables.

Key features:
- Accepts a subset of LaTeX (\\cdot, \\pi, \\sqrt{...}, \\frac{a}{b}, ^)
- Handles implicit multiplication (e.g. "2r" -> "2*r")
- Named parameters are substituted before differentiation
- Results are cached per (expression, variables, parameters)
"""

import math
import re
from functools import lru_cache
from typing import Callable, Dict, Tuple, Optional

import sympy as sp
from sympy.parsing.sympy_parser import (
    parse_expr,
    standard_transformations,
    implicit_multiplication_application,
    convert_xor
)


_REPLACEMENTS = {
    r'\cdot': '*',
    r'\times': '*',
    r'\pi': 'pi',
    r'\exp': 'exp',
    r'\ln': 'log',
    r'\log': 'log',
    r'\cosh': 'cosh',
    r'\sinh': 'sinh',
    r'\tanh': 'tanh',
    r'\cos': 'cos',
    r'\sin': 'sin',
    r'\left(': '(',
    r'\right)': ')',
}


def _matching_brace(text: str, open_idx: int, source: str) -> int:
    """Index just past the brace that closes text[open_idx]."""
    depth = 1
    i = open_idx + 1
    while i < len(text) and depth > 0:
        if text[i] == '{':
            depth += 1
        elif text[i] == '}':
            depth -= 1
        i += 1
    if depth != 0:
        raise ValueError(f"Unmatched braces in '{source}'")
    return i


def preprocess_latex(latex: str) -> str:
    """
    Convert light LaTeX notation to a string SymPy's parser accepts.

    Raises:
        ValueError: If the expression contains malformed \\sqrt or \\frac constructs.
    """
    result = latex
    for old, new in _REPLACEMENTS.items():
        result = result.replace(old, new)

    # \sqrt{x} -> sqrt(x)
    while r'\sqrt' in result:
        match = re.search(r'\\sqrt\{', result)
        if not match:
            raise ValueError(f"Malformed \\sqrt in '{latex}'")
        brace = match.end() - 1
        end = _matching_brace(result, brace, latex)
        result = result[:match.start()] + f'sqrt({result[brace + 1:end - 1]})' + result[end:]

    # \frac{a}{b} -> ((a)/(b))
    while r'\frac' in result:
        idx = result.find(r'\frac')
        start_num = result.find('{', idx)
        if start_num == -1:
            raise ValueError(f"Malformed \\frac: missing numerator in '{latex}'")
        end_num = _matching_brace(result, start_num, latex)
        if end_num >= len(result) or result[end_num] != '{':
            raise ValueError(f"Malformed \\frac: missing denominator in '{latex}'")
        end_den = _matching_brace(result, end_num, latex)
        numerator = result[start_num + 1:end_num - 1]
        denominator = result[end_num + 1:end_den - 1]
        result = result[:idx] + f'(({numerator})/({denominator}))' + result[end_den:]

    result = result.replace('^', '**')
    return result.replace('{', '(').replace('}', ')')


def _parse(expression: str, variables: Tuple[str, ...], parameters: Tuple[Tuple[str, float], ...]):
    symbols = {name: sp.Symbol(name) for name in variables}
    local_dict = dict(symbols)
    local_dict.update({name: sp.Symbol(name) for name, _ in parameters})
    transformations = standard_transformations + (implicit_multiplication_application, convert_xor)
    preprocessed = preprocess_latex(expression)
    try:
        expr = parse_expr(preprocessed, local_dict=local_dict, transformations=transformations)
    except (SyntaxError, TypeError, ValueError, sp.SympifyError) as e:
        raise ValueError(
            f"Failed to parse expression '{expression}' (preprocessed: '{preprocessed}'): {e}"
        ) from e
    expr = expr.subs({sp.Symbol(name): value for name, value in parameters})
    unknown = {s.name for s in expr.free_symbols} - set(variables)
    if unknown:
        raise ValueError(f"Expression '{expression}' uses unknown symbols: {sorted(unknown)}")
    return expr, [symbols[name] for name in variables]


@lru_cache(maxsize=128)
def _compile_cached(expression: str, variables: Tuple[str, ...],
                    parameters: Tuple[Tuple[str, float], ...]) -> Tuple[Callable, Dict[str, Callable]]:
    expr, symbols = _parse(expression, variables, parameters)
    fn = sp.lambdify(symbols, expr, modules='math')
    gradient = {
        sym.name: sp.lambdify(symbols, sp.diff(expr, sym), modules='math')
        for sym in symbols
    }
    return fn, gradient


def compile_expression(
    expression: str,
    variables: Tuple[str, ...] = ('r', 'z'),
    parameters: Optional[Dict[str, float]] = None
) -> Tuple[Callable[..., float], Dict[str, Callable[..., float]]]:
    """
    Compile an expression and its partial derivatives.

    Args:
        expression: e.g. "n_0 (1 - g^2 r^2 / 2)"
        variables: Names of the free variables, in call order
        parameters: Numeric values substituted for named constants

    Returns:
        (fn, gradient) where fn(*values) evaluates the expression and
        gradient[name](*values) evaluates its partial derivative.

    Example:
        >>> fn, grad = compile_expression("a r^2", ('r',), {'a': 2.0})
        >>> fn(3.0), grad['r'](3.0)
        (18.0, 12.0)

    Raises:
        ValueError: If the expression cannot be parsed or uses unknown symbols.
    """
    params = tuple(sorted((parameters or {}).items()))
    return _compile_cached(expression, tuple(variables), params)


# Example usage and testing
if __name__ == "__main__":
    print("Testing expression compilation with SymPy:")
    print("=" * 50)

    fn, grad = compile_expression(r"n_0 \left(1 - \frac{g^2 r^2}{2}\right)", ('r', 'z'), {'n_0': 1.6, 'g': 0.01})
    for r in (0.0, 5.0, 10.0):
        print(f"  r={r}: n={fn(r, 550.0):.6f}, dn/dr={grad['r'](r, 550.0):.6f}")

    fn, grad = compile_expression(r"\sqrt{x^2 + y^2}", ('x', 'y'))
    print(f"  |(3, 4)| = {fn(3.0, 4.0)}, d/dx = {grad['x'](3.0, 4.0)}")
    pi_fn, _ = compile_expression(r"2\pi r", ('r',))
    print(f"  2 pi r at r=1: {pi_fn(1.0)}, expected {2 * math.pi}")
