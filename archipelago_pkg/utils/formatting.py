import json
import logging
from typing import Any

from ..config import MAX_MSE
from ..config import OUTPUT_PRECISION

logger = logging.getLogger(__name__)


def format_number_no_trailing_zeros(value: float, precision: int = OUTPUT_PRECISION) -> str:
    """Format a number with ``precision`` significant digits, dropping trailing zeros."""
    try:
        num = float(value)
    except (ValueError, TypeError):
        return str(value)
    if num >= MAX_MSE:
        return "max"
    if num.is_integer() and abs(num) < 1e15:
        return str(int(num))
    return f"{num:.{precision}g}"


def format_result_human(res: dict[str, Any]) -> str:
    """Render a run result dictionary (see ``RunResult.to_dict``) as text."""
    lines = [
        f"f(x) = {res.get('expression', '')}",
        f"  MSE: {format_number_no_trailing_zeros(res.get('mse', MAX_MSE))}",
        f"  Complexity: {res.get('complexity', 0)}",
        f"  Generations: {res.get('generations', 0)}"
        + (" (early stop)" if res.get("early_stopped") else ""),
    ]
    if res.get("simplified"):
        lines.insert(1, f"     = {res['simplified']}")

    front = res.get("pareto_front") or []
    if front:
        lines.append("")
        lines.append("  Pareto front (complexity, MSE, expression):")
        for sol in front:
            lines.append(
                f"    {sol['complexity']:>4}  "
                f"{format_number_no_trailing_zeros(sol['mse']):>12}  "
                f"{sol.get('sympy') or sol['expression']}"
            )
    return "\n".join(lines)


def format_progress_line(generation: int, mse: float, complexity: int, expression: str) -> str:
    """One-line progress summary of a generation."""
    return (
        f"[Gen {generation:04d}] MSE: {format_number_no_trailing_zeros(mse)} "
        f"Complexity: {complexity}  f(x) = {expression}"
    )


def print_result_pretty(res: dict[str, Any], output_format: str = "human") -> None:
    """Print result in specified format."""
    if output_format == "json":
        print(json.dumps(res, indent=2, ensure_ascii=False))
        return
    if not res.get("ok", True):
        print("Error:", res.get("error"))
        return
    print(format_result_human(res))
