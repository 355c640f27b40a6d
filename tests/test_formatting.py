import io
import json
import unittest
from contextlib import redirect_stdout

from archipelago_pkg.config import MAX_MSE
from archipelago_pkg.utils.formatting import format_number_no_trailing_zeros
from archipelago_pkg.utils.formatting import format_progress_line
from archipelago_pkg.utils.formatting import format_result_human
from archipelago_pkg.utils.formatting import print_result_pretty


class TestNumberFormatting(unittest.TestCase):
    def test_integers_have_no_decimals(self):
        self.assertEqual(format_number_no_trailing_zeros(2.0), "2")
        self.assertEqual(format_number_no_trailing_zeros(-15), "-15")

    def test_significant_digits(self):
        self.assertEqual(format_number_no_trailing_zeros(0.5), "0.5")
        self.assertEqual(format_number_no_trailing_zeros(1 / 3), "0.333333")
        self.assertEqual(format_number_no_trailing_zeros(1 / 3, precision=2), "0.33")

    def test_sentinel_is_named(self):
        self.assertEqual(format_number_no_trailing_zeros(MAX_MSE), "max")

    def test_non_numbers_pass_through(self):
        self.assertEqual(format_number_no_trailing_zeros("n/a"), "n/a")


class TestResultFormatting(unittest.TestCase):
    def setUp(self):
        self.res = {
            "ok": True,
            "expression": "(x * x)",
            "simplified": "x**2",
            "mse": 0.0,
            "complexity": 3,
            "generations": 1,
            "early_stopped": True,
            "pareto_front": [
                {"expression": "x", "sympy": "x", "mse": 12.5, "complexity": 1},
                {"expression": "(x * x)", "sympy": "x**2", "mse": 0.0, "complexity": 3},
            ],
        }

    def test_human_text(self):
        text = format_result_human(self.res)
        lines = text.splitlines()
        self.assertEqual(lines[0], "f(x) = (x * x)")
        self.assertEqual(lines[1], "     = x**2")
        self.assertIn("Generations: 1 (early stop)", text)
        self.assertIn("Pareto front", text)
        self.assertIn("12.5", text)

    def test_print_json(self):
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            print_result_pretty(self.res, "json")
        self.assertEqual(json.loads(buffer.getvalue())["expression"], "(x * x)")

    def test_print_error(self):
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            print_result_pretty({"ok": False, "error": "bad data"}, "human")
        self.assertEqual(buffer.getvalue().strip(), "Error: bad data")

    def test_progress_line(self):
        line = format_progress_line(7, 0.25, 5, "(x + 1.00)")
        self.assertEqual(line, "[Gen 0007] MSE: 0.25 Complexity: 5  f(x) = (x + 1.00)")


if __name__ == "__main__":
    unittest.main()
