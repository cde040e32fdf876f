from amm_positions.exceptions import DivisionByZero, MathOverflow

from .shared import UINT_256_MAX


class FullMathModule:
    """Math Module for computing (a * b / denominator) with uint256 behavior"""

    @classmethod
    def mul_div(cls, numerator_1: int, numerator_2: int, denominator: int) -> int:
        """
        Computes the result of (numerator_1 * numerator_2) / denominator.
        Returns value as uint256, rounded down.  The intermediate product is computed at full width, so the
        product itself may exceed a uint256 as long as the quotient does not.

        :raises DivisionByZero: if denominator is 0
        :raises MathOverflow: if the result exceeds UINT_256_MAX
        """
        if denominator == 0:
            raise DivisionByZero("Mul Div Denominator is Zero")

        result = (numerator_1 * numerator_2) // denominator
        if result > UINT_256_MAX:
            raise MathOverflow(f"Value {result} overflows UINT256")
        return result

    @classmethod
    def mul_div_rounding_up(cls, numerator_1: int, numerator_2: int, denominator: int) -> int:
        """
        Computes the result of (numerator_1 * numerator_2) / denominator.
        Returns value as uint256 rounded up
        """
        result = cls.mul_div(numerator_1, numerator_2, denominator)

        if (numerator_1 * numerator_2) % denominator > 0:
            if result >= UINT_256_MAX:
                raise MathOverflow("Mul Div Rounding Up Overflows when Rounding")
            result += 1

        return result

    @classmethod
    def div_rounding_up(cls, numerator: int, denominator: int) -> int:
        """Returns ceil(numerator / denominator)"""
        if denominator == 0:
            raise DivisionByZero("Division Rounding Up by Zero")

        return numerator // denominator + (1 if numerator % denominator > 0 else 0)
