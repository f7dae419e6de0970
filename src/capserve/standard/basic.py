"""Self-contained operations: greeting and arithmetic"""

from typing import Any, Dict

from capserve.cap.response import ResponseEnvelope
from capserve.schema.descriptor import SchemaDescriptor, enum_field, number_field, string_field


GREET_SCHEMA = SchemaDescriptor.of(
    string_field("name", "Name of the person to greet"),
    enum_field("language", ["ko", "en"], "Greeting language (default: en)", required=False, default="en"),
)

CALCULATOR_SCHEMA = SchemaDescriptor.of(
    number_field("num1", "First number"),
    number_field("num2", "Second number"),
    enum_field("operator", ["+", "-", "*", "/"], "Operator (+, -, *, /)"),
)

DIVISION_BY_ZERO_MESSAGE = "Error: division by zero is not allowed."
NUMBER_TOO_LARGE_MESSAGE = "Error: the numbers are too large to calculate."

# Display symbol per operator
OPERATOR_SYMBOLS = {
    "+": "+",
    "-": "-",
    "*": "×",
    "/": "÷",
}


def format_number(value: float) -> str:
    """Render a number the way a person writes it: 42, not 42.0"""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return repr(value) if isinstance(value, float) else str(value)


async def greet(args: Dict[str, Any]) -> ResponseEnvelope:
    name = args["name"]
    if args["language"] == "ko":
        greeting = f"안녕하세요, {name}님!"
    else:
        greeting = f"Hey there, {name}! 👋 Nice to meet you!"
    return ResponseEnvelope.text(greeting)


async def calculator(args: Dict[str, Any]) -> ResponseEnvelope:
    """Apply a binary operator

    Division by zero and results too large to compute are predictable
    outcomes, so they are reported as error-as-data rather than raised.
    """
    num1 = args["num1"]
    num2 = args["num2"]
    operator = args["operator"]

    if operator == "/" and num2 == 0:
        return ResponseEnvelope.error_text(DIVISION_BY_ZERO_MESSAGE)

    # Large integers overflow when mixed with floats and may exceed the
    # int to str digit limit
    try:
        if operator == "+":
            result = num1 + num2
        elif operator == "-":
            result = num1 - num2
        elif operator == "*":
            result = num1 * num2
        else:
            result = num1 / num2

        expression = f"{format_number(num1)} {OPERATOR_SYMBOLS[operator]} {format_number(num2)}"
        return ResponseEnvelope.text(f"{expression} = {format_number(result)}")
    except (OverflowError, ValueError) as e:
        return ResponseEnvelope.error_text(f"{NUMBER_TOO_LARGE_MESSAGE} ({e})")
