def validate_positive_integer(type_: object, value: int) -> None:
    if value <= 0:
        raise ValueError("Value must be a positive integer")


def validate_bits_per_sample(type_: object, value: int) -> None:
    """Validate that bits per sample gives byte-aligned frames."""
    if value <= 0 or value % 8 != 0:
        raise ValueError("Bits per sample must be a positive multiple of 8")


def validate_non_negative_integer(type_: object, value: int) -> None:
    if value < 0:
        raise ValueError("Value must not be negative")
