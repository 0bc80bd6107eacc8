"""
Phone number normalization and display formatting.

``phone_digits`` is the normalization the vendor duplicate predicate uses;
``format_phone`` is the display form shown next to vendor records.
"""


def phone_digits(phone: str) -> str:
    """Keep only the digit characters of ``phone``."""
    return "".join(ch for ch in phone if ch.isdigit())


def strip_phone_formatting(phone: str) -> str:
    """Keep digits and a leading-country-code ``+``."""
    return "".join(ch for ch in phone if ch.isdigit() or ch == "+")


def format_phone(phone: str) -> str:
    """
    Format a phone number for display based on its digit count.

    Examples:
        "5551234"      -> "555-1234"
        "5551234567"   -> "(555) 123-4567"
        "15551234567"  -> "+1 (555) 123-4567"
        "445551234567" -> "+44 (555) 123-4567"

    Lengths with no sensible format (8 or 9 digits) are returned unchanged.
    """
    digits = phone_digits(phone)
    count = len(digits)

    if count == 0:
        return ""
    if count <= 3:
        return digits
    if count <= 7:
        return f"{digits[:3]}-{digits[3:]}"
    if count == 10:
        return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"
    if count == 11 and digits.startswith("1"):
        return f"+1 ({digits[1:4]}) {digits[4:7]}-{digits[7:]}"
    if count > 10:
        country_len = count - 10
        country, rest = digits[:country_len], digits[country_len:]
        return f"+{country} ({rest[:3]}) {rest[3:6]}-{rest[6:]}"
    return phone
