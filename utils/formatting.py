import re

_NON_DIGITS = re.compile(r"\D")

# kept lowercase inside a name, except as the first word
NAME_PARTICLES = {"de", "da", "do", "dos", "das", "e"}


def normalize_phone(value: str) -> str:
    return _NON_DIGITS.sub("", value or "")


def format_phone(value: str) -> str:
    """
    "41999998888" -> "(41) 99999-8888". Partial input is masked as far as it goes.
    """
    digits = normalize_phone(value)[:11]
    if len(digits) <= 2:
        return digits
    if len(digits) <= 7:
        return f"({digits[:2]}) {digits[2:]}"
    return f"({digits[:2]}) {digits[2:7]}-{digits[7:]}"


def format_name(value: str) -> str:
    words = (value or "").strip().lower().split()
    out = []
    for i, word in enumerate(words):
        if i > 0 and word in NAME_PARTICLES:
            out.append(word)
        else:
            out.append(word[:1].upper() + word[1:])
    return " ".join(out)
