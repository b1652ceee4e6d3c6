"""
String hashing for single-flight keys.

The hash is the classic 32-bit ``s[0]*31^(n-1) + ... + s[n-1]``
string hash computed over UTF-16 code units, so keys match the ones
produced by JavaScript and Java clients for the same input. It is
not collision resistant: two different inputs may share a key.
"""

_INT32_MASK = 0xFFFFFFFF
_INT32_SIGN = 0x80000000


def _to_int32(value: int) -> int:
    value &= _INT32_MASK
    return value - 0x100000000 if value & _INT32_SIGN else value


def hash_code(text: str) -> int:
    """
    Hash a string to a signed 32-bit integer.

    Args:
        text: The string to hash.

    Returns:
        The hash value; ``0`` for the empty string.
    """
    encoded = text.encode("utf-16-le", errors="surrogatepass")
    result = 0
    for index in range(0, len(encoded), 2):
        unit = encoded[index] | (encoded[index + 1] << 8)
        result = _to_int32((result << 5) - result + unit)
    return result
