# bittools.py
# Sign/zero extension helpers shared by the decoders and the instruction behaviors

XLEN = 32
XMASK = 0xffffffff

# SIGN_MASKS[w - 1] selects every bit at or above position w, for w in 1..31
SIGN_MASKS = tuple((XMASK << width) & XMASK for width in range(1, XLEN))


def _check_width(width):
    if not 1 <= width <= XLEN:
        raise ValueError(f"Extension width out of range: {width} (expected 1..{XLEN})")


def sign_extend(value, width):
    """Replicate bit ``width - 1`` of ``value`` into bits ``width..31``.

    The result is a 32-bit unsigned pattern. A width of 32 returns the value unchanged.
    """
    _check_width(width)
    value &= XMASK
    if width == XLEN:
        return value
    mask = SIGN_MASKS[width - 1]
    if (value >> (width - 1)) & 1:
        return value | mask
    return value & ~mask & XMASK


def zero_extend(value, width):
    _check_width(width)
    value &= XMASK
    if width == XLEN:
        return value
    return value & ~SIGN_MASKS[width - 1] & XMASK


def to_signed(value):
    value &= XMASK
    return value - 0x100000000 if value & 0x80000000 else value


def to_unsigned(value):
    return value & XMASK
