"""
POSIX short-flag bundling.

A packed token such as "-a23cb1233" is expanded character by character:
every character that resolves as a flag becomes its own "-x" token, and every
run of characters that does not is the value of the flag before it, flushed
when the next flag character shows up or the input ends. With short flags
a (single), c (standalone) and b (single) the example expands to
["-a", "23", "-c", "-b", "1233"].

Expanded tokens resolve directly, so bundling an already expanded stream
leaves it unchanged.
"""


def bundle(name, resolves, /):
    """
    expand a packed name (prefix already stripped) into normalized tokens.

    resolves(character) tells whether a single character is a known flag in the
    current scope. Returns None when the first character is not a flag (the
    token is simply unknown) or when nothing would change.
    """
    if len(name) < 2 or not resolves(name[0]):
        return None

    tokens = []
    value = []
    for character in name:
        if resolves(character):
            if value:
                tokens.append("".join(value))
                value.clear()
            tokens.append("-" + character)
        else:
            value.append(character)
    if value:
        tokens.append("".join(value))
    return tokens


def normalize(tokens, is_packed, resolves, /):
    """
    bundle every packed token of a stream.

    is_packed(token) selects the candidates (single-dash tokens that did not
    resolve as a whole); other tokens are kept verbatim.
    """
    normalized = []
    for token in tokens:
        if is_packed(token) and (expanded := bundle(token[1:], resolves)) is not None:
            normalized.extend(expanded)
        else:
            normalized.append(token)
    return normalized


__all__ = (
    "bundle",
    "normalize",
)
