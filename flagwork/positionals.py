"""
Positional argument placement.

pass 1 (bounds): from the token indices claimed by flags, flag values and
commands, find first_non_positional (the first claimed index, or the token
count when nothing was claimed) and last_non_positional (the last claimed
index, or -1).

pass 2 (reconcile): every unclaimed token becomes a PositionalRecord. Each
declared positional argument is then matched:
- AT_START, index k: the token at index k, provided k < first_non_positional.
- AT_END, index k: the token at last_non_positional + 1 + k, provided it exists.
An argument already supplied in flag form is exempt; an unmatched required one
is a MisplacedPositionalError.
"""
from collections import namedtuple

from .arguments import At
from .faults import *

PositionalRecord = namedtuple("PositionalRecord", ("index", "value", "argument", "key"))


def bounds(count, claimed, /):
    """(first_non_positional, last_non_positional) for a token count and claimed indices."""
    return min(claimed, default=count), max(claimed, default=-1)


def reconcile(tokens, claimed, declarations, supplied, outcome, /, fallback=frozenset()):
    """
    match declared positionals against the unclaimed tokens.

    parameters
    - tokens: the final (post-normalization) token list.
    - claimed: indices consumed as flags, flag values or commands.
    - declarations: registry entries whose argument has a position.
    - supplied: keys already given in flag form (exempt from placement).
    - outcome: receives placement faults.
    - fallback: keys that will receive a value from the environment or the
      default map; an unmatched required positional among them is not a fault.

    returns
    - records: every PositionalRecord, ordered by token index.
    - matches: (entry, raw value) pairs for the parser to assign.
    """
    first, last = bounds(len(tokens), claimed)
    records = {
        index: PositionalRecord(index, token, None, None)
        for index, token in enumerate(tokens) if index not in claimed
    }
    matches = []

    for entry in sorted(declarations, key=lambda entry: tuple(entry.argument.position)):
        if entry.key in supplied:
            continue
        at, offset = entry.argument.position
        if at is At.START:
            index = offset if offset < first else None
        else:
            index = last + 1 + offset
        record = records.get(index) if index is not None else None

        if record is not None and record.argument is None:
            records[index] = record._replace(argument=entry.argument, key=entry.key)
            matches.append((entry, record.value))
        elif entry.argument.required and entry.key not in fallback:
            outcome.add(MisplacedPositionalError(
                "argument %r must appear at %s position %d" % (entry.key, at, offset),
                title="positional misplaced",
                code=FaultCode.MISPLACED_POSITIONAL,
                flag=entry.key,
                position=entry.argument.position,
                hint="place it %s every flag and command, or pass it as a flag" % (
                    "before" if at is At.START else "after"
                ),
                docs=getdoc(FaultCode.MISPLACED_POSITIONAL),
            ))

    return [records[index] for index in sorted(records)], matches


__all__ = (
    "PositionalRecord",
    "bounds",
    "reconcile",
)
