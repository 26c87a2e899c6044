from typing import Any, Dict, List, Mapping, Optional, Sequence

Record = Dict[str, Any]


def left_join(
    left: Sequence[Mapping[str, Any]],
    right: Sequence[Mapping[str, Any]],
    left_on: Sequence[str],
    right_on: Sequence[str],
    defaults: Optional[Mapping[str, Any]] = None,
) -> List[Record]:
    """Left outer join of two record lists.

    ``left_on[i]`` is matched against ``right_on[i]``; a right record joins
    only when every key pair is equal. Each match emits
    ``{**defaults, **right_record, **left_record}`` so left values win on
    collisions. A left record without any match is emitted once, merged over
    ``defaults``. The output can therefore be longer than ``left`` when a key
    matches several right records.
    """
    if len(left_on) != len(right_on):
        raise ValueError("left_on and right_on must have the same length")
    defaults = defaults or {}

    joined: List[Record] = []
    for left_record in left:
        matches = [
            right_record
            for right_record in right
            if all(
                left_record.get(lkey) == right_record.get(rkey)
                for lkey, rkey in zip(left_on, right_on)
            )
        ]
        if not matches:
            joined.append({**defaults, **left_record})
            continue
        for right_record in matches:
            joined.append({**defaults, **right_record, **left_record})
    return joined
