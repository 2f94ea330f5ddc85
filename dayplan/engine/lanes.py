"""Timeline lane assignment for overlapping blocks."""

from typing import List, Sequence

from ..models.schedule import LaneAssignment, TimelineBlock


def assign_lanes(blocks: Sequence[TimelineBlock], max_lanes: int) -> List[LaneAssignment]:
    """Assign each block a lane so blocks sharing a lane never overlap.

    Greedy interval colouring: blocks are visited by start time, longer blocks
    first on equal starts, and take the first lane whose last block has ended.
    When every lane is busy and the cap is reached the block is hidden. This
    is an approximation of the minimum lane count, which is fine for bounded
    visual stacking.

    Returns assignments aligned to the input order.
    """
    if not blocks:
        return []
    cap = max(1, int(max_lanes or 1))

    order = sorted(
        range(len(blocks)),
        key=lambda i: (blocks[i].start, -max(0, blocks[i].end - blocks[i].start), i),
    )

    lane_ends: List[int] = []
    out = [LaneAssignment(None, True)] * len(blocks)

    for idx in order:
        block = blocks[idx]
        start = block.start
        end = max(start, block.end)

        lane = None
        for i in range(min(len(lane_ends), cap)):
            if lane_ends[i] <= start:
                lane = i
                lane_ends[i] = end
                break

        if lane is None and len(lane_ends) < cap:
            lane = len(lane_ends)
            lane_ends.append(end)

        out[idx] = LaneAssignment(lane, lane is None)

    return out


class LaneAssigner:
    """Lane assignment with a configured cap."""

    def __init__(self, config: dict = None):
        config = config or {}
        self.max_lanes = config.get("timeline", {}).get("max_lanes", 3)

    def assign(self, blocks: Sequence[TimelineBlock]) -> List[LaneAssignment]:
        return assign_lanes(blocks, self.max_lanes)
