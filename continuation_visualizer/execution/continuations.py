"""
Continuation Store & Structure Copying.

Captured continuations are deep copies of stack structure with fresh ids
drawn from the session allocator. A stored continuation never aliases a
live frame or item, so later mutation of the stack cannot reach it.
"""

from typing import Iterable, List, Optional

from ..state.models import Frame, IdAllocator, Item, Tower, CaptureType


def copy_item(item: Item, allocator: IdAllocator, from_continuation: Optional[bool] = None) -> Item:
    return Item(
        id=allocator.allocate(),
        value=item.value,
        from_continuation=item.from_continuation if from_continuation is None else from_continuation,
    )


def copy_frame(
    frame: Frame,
    allocator: IdAllocator,
    items: Optional[Iterable[Item]] = None,
    from_continuation: Optional[bool] = None,
    capture_type: Optional[CaptureType] = None,
) -> Frame:
    """
    Copy a frame and its items, reallocating every id.

    Args:
        frame: Source frame. Its name and display fields are preserved.
        allocator: Session allocator; the frame id is drawn before item ids.
        items: Subset of items to copy instead of frame.items.
        from_continuation: When set, overrides the tag on every copied item.
        capture_type: Tag for the copy; defaults to the source frame's tag.
    """
    frame_id = allocator.allocate()
    source_items = frame.items if items is None else items
    return Frame(
        id=frame_id,
        name=frame.name,
        items=[copy_item(item, allocator, from_continuation) for item in source_items],
        display_value=frame.display_value,
        is_output_frame=frame.is_output_frame,
        capture_type=capture_type if capture_type is not None else frame.capture_type,
    )


def copy_tower(
    tower: Tower,
    allocator: IdAllocator,
    name: Optional[str] = None,
    capture_type: Optional[CaptureType] = None,
) -> Tower:
    frames = [copy_frame(frame, allocator) for frame in tower.frames]
    return Tower(
        id=allocator.allocate(),
        name=name if name is not None else tower.name,
        frames=frames,
        capture_type=capture_type,
    )


def merge_frames(name: str, frames: Iterable[Frame], allocator: IdAllocator) -> Frame:
    """
    Collapse every item of `frames` into one new frame called `name`.

    Items are re-ided and tagged as continuation-carried. The frame id is
    drawn after the item ids.
    """
    items = [
        copy_item(item, allocator, from_continuation=True)
        for frame in frames
        for item in frame.items
    ]
    return Frame(id=allocator.allocate(), name=name, items=items)


class ContinuationStore:
    """
    Ordered view over the continuations list of a session.

    Entries are appended, never replaced; a name may occur more than once
    and lookups return the most recent entry.
    """

    def __init__(self, entries: List[Tower]):
        self._entries = entries

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, continuation: Tower):
        self._entries.append(continuation)

    def latest(self) -> Optional[Tower]:
        if not self._entries:
            return None
        return self._entries[-1]

    def find_latest(self, name: str) -> Optional[Tower]:
        for continuation in reversed(self._entries):
            if continuation.name == name:
                return continuation
        return None

    def remove(self, continuation: Tower):
        self._entries[:] = [c for c in self._entries if c is not continuation]
