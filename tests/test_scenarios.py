"""End-to-end replays and whole-session properties."""
from continuation_visualizer.data.sample_programs import SAMPLE_PROGRAMS
from continuation_visualizer.state.models import HistoryAction

CALLCC_TRACE = """\
push (+ 1 (call/cc (lambda (k) (+ 10 (k 100)))))
capture: k (call/cc (lambda (k) (+ 10 (k 100))))
call: k (value:100,marks:(k 100))
"""

SHIFT_TRACE = """\
push (+ 1 (reset (+ 10 (shift k (k 100)))))
reset: (reset (+ 10 (shift k (k 100))))
push (+ 10 (shift k (k 100)))
shift: k (shift k (k 100))
call: k (value:100,marks:(k 100))
"""

BOUNDARY_TRACE = """\
push (a)
> (f 1)
push (b)
reset: (reset (c))
push (c)
> (g 2)
push (d)
shift: k (k 1)
push (e)
shift: k2 (k2 2)
"""


def all_ids(machine):
    ids = []
    for tower in list(machine.towers) + list(machine.continuations):
        ids.append(tower.id)
        for frame in tower.frames:
            ids.append(frame.id)
            ids.extend(item.id for item in frame.items)
    return ids


class TestArithmetic:
    def test_push_pop_output(self, replay):
        machine = replay("push (+ 1 2)\npop (+ 1 2) => 3\n3")

        assert machine.output == ("3",)
        assert machine.towers == ()

    def test_sample_program_trace(self, replay):
        machine = replay(SAMPLE_PROGRAMS["arithmetic"].trace)

        assert machine.output == ("2",)
        assert machine.towers == ()


class TestCallCC:
    def test_capture_then_invoke(self, replay):
        machine = replay(CALLCC_TRACE, steps=2)

        assert [c.name for c in machine.continuations] == ["k"]

        machine.step()
        (tower,) = machine.towers
        assert [f.name for f in tower.frames] == ["(k 100)"]
        assert [i.value for i in tower.frames[0].items] == [
            "(+ 1 (call/cc (lambda (k) (+ 10 (k 100)))))"
        ]
        assert all(i.from_continuation for i in tower.frames[0].items)
        assert machine.continuations == ()

    def test_callcc_is_single_shot(self, replay):
        machine = replay(CALLCC_TRACE + "call: k (value:5,marks:(k 5))\n")

        assert [f.name for f in machine.towers[0].frames] == ["(k 100)"]
        assert [h.action for h in machine.history] == [HistoryAction.CAPTURE, HistoryAction.INVOKE]

    def test_sample_program_trace(self, replay):
        machine = replay(SAMPLE_PROGRAMS["callcc_basic"].trace)

        assert machine.output == ("101",)
        assert machine.towers == ()


class TestShiftReset:
    def test_shift_invoke_layers_over_context(self, replay):
        machine = replay(SHIFT_TRACE, steps=3)
        main_frame = machine.towers[0].frames[0]
        outer_item = main_frame.items[0]

        machine.step()
        machine.step()

        assert [c.name for c in machine.continuations] == ["k"]
        primary = machine.towers[0]
        assert [f.name for f in primary.frames] == ["(main)", "(k 100)"]
        assert primary.frames[0] is main_frame
        assert primary.frames[0].items == [outer_item]
        assert [i.value for i in primary.frames[1].items] == ["(+ 10 (shift k (k 100)))"]

    def test_shift_is_multi_shot(self, replay):
        machine = replay(SHIFT_TRACE + "call: k (value:200,marks:(k 200))\n")

        names = [f.name for f in machine.towers[0].frames]
        assert "(k 100)" in names
        assert "(k 200)" in names
        assert [c.name for c in machine.continuations] == ["k"]

    def test_sample_program_trace(self, replay):
        machine = replay(SAMPLE_PROGRAMS["shift_reset_basic"].trace)

        assert machine.output == ("111",)
        assert machine.towers == ()
        assert [h.action for h in machine.history] == [
            HistoryAction.RESET,
            HistoryAction.SHIFT,
            HistoryAction.INVOKE,
        ]


class TestSessionProperties:
    def test_boundary_below_marker_is_untouched_by_shift(self, replay):
        machine = replay(BOUNDARY_TRACE, steps=7)
        primary = machine.towers[0]
        frames_before = list(primary.frames[:2])
        items_before = [list(frames_before[0].items), list(frames_before[1].items[:1])]

        machine.step()

        assert primary.frames[0] is frames_before[0]
        assert primary.frames[1] is frames_before[1]
        assert primary.frames[0].items[0] is items_before[0][0]
        assert primary.frames[1].items[0] is items_before[1][0]

    def test_boundary_survives_repeated_shift(self, replay):
        machine = replay(BOUNDARY_TRACE)

        assert [c.name for c in machine.continuations] == ["k", "k2"]
        assert [i.value for i in machine.continuations[1].frames[0].items] == ["(e)"]
        assert [f.name for f in machine.towers[0].frames] == ["(main)", "(f 1)"]
        assert [i.value for i in machine.towers[0].frames[1].items] == ["(b)"]

    def test_ids_are_unique_and_monotonic(self, replay):
        machine = replay(BOUNDARY_TRACE + "call: k (value:3,marks:(k 3))\nset: h => k2\n")
        ids = all_ids(machine)

        assert len(ids) == len(set(ids))
        assert max(ids) < machine.state.allocator.next_id
        invoked = machine.towers[0].frames[-1]
        assert all(item.id < invoked.id for item in invoked.items)
        assert invoked.id > max(f.id for f in machine.towers[0].frames[:-1])

    def test_cursor_never_decreases(self, replay):
        machine = replay(SHIFT_TRACE, steps=0)
        seen = []
        for _ in range(machine.line_count + 3):
            machine.step()
            seen.append(machine.cursor)

        assert seen == sorted(seen)
        assert seen[-1] == machine.line_count
