from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SampleProgram:
    """
    A bundled example program.

    Attributes:
        trace: Reference trace served by the static runner, when one is recorded.
    """
    id: str
    title: str
    code: str
    trace: Optional[str] = None


# ==============================================================================
# call/cc (full continuations)
# ==============================================================================

callcc_basic = SampleProgram(
    id="callcc_basic",
    title="call/cc - basic",
    code="(+ 1 (call/cc (lambda (k) (+ 10 (k 100)))))",
    trace="""push (+ 1 (call/cc (lambda (k) (+ 10 (k 100)))))
push (call/cc (lambda (k) (+ 10 (k 100))))
capture: k (call/cc (lambda (k) (+ 10 (k 100))))
push (+ 10 (k 100))
call: k (value:100,marks:(k 100))
pop (call/cc (lambda (k) (+ 10 (k 100)))) => 100
pop (+ 1 100) => 101
101
""",
)

callcc_nested = SampleProgram(
    id="callcc_nested",
    title="call/cc - nested",
    code="(+ 1 (call/cc (lambda (k1) (+ 10 (call/cc (lambda (k2) (+ 100 (k1 1000))))))))",
)

callcc_functions = SampleProgram(
    id="callcc_functions",
    title="call/cc - functions",
    code="""(define cont #f)

(define (h n)
  (call/cc (lambda (k) (set! cont k) n))
  )

(define (g n)
  (+ 2 (h n))
  )

(define (f n)
  (+ (g n) 3)
  )

(f 3)
(cont 5)""",
)

# ==============================================================================
# shift/reset (delimited continuations)
# ==============================================================================

shift_reset_basic = SampleProgram(
    id="shift_reset_basic",
    title="shift/reset - basic",
    code="(+ 1 (reset (+ 10 (shift k (k 100)))))",
    trace="""push (+ 1 (reset (+ 10 (shift k (k 100)))))
reset: (reset (+ 10 (shift k (k 100))))
push (+ 10 (shift k (k 100)))
shift: k (shift k (k 100))
call: k (value:100,marks:(k 100))
pop (+ 10 100) => 110
< (k 100) 110
pop (+ 1 110) => 111
111
""",
)

shift_reset_nested = SampleProgram(
    id="shift_reset_nested",
    title="shift/reset - nested",
    code="(reset (+ 1 (shift k1 (+ 2 (shift k2 (k1 (k2 3)))))))",
)

shift_reset_multiple = SampleProgram(
    id="shift_reset_multiple",
    title="shift/reset - multiple resets",
    code="(reset (+ 1 (reset (+ 10 (shift k (k 100))))))",
)

shift_reset_functions = SampleProgram(
    id="shift_reset_functions",
    title="shift/reset - functions",
    code="""(define cont #f)

(define (h n)
  (shift k (set! cont k) (k n)))

(define (g n)
  ( + 2 (h n)))

(define (f n)
  (reset (+ (g n) 3)))

(f 3)
(cont 5)""",
)

# ==============================================================================
# No control operators
# ==============================================================================

arithmetic = SampleProgram(
    id="arithmetic",
    title="arithmetic",
    code="(/ (+ (* 2 3) 4) 5)",
    trace="""push (/ (+ (* 2 3) 4) 5)
push (+ (* 2 3) 4)
push (* 2 3)
pop (* 2 3) => 6
pop (+ 6 4) => 10
pop (/ 10 5) => 2
2
""",
)


SAMPLE_PROGRAMS = {
    program.id: program
    for program in (
        callcc_basic,
        callcc_nested,
        callcc_functions,
        shift_reset_basic,
        shift_reset_nested,
        shift_reset_multiple,
        shift_reset_functions,
        arithmetic,
    )
}
