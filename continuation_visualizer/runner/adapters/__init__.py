from continuation_visualizer.runner.adapters.racket_adapter import RacketTraceRunner

__all__ = ["RacketTraceRunner"]
