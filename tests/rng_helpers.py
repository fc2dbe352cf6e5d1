"""Scripted random sources shared by the generator and engine tests."""


class SequenceRng:
    """Replays fixed draws, then a value that misses every roll."""

    def __init__(self, values, default=0.99):
        self.values = list(values)
        self.default = default
        self.calls = 0

    def random(self):
        self.calls += 1
        if self.values:
            return self.values.pop(0)
        return self.default
