import pytest


class ScriptedRandom:
    """Random source that replays a fixed list of draws."""

    def __init__(self, *values: float) -> None:
        self._values = list(values)

    def random(self) -> float:
        return self._values.pop(0)


@pytest.fixture
def scripted():
    return ScriptedRandom
