"""
Test doubles shared by the unit tests.
"""

from binance_rest.exchange.transport import Response


FROZEN_TIME_MS = 1499827319559


class RecordingTransport:
    """Transport spy recording every descriptor it is asked to execute."""

    def __init__(self, response: Response = None, error: Exception = None):
        self.calls = []
        self.response = response or Response(status=200, data={}, headers={})
        self.error = error

    async def execute(self, descriptor):
        self.calls.append(descriptor)
        if self.error is not None:
            raise self.error
        return self.response

    @property
    def last(self):
        return self.calls[-1]
