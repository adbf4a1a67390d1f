"""Shared test helpers for GrowthTrack."""

import requests


class SignalCollector:
    """Utility to capture pyqtSignal emissions into a list."""

    def __init__(self):
        self.items: list = []

    def slot(self, *args):
        self.items.append(args if len(args) > 1 else args[0] if args else None)

    def __call__(self, *args):
        self.slot(*args)

    def __len__(self):
        return len(self.items)

    def __getitem__(self, idx):
        return self.items[idx]

    @property
    def last(self):
        return self.items[-1] if self.items else None

    def clear(self):
        self.items.clear()


def run_ticks(target, count: int) -> None:
    """Drive *target* (engine or runner) by *count* ticks without waiting."""
    for _ in range(count):
        target.tick()


def finish_set(runner) -> None:
    """Start the current set if needed and tick it down to 0."""
    runner.resume()
    run_ticks(runner, runner.remaining)


class RecordingSink:
    """Result sink that remembers every submission."""

    def __init__(self, ok: bool = True):
        self.ok = ok
        self.calls: list = []

    def submit(self, kind, result):
        self.calls.append((kind, result))
        return self.ok


class FakeResponse:
    def __init__(self, status_code: int = 200, payload=None, text: str | None = None):
        self.status_code = status_code
        self._payload = payload
        self._text = text

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    @property
    def content(self) -> bytes:
        if self._text is not None:
            return self._text.encode()
        return b"" if self._payload is None else b"{}"

    def json(self):
        if self._text is not None:
            raise requests.JSONDecodeError("Expecting value", self._text, 0)
        return self._payload


class FakeHttp:
    """Stand-in for ``requests.Session`` that records requests."""

    def __init__(self, *responses, error: Exception | None = None):
        self.responses = list(responses)
        self.error = error
        self.requests: list[dict] = []
        self.closed = False

    def request(self, method, url, **kwargs):
        self.requests.append({"method": method, "url": url, **kwargs})
        if self.error is not None:
            raise self.error
        return self.responses.pop(0) if self.responses else FakeResponse(200, {})

    def close(self):
        self.closed = True
