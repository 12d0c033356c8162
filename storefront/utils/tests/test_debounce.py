from storefront.utils.debounce import Debouncer


class FakeTimer:
    created = []

    def __init__(self, interval, function, args=None):
        self.interval = interval
        self.function = function
        self.args = args or ()
        self.started = False
        self.cancelled = False
        FakeTimer.created.append(self)

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        self.function(*self.args)


def make_debouncer(calls):
    FakeTimer.created = []
    return Debouncer(0.5, lambda *a, **kw: calls.append((a, kw)), timer_factory=FakeTimer)


def test_only_last_call_in_burst_fires():
    """Test each call cancels the previous timer and the last arguments win."""
    calls = []
    debouncer = make_debouncer(calls)
    debouncer.call("d")
    debouncer.call("du")
    debouncer.call("dune", page=1)
    first, second, last = FakeTimer.created
    assert first.cancelled and second.cancelled and not last.cancelled
    assert last.interval == 0.5
    last.fire()
    assert calls == [(("dune",), {"page": 1})]
    assert not debouncer.is_pending


def test_stale_timer_does_not_fire():
    """Test a timer that already lost to a newer call is ignored."""
    calls = []
    debouncer = make_debouncer(calls)
    debouncer.call("a")
    debouncer.call("b")
    FakeTimer.created[0].fire()
    assert calls == []
    FakeTimer.created[1].fire()
    assert calls == [(("b",), {})]


def test_cancel_drops_pending_call():
    """Test cancel prevents the callback."""
    calls = []
    debouncer = make_debouncer(calls)
    debouncer.call("x")
    assert debouncer.is_pending
    debouncer.cancel()
    assert FakeTimer.created[0].cancelled
    debouncer.flush()
    assert calls == []
    assert not debouncer.is_pending


def test_flush_runs_immediately():
    """Test flush fires the pending call without waiting."""
    calls = []
    debouncer = make_debouncer(calls)
    debouncer.call("now")
    debouncer.flush()
    assert calls == [(("now",), {})]
    FakeTimer.created[0].fire()
    assert calls == [(("now",), {})]
