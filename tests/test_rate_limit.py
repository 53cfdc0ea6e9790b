import threading

from apps.common.rate_limit import RATE_LIMITS, FixedWindowRateLimiter, client_ip


class FakeClock:
    def __init__(self, start=0.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class _Req:
    def __init__(self, forwarded=None):
        self.META = {"HTTP_X_FORWARDED_FOR": forwarded} if forwarded is not None else {}


def test_window_allows_up_to_budget_then_rejects():
    clock = FakeClock()
    limiter = FixedWindowRateLimiter(clock=clock)

    results = [limiter.allow("login:1.2.3.4", 5, 60_000) for _ in range(6)]

    assert results == [True] * 5 + [False]


def test_window_resets_after_expiry():
    clock = FakeClock()
    limiter = FixedWindowRateLimiter(clock=clock)
    for _ in range(3):
        limiter.allow("k", 3, 1_000)
    assert limiter.allow("k", 3, 1_000) is False

    clock.advance(1.0)

    assert limiter.allow("k", 3, 1_000) is True


def test_keys_are_independent():
    limiter = FixedWindowRateLimiter(clock=FakeClock())
    assert limiter.allow("a", 1, 1_000)
    assert not limiter.allow("a", 1, 1_000)
    assert limiter.allow("b", 1, 1_000)


def test_sweep_drops_only_expired_windows():
    clock = FakeClock()
    limiter = FixedWindowRateLimiter(clock=clock, sweep_interval=3600)
    limiter.allow("short", 10, 1_000)
    limiter.allow("long", 10, 60_000)

    clock.advance(5)

    assert limiter.sweep() == 1
    assert len(limiter) == 1


def test_sweep_runs_automatically_on_interval():
    clock = FakeClock()
    limiter = FixedWindowRateLimiter(clock=clock, sweep_interval=60)
    for index in range(10):
        limiter.allow(f"ip-{index}", 10, 1_000)
    assert len(limiter) == 10

    clock.advance(61)
    limiter.allow("fresh", 10, 1_000)

    assert len(limiter) == 1


def test_concurrent_allows_never_exceed_budget():
    limiter = FixedWindowRateLimiter(clock=FakeClock())
    allowed = []
    lock = threading.Lock()

    def worker():
        for _ in range(50):
            ok = limiter.allow("shared", 100, 60_000)
            with lock:
                allowed.append(ok)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert allowed.count(True) == 100


def test_configured_budgets():
    assert (RATE_LIMITS["login"].max_requests, RATE_LIMITS["login"].window_ms) == (5, 15 * 60 * 1000)
    assert (RATE_LIMITS["sign_up"].max_requests, RATE_LIMITS["sign_up"].window_ms) == (10, 60 * 60 * 1000)
    assert RATE_LIMITS["lead_search"].per_user and RATE_LIMITS["lead_search"].max_requests == 100
    assert RATE_LIMITS["ai_context"].per_user and RATE_LIMITS["ai_context"].max_requests == 60
    assert (RATE_LIMITS["webhook"].max_requests, RATE_LIMITS["webhook"].window_ms) == (100, 60 * 1000)
    assert RATE_LIMITS["webhook"].key("1.2.3.4") == "webhook:1.2.3.4"


def test_client_ip_uses_first_forwarded_hop():
    assert client_ip(_Req(" 203.0.113.9 , 10.0.0.1")) == "203.0.113.9"
    assert client_ip(_Req()) == "unknown"
    assert client_ip(_Req("")) == "unknown"
