# pylint: disable=missing-module-docstring,missing-function-docstring

import asyncio
import threading

from signaling.registry import ConnectionRegistry


# ---------------------------------------------------------------------
# Membership
# ---------------------------------------------------------------------

def test_add_and_remove(make_conn):
    registry = ConnectionRegistry()
    a = make_conn("A")

    assert len(registry) == 0
    assert registry.add(a) is True
    assert len(registry) == 1
    assert a in registry

    assert registry.remove(a) is True
    assert len(registry) == 0
    assert a not in registry


def test_add_same_connection_twice_is_ignored(make_conn):
    registry = ConnectionRegistry()
    a = make_conn("A")

    registry.add(a)
    assert registry.add(a) is False
    assert registry.snapshot() == (a,)


def test_remove_is_idempotent(make_conn):
    registry = ConnectionRegistry()
    a, b = make_conn("A"), make_conn("B")
    registry.add(a)
    registry.add(b)

    assert registry.remove(a) is True
    assert registry.remove(a) is False
    assert registry.snapshot() == (b,)


def test_remove_unknown_is_noop(make_conn):
    registry = ConnectionRegistry()
    assert registry.remove(make_conn("ghost")) is False


# ---------------------------------------------------------------------
# Iteration
# ---------------------------------------------------------------------

def test_others_excludes_by_id(make_conn):
    registry = ConnectionRegistry()
    a, b, c = make_conn("A"), make_conn("B"), make_conn("C")
    for conn in (a, b, c):
        registry.add(conn)

    assert list(registry.others(a)) == [b, c]


def test_snapshot_is_stable_under_mutation(make_conn):
    registry = ConnectionRegistry()
    a, b = make_conn("A"), make_conn("B")
    registry.add(a)

    snap = registry.snapshot()
    registry.add(b)
    registry.remove(a)

    assert snap == (a,)
    assert registry.snapshot() == (b,)


def test_for_each_except_tolerates_mutation_mid_iteration(make_conn):
    registry = ConnectionRegistry()
    a, b, c, d = (make_conn(x) for x in "ABCD")
    for conn in (a, b, c):
        registry.add(conn)

    seen: list[str] = []

    async def visit(conn) -> None:
        seen.append(conn.connection_id)
        # Churn while a broadcast is in progress
        registry.remove(c)
        registry.add(d)
        await asyncio.sleep(0)

    visited = asyncio.run(registry.for_each_except(a, visit))

    # Iteration ran over the membership at its start, each member once
    assert seen == ["B", "C"]
    assert visited == 2
    assert [x.connection_id for x in registry.snapshot()] == ["A", "B", "D"]


def test_concurrent_add_remove_and_iterate(make_conn):
    registry = ConnectionRegistry()
    errors: list[BaseException] = []

    def churn(prefix: str) -> None:
        try:
            for i in range(300):
                conn = make_conn(f"{prefix}{i}")
                registry.add(conn)
                registry.remove(conn)
        except BaseException as exc:  # pylint: disable=broad-exception-caught
            errors.append(exc)

    def iterate() -> None:
        try:
            for _ in range(300):
                ids = [c.connection_id for c in registry.snapshot()]
                assert len(ids) == len(set(ids))
        except BaseException as exc:  # pylint: disable=broad-exception-caught
            errors.append(exc)

    threads = [threading.Thread(target=churn, args=(p,)) for p in "xyz"]
    threads += [threading.Thread(target=iterate) for _ in range(3)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert not errors
    assert len(registry) == 0
