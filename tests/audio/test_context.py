import asyncio
import threading

import pytest


def test_current_time_follows_clock(make_context, clock):
    async def scenario():
        context = make_context()
        clock.advance(2.25)
        return context.current_time

    assert asyncio.run(scenario()) == pytest.approx(2.25)


def test_resume_probes_output_once(make_context, logger):
    probes = []

    def _probe():
        probes.append(True)
        return "Speakers (48000 Hz)"

    async def scenario():
        context = make_context(output_probe=_probe, logger=logger)
        context.resume()
        context.resume()
        return context

    context = asyncio.run(scenario())

    assert context.unlocked
    assert probes == [True]
    assert logger.infos == ["Audio output unlocked: Speakers (48000 Hz)"]


def test_resume_logs_probe_failure(make_context, logger):
    def _probe():
        raise RuntimeError("no device")

    async def scenario():
        context = make_context(output_probe=_probe, logger=logger)
        context.resume()
        return context

    context = asyncio.run(scenario())

    assert context.unlocked
    assert logger.exceptions == ["Failed to query audio output device"]


def test_run_blocking_uses_decode_workers(make_context):
    async def scenario():
        context = make_context(decode_workers=2)
        return await context.run_blocking(lambda: threading.current_thread().name)

    assert asyncio.run(scenario()).startswith("segment-decode")


def test_call_soon_marshals_from_foreign_thread(make_context):
    async def scenario():
        context = make_context()
        done = asyncio.Event()
        seen = []

        def _mark(value):
            seen.append((value, threading.current_thread() is threading.main_thread()))
            done.set()

        worker = threading.Thread(target=context.call_soon, args=(_mark, "end"))
        worker.start()
        worker.join()
        await asyncio.wait_for(done.wait(), timeout=1.0)
        return seen

    assert asyncio.run(scenario()) == [("end", True)]


def test_shared_resource_created_once_and_released_on_close(make_context):
    released = []
    created = []

    def _factory():
        created.append(object())
        return created[-1]

    async def scenario():
        context = make_context()
        first = context.resource("engine", _factory, released.append)
        second = context.resource("engine", _factory, released.append)
        context.close()
        context.close()
        return context, first, second

    context, first, second = asyncio.run(scenario())

    assert first is second
    assert len(created) == 1
    assert released == [first]
    with pytest.raises(RuntimeError):
        context.resource("engine", _factory)


def test_closed_context_rejects_work(make_context):
    calls = []

    async def scenario():
        context = make_context()
        context.close()
        context.call_soon(calls.append, "late")
        await asyncio.sleep(0)
        with pytest.raises(RuntimeError):
            await context.run_blocking(lambda: None)

    asyncio.run(scenario())

    assert calls == []
