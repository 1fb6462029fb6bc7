import asyncio

import pytest

from hayate.engine import Bot, Collector, Executor, State, run_bot


class ListCollector(Collector):
    def __init__(self, items):
        self.items = list(items)

    async def event_stream(self):
        async def gen():
            for item in self.items:
                yield item

        return gen()


class RecordingState(State):
    def __init__(self, fail_on=None, sync_error=None):
        self.events = []
        self.synced = False
        self.fail_on = fail_on
        self.sync_error = sync_error

    def name(self):
        return "recording"

    async def sync(self):
        if self.sync_error is not None:
            raise self.sync_error
        self.synced = True

    def process_event(self, event):
        if event == self.fail_on:
            raise RuntimeError("bad event")
        self.events.append(event)


class RecordingExecutor(Executor):
    def __init__(self, fail=False):
        self.actions = []
        self.fail = fail

    async def execute(self, action):
        self.actions.append(action)
        if self.fail:
            raise RuntimeError("cannot execute")


def make_bot(plan, seen_states=None):
    class ScriptedBot(Bot):
        def __init__(self, states):
            super().__init__(states)
            if seen_states is not None:
                seen_states.extend(self.states)
            self._plan = list(plan)

        def interval(self):
            return 5

        def evaluate(self):
            if not self._plan:
                return []
            step = self._plan.pop(0)
            if isinstance(step, Exception):
                raise step
            return step

    return ScriptedBot


async def _wait_until(predicate, timeout=2.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached")
        await asyncio.sleep(0.005)


async def _cancel(tasks):
    for task in tasks:
        task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)


@pytest.mark.asyncio
async def test_events_reach_state_and_state_stops_when_collectors_finish():
    state = RecordingState()
    tasks = run_bot(make_bot([]), [ListCollector([1, 2, 3])], [state], [])
    try:
        await asyncio.wait_for(tasks[0], 2.0)
        assert state.synced is True
        assert state.events == [1, 2, 3]
    finally:
        await _cancel(tasks)


@pytest.mark.asyncio
async def test_events_from_all_collectors_arrive():
    state = RecordingState()
    collectors = [ListCollector(["a"]), ListCollector(["b", "c"])]
    tasks = run_bot(make_bot([]), collectors, [state], [])
    try:
        await asyncio.wait_for(tasks[0], 2.0)
        assert sorted(state.events) == ["a", "b", "c"]
    finally:
        await _cancel(tasks)


@pytest.mark.asyncio
async def test_no_collectors_closes_event_channel():
    state = RecordingState()
    tasks = run_bot(make_bot([]), [], [state], [])
    try:
        await asyncio.wait_for(tasks[0], 2.0)
        assert state.synced is True
        assert state.events == []
    finally:
        await _cancel(tasks)


@pytest.mark.asyncio
async def test_actions_reach_executors():
    executors = [RecordingExecutor(), RecordingExecutor()]
    tasks = run_bot(make_bot([["a", "b"], ["c"]]), [], [], executors)
    try:
        await _wait_until(lambda: all(len(e.actions) == 3 for e in executors))
        assert executors[0].actions == ["a", "b", "c"]
        assert executors[1].actions == ["a", "b", "c"]
    finally:
        await _cancel(tasks)


@pytest.mark.asyncio
async def test_bot_keeps_going_after_evaluation_error():
    executor = RecordingExecutor()
    tasks = run_bot(make_bot([RuntimeError("boom"), ["x"]]), [], [], [executor])
    try:
        await _wait_until(lambda: executor.actions)
        assert executor.actions == ["x"]
    finally:
        await _cancel(tasks)


@pytest.mark.asyncio
async def test_executor_stops_after_failure():
    executor = RecordingExecutor(fail=True)
    tasks = run_bot(make_bot([["a", "b"]]), [], [], [executor])
    try:
        await asyncio.wait_for(tasks[0], 2.0)
        assert executor.actions == ["a"]
    finally:
        await _cancel(tasks)


@pytest.mark.asyncio
async def test_state_stops_on_processing_error():
    state = RecordingState(fail_on=2)
    tasks = run_bot(make_bot([]), [ListCollector([1, 2, 3])], [state], [])
    try:
        await asyncio.wait_for(tasks[0], 2.0)
        assert state.events == [1]
    finally:
        await _cancel(tasks)


@pytest.mark.asyncio
async def test_state_sync_failure_propagates():
    state = RecordingState(sync_error=ValueError("sync failed"))
    tasks = run_bot(make_bot([]), [], [state], [])
    try:
        with pytest.raises(ValueError, match="sync failed"):
            await asyncio.wait_for(tasks[0], 2.0)
        assert state.synced is False
    finally:
        await _cancel(tasks)


@pytest.mark.asyncio
async def test_bot_is_built_with_the_states():
    seen = []
    first, second = RecordingState(), RecordingState()
    tasks = run_bot(make_bot([], seen), [], [first, second], [])
    try:
        assert seen == [first, second]
        assert len(tasks) == 3
    finally:
        await _cancel(tasks)