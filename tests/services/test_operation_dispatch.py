"""Operation Dispatch: tests for load-phase validation and fail-fast execution.

Tests cover:
    - Empty batches run nothing and report nothing
    - Invalid type / action / unsupported pairs add exactly one error each
    - Valid requests still run when siblings are rejected
    - Payloads are stripped of type/action and run in submission order
    - The first handler (or cache invalidation) failure aborts the rest
    - Dry-run is exposed but does not change dispatch
    - Flattened output interleaves handler ids with entries
"""

import pytest

from opfactory.services.operation_dispatch import OperationDispatcher


class _Invalidator:
    """Counts calls; optionally fails on the Nth call."""

    def __init__(self, fail_on: int | None = None):
        self.calls = 0
        self.fail_on = fail_on

    def __call__(self) -> None:
        self.calls += 1
        if self.fail_on is not None and self.calls == self.fail_on:
            raise ConnectionError("cache down")


class _WidgetDispatch(OperationDispatcher):
    """Test family: widgets have handlers, gadgets are in the vocabulary only."""

    name = "widget"
    valid_types = frozenset({"widget", "gadget"})
    valid_actions = frozenset({"create", "delete", "explode"})

    def __init__(self, cache_invalidator=None, dry_run: bool = False):
        super().__init__(cache_invalidator or _Invalidator(), dry_run=dry_run)
        self.calls: list[tuple[str, dict]] = []
        self.seen_dry_run: list[bool] = []
        self._handlers = {
            "widget_create": self._create,
            "widget_delete": self._delete,
            "widget_explode": self._explode,
        }

    async def _create(self, payload: dict) -> str:
        self.calls.append(("widget_create", payload))
        self.seen_dry_run.append(self.is_dry_run)
        return f"created {payload.get('id')}"

    async def _delete(self, payload: dict) -> list:
        self.calls.append(("widget_delete", payload))
        return [f"deleted {payload.get('id')}", "cleanup done"]

    async def _explode(self, payload: dict) -> str:
        self.calls.append(("widget_explode", payload))
        raise RuntimeError("boom")


def _op(op_type="widget", action="create", **payload) -> dict:
    return {"type": op_type, "action": action, **payload}


# ─── Empty batches ───────────────────────────────────────────────

async def test_empty_batch_returns_empty_results_and_errors():
    invalidator = _Invalidator()
    dispatch = _WidgetDispatch(invalidator)
    assert await dispatch.run([]) == {"errors": []}
    assert dispatch.calls == []
    assert invalidator.calls == 0


async def test_none_batch_is_treated_as_empty():
    dispatch = _WidgetDispatch()
    assert await dispatch.run(None) == {"errors": []}


# ─── Load-phase validation ───────────────────────────────────────

async def test_missing_type_rejected_with_one_error():
    dispatch = _WidgetDispatch()
    result = await dispatch.run([{"action": "create", "id": 1}, _op(id=2)])
    assert result["errors"] == ["Invalid operation-type: (missing)"]
    assert result["widget_create"] == ["created 2"]


async def test_unknown_type_error_mentions_value():
    dispatch = _WidgetDispatch()
    result = await dispatch.run([{"type": "bogus", "action": "create"}])
    assert result == {"errors": ["Invalid operation-type: bogus"]}
    assert dispatch.calls == []


async def test_invalid_action_rejected_with_one_error():
    dispatch = _WidgetDispatch()
    result = await dispatch.run([_op(action="launch"), _op(id=3)])
    assert result["errors"] == ["Invalid operation-action: launch"]
    assert result["widget_create"] == ["created 3"]


async def test_missing_action_rejected():
    dispatch = _WidgetDispatch()
    result = await dispatch.run([{"type": "widget"}])
    assert result["errors"] == ["Invalid operation-action: (missing)"]


async def test_invalid_type_and_action_yields_single_error():
    dispatch = _WidgetDispatch()
    result = await dispatch.run([{"type": "bogus", "action": "launch"}])
    assert len(result["errors"]) == 1


async def test_non_string_type_rejected():
    dispatch = _WidgetDispatch()
    result = await dispatch.run([{"type": 7, "action": "create"}])
    assert result["errors"] == ["Invalid operation-type: 7"]


async def test_non_mapping_request_rejected():
    dispatch = _WidgetDispatch()
    result = await dispatch.run(["widget_create", _op(id=1)])
    assert len(result["errors"]) == 1
    assert "expected a mapping" in result["errors"][0]
    assert result["widget_create"] == ["created 1"]


async def test_pair_without_handler_rejected_and_siblings_run():
    dispatch = _WidgetDispatch()
    result = await dispatch.run([
        _op("gadget", "create", id=1),
        _op(id=2),
    ])
    assert len(result["errors"]) == 1
    assert "gadget_create" in result["errors"][0]
    assert result["widget_create"] == ["created 2"]


async def test_all_load_errors_collected_before_execution():
    dispatch = _WidgetDispatch()
    batch = dispatch.load([
        _op("bogus"),
        _op(action="launch"),
        _op("gadget", "delete"),
        _op(id=1),
    ])
    assert len(batch.errors) == 3
    assert [op.handler_id for op in batch.operations] == ["widget_create"]
    assert dispatch.calls == []


async def test_vocabulary_match_ignores_case():
    dispatch = _WidgetDispatch()
    result = await dispatch.run([{"type": "Widget", "action": "CREATE", "id": 5}])
    assert result == {"widget_create": ["created 5"], "errors": []}


async def test_payload_is_stripped_of_type_and_action():
    dispatch = _WidgetDispatch()
    batch = dispatch.load([_op(id=1, colour="red")])
    assert batch.operations[0].payload == {"id": 1, "colour": "red"}


# ─── Execution ───────────────────────────────────────────────────

async def test_operations_run_in_submission_order():
    dispatch = _WidgetDispatch()
    result = await dispatch.run([
        _op(action="delete", id=1),
        _op(id=2),
        _op(action="delete", id=3),
    ])
    assert [call[0] for call in dispatch.calls] == [
        "widget_delete", "widget_create", "widget_delete",
    ]
    assert list(result) == ["widget_delete", "widget_create", "errors"]
    assert result["widget_delete"] == [
        "deleted 1", "cleanup done", "deleted 3", "cleanup done",
    ]


async def test_first_failure_aborts_remaining_operations():
    dispatch = _WidgetDispatch()
    result = await dispatch.run([
        _op(id=1),
        _op(action="explode", id=2),
        _op(id=3),
        _op(action="delete", id=4),
    ])
    assert [call[0] for call in dispatch.calls] == ["widget_create", "widget_explode"]
    assert result == {
        "widget_create": ["created 1"],
        "errors": ["Operation: widget_explode: boom"],
    }


async def test_load_errors_kept_alongside_execution_failure():
    dispatch = _WidgetDispatch()
    result = await dispatch.run([_op("bogus"), _op(action="explode")])
    assert result["errors"] == [
        "Invalid operation-type: bogus",
        "Operation: widget_explode: boom",
    ]


async def test_cache_invalidated_once_per_successful_operation():
    invalidator = _Invalidator()
    dispatch = _WidgetDispatch(invalidator)
    await dispatch.run([_op(id=1), _op(action="delete", id=2), _op(action="explode")])
    assert invalidator.calls == 2


async def test_cache_invalidation_failure_aborts_batch():
    invalidator = _Invalidator(fail_on=2)
    dispatch = _WidgetDispatch(invalidator)
    result = await dispatch.run([_op(id=1), _op(id=2), _op(id=3)])
    assert len(dispatch.calls) == 2
    assert result == {
        "widget_create": ["created 1"],
        "errors": ["Operation: widget_create: cache down"],
    }


async def test_async_cache_invalidator_is_awaited():
    calls = []

    async def invalidate():
        calls.append("flushed")

    dispatch = _WidgetDispatch(invalidate)
    await dispatch.run([_op(id=1), _op(id=2)])
    assert calls == ["flushed", "flushed"]


async def test_execute_never_raises_on_handler_error():
    dispatch = _WidgetDispatch()
    result = await dispatch.run([_op(action="explode")])
    assert result == {"errors": ["Operation: widget_explode: boom"]}


async def test_execute_with_loaded_context():
    dispatch = _WidgetDispatch()
    batch = dispatch.load([_op(id=1)])
    result = await dispatch.execute(batch)
    assert result == {"widget_create": ["created 1"], "errors": []}
    assert batch.results == {"widget_create": ["created 1"]}


async def test_dispatcher_reusable_across_batches():
    dispatch = _WidgetDispatch()
    first = await dispatch.run([_op(action="explode")])
    second = await dispatch.run([_op(id=9)])
    assert first["errors"] == ["Operation: widget_explode: boom"]
    assert second == {"widget_create": ["created 9"], "errors": []}


# ─── Dry-run ─────────────────────────────────────────────────────

async def test_dry_run_exposed_to_handlers():
    dispatch = _WidgetDispatch(dry_run=True)
    batch = dispatch.load([_op(id=1)])
    assert batch.dry_run is True
    await dispatch.execute(batch)
    assert dispatch.is_dry_run
    assert dispatch.seen_dry_run == [True]


async def test_dry_run_does_not_change_dispatch():
    requests = [_op(id=1), _op("bogus"), _op(action="explode"), _op(id=2)]
    live = await _WidgetDispatch().run(requests)
    dry = await _WidgetDispatch(dry_run=True).run(requests)
    assert live == dry


# ─── Flattened output ────────────────────────────────────────────

async def test_run_flat_returns_linear_log():
    dispatch = _WidgetDispatch()
    result = await dispatch.run_flat([_op(id=1), _op(action="delete", id=2)])
    assert result == {
        "log": ["widget_create", "created 1", "widget_delete", "deleted 2", "cleanup done"],
        "errors": [],
    }


def test_handler_ids_lists_registered_handlers():
    assert _WidgetDispatch().handler_ids == frozenset({
        "widget_create", "widget_delete", "widget_explode",
    })
