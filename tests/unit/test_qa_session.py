"""Unit tests for the ask-a-question session."""

import asyncio

import pytest

from client.app.api.errors import RemoteError, TransportError
from client.app.models.answer import AskResponse
from client.app.sync.lifecycle import LifecyclePhase
from client.app.sync.qa import QaSession
from client.app.sync.store import DocumentStore


async def make_session(backend) -> tuple[DocumentStore, QaSession]:
    store = DocumentStore(backend, debounce_ms=10)
    await store.load()
    return store, QaSession(store, backend)


@pytest.mark.asyncio
async def test_ask_success_matches_response_exactly(fake_backend, sample_answer) -> None:
    """Scenario: answer and sources exactly match the response."""
    fake_backend.answer = sample_answer
    store, qa = await make_session(fake_backend)

    settlement = await qa.ask("What is X?")

    assert settlement is not None and settlement.ok
    assert fake_backend.calls[-1] == ("ask", (1, "What is X?"))
    assert qa.lifecycle().phase == LifecyclePhase.SUCCESS
    assert qa.answer is not None
    assert qa.answer.answer == "X is Y"
    assert [(s.page, s.snippet) for s in qa.answer.sources] == [(3, "Y defined here")]
    assert qa.answer.document_id == 1
    assert qa.error is None


@pytest.mark.asyncio
async def test_new_ask_clears_answer_before_result(fake_backend, sample_answer) -> None:
    """Test a new ask clears the previous answer before it settles."""
    fake_backend.answer = sample_answer
    store, qa = await make_session(fake_backend)
    await qa.ask("What is X?")

    gate = asyncio.Event()
    fake_backend.gates["ask"] = gate
    task = asyncio.create_task(qa.ask("And Z?"))
    await asyncio.sleep(0)

    assert qa.answer is None
    assert qa.error is None
    assert qa.is_pending

    fake_backend.answer = AskResponse(answer="Z is W", sources=[])
    gate.set()
    await task

    assert qa.answer.answer == "Z is W"
    assert qa.answer.sources == []


@pytest.mark.asyncio
async def test_ask_failure_clears_answer_and_sets_error(fake_backend, sample_answer) -> None:
    """Test a failed ask clears the answer and sets the error."""
    fake_backend.answer = sample_answer
    store, qa = await make_session(fake_backend)
    await qa.ask("What is X?")

    fake_backend.failures["ask"] = RemoteError("PDF has no extractable text", status_code=422)
    settlement = await qa.ask("Again?")

    assert settlement is not None and not settlement.ok
    assert qa.answer is None
    assert qa.error == "PDF has no extractable text"
    assert qa.lifecycle().is_error


@pytest.mark.asyncio
async def test_ask_transport_failure_reports_network_error(fake_backend) -> None:
    """Test a transport failure during ask reports the network message."""
    store, qa = await make_session(fake_backend)
    fake_backend.failures["ask"] = TransportError()

    await qa.ask("Anyone there?")

    assert qa.error == "Network error"
    assert qa.answer is None


@pytest.mark.asyncio
async def test_ask_without_selection_makes_no_call(backend_factory) -> None:
    """Test ask without a selected document makes no call."""
    backend = backend_factory([])
    store, qa = await make_session(backend)

    assert await qa.ask("Question?") is None
    assert backend.count("ask") == 0
    assert qa.lifecycle().phase == LifecyclePhase.IDLE


@pytest.mark.asyncio
async def test_blank_question_makes_no_call(fake_backend) -> None:
    """Test a blank question makes no call."""
    store, qa = await make_session(fake_backend)

    assert await qa.ask("   ") is None
    assert fake_backend.count("ask") == 0


@pytest.mark.asyncio
async def test_ask_uses_current_selection(fake_backend) -> None:
    """Test ask targets the currently selected document."""
    store, qa = await make_session(fake_backend)
    store.select_for_qa(3)

    await qa.ask("About C?")

    assert fake_backend.calls[-1] == ("ask", (3, "About C?"))


@pytest.mark.asyncio
async def test_overlapping_asks_render_latest(fake_backend) -> None:
    """First ask settling after the second must not replace its answer."""
    store, qa = await make_session(fake_backend)
    gate = asyncio.Event()
    pending = [
        (gate, AskResponse(answer="first", sources=[])),
        (None, AskResponse(answer="second", sources=[])),
    ]

    async def ask_document(doc_id, question):
        event, response = pending.pop(0)
        if event is not None:
            await event.wait()
        return response

    fake_backend.ask_document = ask_document

    first = asyncio.create_task(qa.ask("one"))
    await asyncio.sleep(0)
    await qa.ask("two")
    gate.set()
    stale = await first

    assert not stale.current
    assert qa.answer.answer == "second"
    assert qa.answer.question == "two"


@pytest.mark.asyncio
async def test_selection_kept_while_question_pending(fake_backend) -> None:
    """Test the selection stays put while a question is pending."""
    store, qa = await make_session(fake_backend)
    gate = asyncio.Event()
    fake_backend.gates["ask"] = gate

    task = asyncio.create_task(qa.ask("slow?"))
    await asyncio.sleep(0)
    await store.load()

    assert store.selected_id == 1
    gate.set()
    await task
