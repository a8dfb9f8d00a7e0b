"""
Unit tests for the single-flight action dispatcher.
"""

import asyncio
from io import BytesIO

import pytest
from PIL import Image

from pixshop.editing import (
    ActionDispatcher,
    CropRegion,
    EditSession,
    Hotspot,
    ImageVersion,
    OperationKind,
    Size,
)
from pixshop.errors import CollaboratorError, OperationBusyError, ValidationError


def new_session(data, registry):
    return EditSession(ImageVersion(data=data, origin=OperationKind.UPLOAD), registry)


def run(coro):
    return asyncio.run(coro)


def test_filter_appends_result(png, editor, registry):
    session = new_session(png(100, 200), registry)
    dispatcher = ActionDispatcher(editor)

    version = run(dispatcher.submit(session, OperationKind.FILTER, "  80s synthwave  "))

    assert version is session.current()
    assert version.origin == OperationKind.FILTER
    assert version.filename.startswith("filter-")
    assert len(session.history) == 2
    assert session.pending is None
    assert session.last_error is None
    assert '"80s synthwave"' in editor.prompts[0]


def test_retouch_sends_hotspot_and_clears_it(png, editor, registry):
    session = new_session(png(100, 200), registry)
    session.hotspot = Hotspot(natural_x=50, natural_y=100, display_x=25, display_y=50)
    dispatcher = ActionDispatcher(editor)

    run(dispatcher.submit(session, OperationKind.RETOUCH, "remove mark"))

    assert "(x: 50, y: 100)" in editor.prompts[0]
    assert session.hotspot is None
    assert session.history.cursor == 1


def test_hotspot_moved_during_retouch_survives_commit(png, editor, registry):
    session = new_session(png(100, 200), registry)
    session.hotspot = Hotspot(natural_x=50, natural_y=100, display_x=25, display_y=50)
    dispatcher = ActionDispatcher(editor)
    gate = editor.hold()
    moved = Hotspot(natural_x=10, natural_y=20, display_x=5, display_y=10)

    async def scenario():
        task = asyncio.ensure_future(dispatcher.submit(session, OperationKind.RETOUCH, "remove mark"))
        while session.pending is None:
            await asyncio.sleep(0)
        session.hotspot = moved
        gate.set()
        await task

    run(scenario())

    assert "(x: 50, y: 100)" in editor.prompts[0]
    assert session.hotspot is moved
    assert session.history.cursor == 1


def test_second_submit_while_pending_is_rejected(png, editor, registry):
    """Only one operation runs at a time; the second is rejected, not queued."""
    session = new_session(png(100, 200), registry)
    dispatcher = ActionDispatcher(editor)
    gate = editor.hold()

    async def scenario():
        first = asyncio.ensure_future(dispatcher.submit(session, OperationKind.FILTER, "sepia"))
        while session.pending is None:
            await asyncio.sleep(0)

        with pytest.raises(OperationBusyError):
            await dispatcher.submit(session, OperationKind.FREESTYLE, "add a moon")

        gate.set()
        return await first

    version = run(scenario())

    assert version is not None
    assert len(session.history) == 2
    assert len(editor.prompts) == 1
    assert session.pending is None


def test_success_after_busy_rejection_clears_last_error(png, editor, registry):
    """The busy error from an overlapping submit does not outlive the edit that caused it."""
    session = new_session(png(100, 200), registry)
    dispatcher = ActionDispatcher(editor)
    gate = editor.hold()

    async def scenario():
        first = asyncio.ensure_future(dispatcher.submit(session, OperationKind.FILTER, "sepia"))
        while session.pending is None:
            await asyncio.sleep(0)

        with pytest.raises(OperationBusyError):
            await dispatcher.submit(session, OperationKind.FREESTYLE, "add a moon")
        assert isinstance(session.last_error, OperationBusyError)

        gate.set()
        await first

    run(scenario())

    assert session.last_error is None
    assert len(session.history) == 2


def test_collaborator_failure_leaves_history_unchanged(png, editor, registry):
    session = new_session(png(100, 200), registry)
    before = session.history.versions
    editor.error = CollaboratorError(None, "quota exceeded")
    dispatcher = ActionDispatcher(editor)

    with pytest.raises(CollaboratorError) as excinfo:
        run(dispatcher.submit(session, OperationKind.ADJUST, "warmer"))

    assert excinfo.value.operation == "adjust"
    assert excinfo.value.message == "adjust failed: quota exceeded"
    assert session.history.versions == before
    assert session.pending is None
    assert session.last_error is excinfo.value


def test_unexpected_exception_becomes_collaborator_error(png, editor, registry):
    session = new_session(png(100, 200), registry)
    editor.error = RuntimeError("connection reset")
    dispatcher = ActionDispatcher(editor)

    with pytest.raises(CollaboratorError) as excinfo:
        run(dispatcher.submit(session, OperationKind.BACKGROUND, "a beach"))

    assert excinfo.value.operation == "background"
    assert "connection reset" in excinfo.value.message
    assert len(session.history) == 1


def test_empty_image_is_a_collaborator_error(png, editor, registry):
    session = new_session(png(100, 200), registry)
    editor.result = b""
    dispatcher = ActionDispatcher(editor)

    with pytest.raises(CollaboratorError):
        run(dispatcher.submit(session, OperationKind.FREESTYLE, "add a moon"))

    assert len(session.history) == 1


@pytest.mark.parametrize("kind,instruction", [
    (OperationKind.FREESTYLE, "   "),
    (OperationKind.FILTER, None),
    (OperationKind.RETOUCH, "remove mark"),  # no hotspot
    (OperationKind.CROP, None),  # no selection
])
def test_missing_input_is_rejected_before_any_work(png, editor, registry, kind, instruction):
    session = new_session(png(100, 200), registry)
    dispatcher = ActionDispatcher(editor)

    with pytest.raises(ValidationError):
        run(dispatcher.submit(session, kind, instruction))

    assert editor.prompts == []
    assert session.pending is None
    assert isinstance(session.last_error, ValidationError)


def test_crop_with_broken_aspect_lock_is_rejected(png, editor, registry):
    session = new_session(png(100, 200), registry)
    session.crop = CropRegion(0, 0, 50, 100, aspect=1.0)
    session.crop_surface = Size(50, 100)

    with pytest.raises(ValidationError):
        run(ActionDispatcher(editor).submit(session, OperationKind.CROP))


def test_crop_extracts_natural_pixels(gradient_png, editor, registry):
    session = new_session(gradient_png(100, 200), registry)
    session.crop = CropRegion(10, 20, 15, 15)
    session.crop_surface = Size(50, 100)

    version = run(ActionDispatcher(editor).submit(session, OperationKind.CROP))

    image = Image.open(BytesIO(version.data))
    assert image.size == (30, 30)
    assert image.getpixel((0, 0))[:2] == (20, 40)
    assert version.origin == OperationKind.CROP
    assert session.crop is None
    assert session.crop_surface is None
    assert editor.prompts == []


def test_crop_honours_pixel_density(gradient_png, editor, registry):
    session = new_session(gradient_png(100, 200), registry)
    session.crop = CropRegion(0, 0, 25, 25)
    session.crop_surface = Size(50, 100)

    version = run(ActionDispatcher(editor, pixel_density=2.0).submit(session, OperationKind.CROP))

    assert Image.open(BytesIO(version.data)).size == (100, 100)


def test_successful_edit_clears_crop_selection(png, editor, registry):
    session = new_session(png(100, 200), registry)
    session.crop = CropRegion(0, 0, 10, 10)
    session.crop_surface = Size(50, 100)

    run(ActionDispatcher(editor).submit(session, OperationKind.FILTER, "noir"))

    assert session.crop is None


def test_result_for_closed_session_is_discarded(png, editor, registry):
    session = new_session(png(100, 200), registry)
    dispatcher = ActionDispatcher(editor)
    gate = editor.hold()

    async def scenario():
        task = asyncio.ensure_future(dispatcher.submit(session, OperationKind.FILTER, "sepia"))
        while session.pending is None:
            await asyncio.sleep(0)
        session.close()
        gate.set()
        return await task

    assert run(scenario()) is None
    assert len(session.history) == 1
    assert registry.live_count == 0


def test_submit_after_close_is_rejected(png, editor, registry):
    session = new_session(png(100, 200), registry)
    session.close()

    with pytest.raises(ValidationError):
        run(ActionDispatcher(editor).submit(session, OperationKind.FILTER, "sepia"))


def test_chat_appends_both_messages(png, editor, registry):
    session = new_session(png(10, 10), registry)

    reply = run(ActionDispatcher(editor).send_message(session, "How do I fix red eyes?"))

    assert reply == editor.chat_reply
    assert [m.role for m in session.chat] == ["user", "model"]
    assert session.chat_pending is False


def test_chat_failure_keeps_user_message(png, editor, registry):
    session = new_session(png(10, 10), registry)
    editor.chat_error = CollaboratorError(None, "rate limited")

    with pytest.raises(CollaboratorError) as excinfo:
        run(ActionDispatcher(editor).send_message(session, "hello"))

    assert excinfo.value.operation == "chat"
    assert [(m.role, m.text) for m in session.chat] == [("user", "hello")]
    assert session.chat_pending is False


def test_empty_chat_message_is_rejected(png, editor, registry):
    session = new_session(png(10, 10), registry)

    with pytest.raises(ValidationError):
        run(ActionDispatcher(editor).send_message(session, "  "))

    assert session.chat == []
