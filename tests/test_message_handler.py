# test_message_handler.py - JSON envelopes around protocol messages
import pytest

from ot_protocol.core.oblivious_transfer import (
    OTSender, OTReceiver, SetupMessage, ChoiceMessage, TransferMessage
)
from ot_protocol.utils.message_handler import MessageHandler
from ot_protocol.utils.error_handler import ErrorCode, MessageError, InvalidGroupElementError


@pytest.fixture
def handler():
    return MessageHandler()


@pytest.fixture
def run_messages():
    sender, receiver = OTSender(), OTReceiver()
    sender_state, msg1 = sender.init()
    receiver_state, msg2 = receiver.init(0, msg1)
    msg3 = sender.encrypt(sender_state, msg2, b"record zero", b"record one")
    return msg1, msg2, msg3


def test_envelope_fields(handler, run_messages):
    msg1 = run_messages[0]
    session_id = handler.new_session_id()
    envelope = handler.create_message(session_id, msg1)

    assert envelope['version'] == MessageHandler.PROTOCOL_VERSION
    assert envelope['session_id'] == session_id
    assert envelope['message_type'] == MessageHandler.MESSAGE_TYPES['SETUP']
    assert len(envelope['message_id']) == 16
    assert handler.validate_message(envelope) == (True, "Message valid")


def test_each_message_type_survives_json(handler, run_messages):
    session_id = handler.new_session_id()
    for message in run_messages:
        wire = handler.serialize_message(handler.create_message(session_id, message))
        opened = handler.open_message(handler.deserialize_message(wire),
                                      expected_type=message.MESSAGE_TYPE,
                                      session_id=session_id)
        assert type(opened) is type(message)
        assert opened.to_bytes() == message.to_bytes()


def test_full_run_over_envelopes(handler):
    sender, receiver = OTSender(), OTReceiver()
    session_id = handler.new_session_id()

    sender_state, msg1 = sender.init()
    wire1 = handler.serialize_message(handler.create_message(session_id, msg1))
    bob_msg1 = handler.open_message(handler.deserialize_message(wire1), SetupMessage.MESSAGE_TYPE, session_id)

    receiver_state, msg2 = receiver.init(1, bob_msg1)
    wire2 = handler.serialize_message(handler.create_message(session_id, msg2))
    alice_msg2 = handler.open_message(handler.deserialize_message(wire2), ChoiceMessage.MESSAGE_TYPE, session_id)

    msg3 = sender.encrypt(sender_state, alice_msg2, b"left", b"right")
    wire3 = handler.serialize_message(handler.create_message(session_id, msg3))
    bob_msg3 = handler.open_message(handler.deserialize_message(wire3), TransferMessage.MESSAGE_TYPE, session_id)

    assert receiver.decrypt(receiver_state, bob_msg3, bob_msg1) == b"right"


def test_wrong_version_is_rejected(handler, run_messages):
    envelope = handler.create_message("s", run_messages[0])
    envelope['version'] = "0.9"
    valid, reason = handler.validate_message(envelope)
    assert not valid
    assert "Unsupported protocol version" in reason
    with pytest.raises(MessageError) as exc:
        handler.open_message(envelope)
    assert exc.value.error_code == ErrorCode.MESSAGE_VERSION_UNSUPPORTED


def test_missing_field_is_rejected(handler, run_messages):
    envelope = handler.create_message("s", run_messages[1])
    del envelope['payload']
    with pytest.raises(MessageError) as exc:
        handler.open_message(envelope)
    assert exc.value.error_code == ErrorCode.MESSAGE_FORMAT_INVALID


def test_unexpected_type_is_rejected(handler, run_messages):
    envelope = handler.create_message("s", run_messages[2])
    with pytest.raises(MessageError) as exc:
        handler.open_message(envelope, expected_type=SetupMessage.MESSAGE_TYPE)
    assert exc.value.error_code == ErrorCode.MESSAGE_TYPE_UNEXPECTED


def test_unknown_type_is_rejected(handler, run_messages):
    envelope = handler.create_message("s", run_messages[0])
    envelope['message_type'] = 9
    assert handler.validate_message(envelope)[0] is False


def test_foreign_session_is_rejected(handler, run_messages):
    envelope = handler.create_message("session-a", run_messages[0])
    with pytest.raises(MessageError) as exc:
        handler.open_message(envelope, session_id="session-b")
    assert exc.value.error_code == ErrorCode.MESSAGE_SESSION_MISMATCH


def test_invalid_json_is_rejected(handler):
    with pytest.raises(MessageError):
        handler.deserialize_message("{not json")


def test_non_object_envelope_is_rejected(handler):
    assert handler.validate_message(["not", "a", "dict"])[0] is False


def test_invalid_base64_payload_is_rejected(handler, run_messages):
    envelope = handler.create_message("s", run_messages[0])
    envelope['payload'] = "***"
    with pytest.raises(MessageError) as exc:
        handler.open_message(envelope)
    assert exc.value.error_code == ErrorCode.MESSAGE_FORMAT_INVALID


def test_payload_that_is_not_a_point_is_rejected(handler, run_messages):
    envelope = handler.create_message("s", run_messages[1])
    envelope['payload'] = "AA=="
    with pytest.raises(InvalidGroupElementError):
        handler.open_message(envelope)


def test_only_protocol_messages_can_be_wrapped(handler):
    with pytest.raises(MessageError):
        handler.create_message("s", b"raw bytes")
