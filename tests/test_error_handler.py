# test_error_handler.py - Error taxonomy and ErrorHandler behaviour
import logging

import pytest

from ot_protocol.utils.error_handler import (
    ErrorHandler, ErrorCode, ObliviousTransferError, CryptographicError,
    MessageError, RandomnessError, InvalidGroupElementError,
    create_crypto_error, create_message_error, create_randomness_error,
    create_group_error
)


def test_error_hierarchy():
    assert issubclass(RandomnessError, CryptographicError)
    assert issubclass(InvalidGroupElementError, MessageError)
    assert issubclass(MessageError, ObliviousTransferError)

    error = create_group_error("bad point", {'prefix': 4})
    assert isinstance(error, InvalidGroupElementError)
    assert str(error) == "GRP_001: bad point"
    assert error.details == {'prefix': 4}


def test_handle_error_reports_code_and_logs(caplog):
    handler = ErrorHandler()
    error = create_crypto_error(ErrorCode.DECRYPTION_FAILED, "Test padding failure", {"detail": "x"})

    with caplog.at_level(logging.ERROR, logger='ot_protocol.errors'):
        info = handler.handle_error(error, "test_context")

    assert info['error_code'] == ErrorCode.DECRYPTION_FAILED.value
    assert info['details'] == {"detail": "x"}
    assert info['context'] == "test_context"
    assert "Test padding failure" in caplog.text


def test_safe_execute_success_and_failure():
    handler = ErrorHandler(enable_logging=False)

    success, result, info = handler.safe_execute(lambda: "ok")
    assert (success, result, info) == (True, "ok", None)

    def failing_operation():
        raise create_randomness_error("source closed")

    success, result, info = handler.safe_execute(failing_operation)
    assert success is False
    assert result is None
    assert info['error_code'] == ErrorCode.RANDOMNESS_FAILED.value
    assert "Abort the run" in info['recovery_action']


def test_operations_are_never_retried():
    handler = ErrorHandler(enable_logging=False)
    calls = []

    def failing_operation():
        calls.append(1)
        raise ValueError("boom")

    handler.safe_execute(failing_operation)
    assert len(calls) == 1
    assert not hasattr(handler, 'retry_operation')


def test_validate_parameter():
    handler = ErrorHandler(enable_logging=False)
    handler.validate_parameter("m0", b"data", (bytes, bytearray))

    with pytest.raises(ObliviousTransferError, match="cannot be None"):
        handler.validate_parameter("m0", None)
    with pytest.raises(ObliviousTransferError, match="bytes or bytearray"):
        handler.validate_parameter("m0", "text", (bytes, bytearray))
    with pytest.raises(ObliviousTransferError, match="must be one of"):
        handler.validate_parameter("choice", 3, int, allowed_values=[0, 1])


@pytest.mark.parametrize("error, fragment", [
    (create_randomness_error("x"), "random source"),
    (create_group_error("x"), "Reject the peer message"),
    (create_message_error(ErrorCode.MESSAGE_VERSION_UNSUPPORTED, "x"), "protocol version"),
    (create_message_error(ErrorCode.MESSAGE_FORMAT_INVALID, "x"), "Discard the message"),
    (create_crypto_error(ErrorCode.DECRYPTION_FAILED, "x"), "same configuration"),
    (ObliviousTransferError(ErrorCode.INVALID_PARAMETER, "x"), "caller-supplied"),
    (ValueError("x"), "fresh randomness"),
])
def test_recovery_suggestions(error, fragment):
    assert fragment in ErrorHandler(enable_logging=False).create_recovery_suggestion(error)


def test_error_statistics():
    handler = ErrorHandler(enable_logging=False)
    handler.handle_error(ValueError("a"))
    handler.handle_error(ValueError("b"))
    handler.handle_error(create_group_error("c"))

    stats = handler.get_error_statistics()
    assert stats['total_errors'] == 3
    assert stats['error_counts'] == {'ValueError': 2, 'InvalidGroupElementError': 1}

    handler.reset_statistics()
    assert handler.get_error_statistics() == {'total_errors': 0, 'error_counts': {}, 'error_rates': {}}
