# message_handler.py - Versioned JSON envelopes carrying OT protocol messages
import hashlib
import json
import secrets
import time
from base64 import b64encode, b64decode
from binascii import Error as Base64Error
from typing import Optional, Dict, Any, Tuple

from ..core.oblivious_transfer import SetupMessage, ChoiceMessage, TransferMessage
from .error_handler import ErrorCode, create_message_error


class MessageHandler:
    """
    Wraps protocol messages in opaque envelopes for whatever transport the
    caller uses. Delivery, ordering and replay protection belong to that
    transport; envelopes only carry enough to route and sanity-check them.
    """
    PROTOCOL_VERSION = "1.0"
    MESSAGE_TYPES = {
        'SETUP': SetupMessage.MESSAGE_TYPE,
        'CHOICE': ChoiceMessage.MESSAGE_TYPE,
        'TRANSFER': TransferMessage.MESSAGE_TYPE,
    }
    MESSAGE_CLASSES = {
        SetupMessage.MESSAGE_TYPE: SetupMessage,
        ChoiceMessage.MESSAGE_TYPE: ChoiceMessage,
        TransferMessage.MESSAGE_TYPE: TransferMessage,
    }
    REQUIRED_FIELDS = ('version', 'message_id', 'session_id', 'timestamp', 'message_type', 'payload')

    @staticmethod
    def new_session_id() -> str:
        """Random identifier tying the three messages of one run together"""
        return secrets.token_hex(16)

    def create_message(self, session_id: str, message) -> Dict[str, Any]:
        """Create an envelope for a SetupMessage, ChoiceMessage or TransferMessage"""
        message_type = getattr(message, 'MESSAGE_TYPE', None)
        if message_type not in self.MESSAGE_CLASSES or not isinstance(message, self.MESSAGE_CLASSES[message_type]):
            raise create_message_error(
                ErrorCode.MESSAGE_FORMAT_INVALID,
                f"Cannot wrap object of type {type(message).__name__}"
            )

        payload = message.to_bytes()
        return {
            'version': self.PROTOCOL_VERSION,
            'message_id': self._generate_message_id(session_id, message_type, payload),
            'session_id': session_id,
            'timestamp': int(time.time() * 1000),  # milliseconds
            'message_type': message_type,
            'payload': b64encode(payload).decode(),
            'metadata': {
                'group': 'P-256',
                'point_encoding': 'SEC1-compressed',
                'framing': 'u32be-length-prefixed' if message_type == TransferMessage.MESSAGE_TYPE else 'raw',
            }
        }

    def _generate_message_id(self, session_id, message_type, payload):
        id_data = f"{session_id}:{message_type}:{time.time()}:".encode() + payload[:32]
        return hashlib.sha256(id_data).hexdigest()[:16]

    def _check_message(self, message, expected_type, session_id):
        if not isinstance(message, dict):
            return ErrorCode.MESSAGE_FORMAT_INVALID, "Envelope must be a JSON object"

        for field in self.REQUIRED_FIELDS:
            if field not in message:
                return ErrorCode.MESSAGE_FORMAT_INVALID, f"Missing required field: {field}"

        if message['version'] != self.PROTOCOL_VERSION:
            return ErrorCode.MESSAGE_VERSION_UNSUPPORTED, f"Unsupported protocol version: {message['version']}"

        if message['message_type'] not in self.MESSAGE_CLASSES:
            return ErrorCode.MESSAGE_FORMAT_INVALID, f"Invalid message type: {message['message_type']}"

        if expected_type is not None and message['message_type'] != expected_type:
            return (ErrorCode.MESSAGE_TYPE_UNEXPECTED,
                    f"Expected message type {expected_type}, got {message['message_type']}")

        if session_id is not None and message['session_id'] != session_id:
            return ErrorCode.MESSAGE_SESSION_MISMATCH, f"Envelope belongs to session {message['session_id']}"

        if not isinstance(message['payload'], str):
            return ErrorCode.MESSAGE_FORMAT_INVALID, "Payload must be a base64 string"

        return None

    def validate_message(self, message, expected_type: Optional[int] = None,
                         session_id: Optional[str] = None) -> Tuple[bool, str]:
        """Validate envelope format; returns (valid, reason)"""
        problem = self._check_message(message, expected_type, session_id)
        if problem:
            return False, problem[1]
        return True, "Message valid"

    def open_message(self, message, expected_type: Optional[int] = None,
                     session_id: Optional[str] = None):
        """Validate an envelope and decode the protocol message inside it"""
        problem = self._check_message(message, expected_type, session_id)
        if problem:
            code, reason = problem
            message_id = message.get('message_id') if isinstance(message, dict) else None
            raise create_message_error(code, reason, {'message_id': message_id})

        try:
            payload = b64decode(message['payload'], validate=True)
        except (Base64Error, ValueError) as e:
            raise create_message_error(ErrorCode.MESSAGE_FORMAT_INVALID, f"Invalid payload encoding: {e}")

        return self.MESSAGE_CLASSES[message['message_type']].from_bytes(payload)

    def serialize_message(self, message):
        """Serialize envelope to JSON for transmission"""
        return json.dumps(message)

    def deserialize_message(self, message_json):
        """Deserialize envelope from JSON"""
        try:
            return json.loads(message_json)
        except json.JSONDecodeError as e:
            raise create_message_error(ErrorCode.MESSAGE_FORMAT_INVALID, f"Invalid JSON message: {e}")
