# demo.py - Oblivious transfer walkthrough and example scenarios
import argparse
import sys
from typing import Dict, Optional

from .config import ProtocolConfig, configure_logging
from .core.oblivious_transfer import OTSender, OTReceiver, run_transfer
from .utils.error_handler import ErrorHandler, ObliviousTransferError
from .utils.message_handler import MessageHandler

SCENARIOS = {
    'records': {
        'title': "Private database lookup",
        'messages': (b"Patient Record #01: Sanjay, Blood Type O+, Allergies: peanuts",
                     b"Patient Record #02: Vikas, Blood Type A-, Allergies: penicillin"),
        'choice': 1,
    },
    'contacts': {
        'title': "Private contact lookup",
        'messages': (b"Alice Johnson: +1-555-0101, alice@example.com",
                     b"Bob Williams: +1-555-0102, bob@example.com"),
        'choice': 1,
    },
    'auction': {
        'title': "Secure auction outcome",
        'messages': (b"Alice wins! (Alice: $100, Bob: $95)",
                     b"Bob wins! (Bob: $100, Alice: $95)"),
        'choice': 1,
    },
}


def run_scenario(name: str, choice: Optional[int] = None,
                 config: Optional[ProtocolConfig] = None) -> Dict[str, object]:
    """Run one named scenario and report whether the right message arrived"""
    scenario = SCENARIOS[name]
    choice = scenario['choice'] if choice is None else choice
    m0, m1 = scenario['messages']

    received = run_transfer(m0, m1, choice, config=config)
    expected = m1 if choice else m0
    return {
        'title': scenario['title'],
        'choice': choice,
        'received': received,
        'success': received == expected,
    }


def walkthrough(m0: bytes, m1: bytes, choice: int,
                config: Optional[ProtocolConfig] = None) -> bytes:
    """
    Step-by-step run with every message passed as a JSON envelope, the way
    two processes would exchange them.
    """
    handler = MessageHandler()
    sender = OTSender(config=config)
    receiver = OTReceiver(config=config)
    session_id = handler.new_session_id()

    print("Step 1: Alice generates her keypair")
    sender_state, msg1 = sender.init()
    wire1 = handler.serialize_message(handler.create_message(session_id, msg1))
    print(f"  Alice -> Bob: {len(wire1)} byte envelope (her public key)\n")

    print(f"Step 2: Bob generates his keypair, encoding choice {choice}")
    msg1_bob = handler.open_message(handler.deserialize_message(wire1),
                                    expected_type=MessageHandler.MESSAGE_TYPES['SETUP'],
                                    session_id=session_id)
    receiver_state, msg2 = receiver.init(choice, msg1_bob)
    wire2 = handler.serialize_message(handler.create_message(session_id, msg2))
    print(f"  Bob -> Alice: {len(wire2)} byte envelope (his public key)")
    print(f"  Alice only sees: {msg2.to_bytes().hex()}")
    print("  (Alice cannot tell which message Bob wants from this key!)\n")

    print("Step 3: Alice encrypts BOTH messages")
    msg2_alice = handler.open_message(handler.deserialize_message(wire2),
                                      expected_type=MessageHandler.MESSAGE_TYPES['CHOICE'],
                                      session_id=session_id)
    msg3 = sender.encrypt(sender_state, msg2_alice, m0, m1)
    wire3 = handler.serialize_message(handler.create_message(session_id, msg3))
    print(f"  Alice -> Bob: {len(wire3)} byte envelope "
          f"({len(msg3.ciphertext0)} + {len(msg3.ciphertext1)} ciphertext bytes)\n")

    print("Step 4: Bob decrypts his chosen message")
    msg3_bob = handler.open_message(handler.deserialize_message(wire3),
                                    expected_type=MessageHandler.MESSAGE_TYPES['TRANSFER'],
                                    session_id=session_id)
    received = receiver.decrypt(receiver_state, msg3_bob, msg1_bob)
    print(f"  Bob can only decrypt message {choice}\n")
    return received


def main(argv=None):
    parser = argparse.ArgumentParser(description="1-out-of-2 oblivious transfer demo")
    parser.add_argument('--choice', type=int, choices=(0, 1), default=1,
                        help="which of the two records Bob retrieves")
    parser.add_argument('--scenario', choices=sorted(SCENARIOS), default=None,
                        help="run a single example scenario instead of the walkthrough")
    parser.add_argument('--length-hiding', type=int, default=None, metavar='BLOCK',
                        help="pad messages to a multiple of BLOCK bytes (1-255)")
    parser.add_argument('--log-level', default=None,
                        help="logging level (defaults to OT_LOG_LEVEL or WARNING)")
    args = parser.parse_args(argv)

    error_handler = ErrorHandler()
    try:
        env_config = ProtocolConfig.from_env()
        config = ProtocolConfig(
            hash_name=env_config.hash_name,
            length_hiding_block_size=(args.length_hiding if args.length_hiding is not None
                                      else env_config.length_hiding_block_size),
            log_level=args.log_level or env_config.log_level,
        )
    except ObliviousTransferError as e:
        error_handler.handle_error(e, "configuration")
        print(f"❌ Invalid configuration: {e}")
        return 2

    configure_logging(config.log_level)

    if args.scenario:
        success, result, error_info = error_handler.safe_execute(
            run_scenario, args.scenario, args.choice, config)
        if not success:
            print(f"❌ {args.scenario} failed: {error_info['error_message']}")
            return 1
        status = "✅" if result['success'] else "❌"
        print(f"{status} {result['title']}: received {result['received'].decode(errors='replace')}")
        return 0 if result['success'] else 1

    print("=" * 60)
    print("         OBLIVIOUS TRANSFER DEMONSTRATION")
    print("=" * 60)
    print()

    record_0, record_1 = SCENARIOS['records']['messages']
    print("Alice (Database) has two records:")
    print(f"  Record 0: {record_0.decode()}")
    print(f"  Record 1: {record_1.decode()}")
    print(f"Bob wants record {args.choice} without Alice learning which one.\n")
    print("--- Protocol Execution ---\n")

    success, received, error_info = error_handler.safe_execute(
        walkthrough, record_0, record_1, args.choice, config)
    if not success:
        print(f"❌ Protocol run failed: {error_info['error_message']}")
        print(f"   Recovery: {error_info['recovery_action']}")
        return 1

    expected = record_1 if args.choice else record_0
    print("--- Result ---\n")
    print(f"Bob received: {received.decode(errors='replace')}")
    if received != expected:
        print("❌ FAILURE: Something went wrong!")
        return 1
    print("✅ SUCCESS: Bob got the correct record!\n")

    print("--- Security Properties ---\n")
    print("Receiver privacy: Alice does NOT know which record Bob queried")
    print("Sender privacy:   Bob can ONLY decrypt the one record he chose")
    print("Caveat:           the keystream cipher is a teaching placeholder")
    print("                  and ciphertext lengths reveal message lengths\n")

    print("=== Additional Examples ===\n")
    all_ok = True
    for name in ('contacts', 'auction'):
        result = run_scenario(name, config=config)
        status = "✅" if result['success'] else "❌"
        print(f"{status} {result['title']}: {result['received'].decode(errors='replace')}")
        all_ok = all_ok and result['success']

    return 0 if all_ok else 1


if __name__ == '__main__':
    sys.exit(main())
