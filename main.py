from pqenvelope.core.constants import APP_NAME, APP_VERSION
from pqenvelope.core.crypto import generate_key_pair
from pqenvelope.core.exceptions import EnvelopeError
from pqenvelope.logic.message import encrypt_message, decrypt_message
from pqenvelope.logic.symmetric import encrypt_symmetric, decrypt_symmetric
from pqenvelope.logic.private_key import encrypt_private_key
from pqenvelope.logic.group import encrypt_for_group, decrypt_from_group
from pqenvelope.logic.file import encrypt_file, decrypt_file_with_password
from pqenvelope.logic.serialization import create_fingerprint
import logging
import argparse
import sys

logger = logging.getLogger(__name__)

class LevelBasedFormatter(logging.Formatter):
    FORMATS = {
        logging.DEBUG:    "%(asctime)s [%(levelname)s] %(name)s:%(funcName)s:%(lineno)d - %(message)s",
        logging.INFO:     "%(asctime)s [%(levelname)s] -  %(message)s",
        logging.WARNING:  "%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        logging.ERROR:    "%(asctime)s [%(levelname)s] %(name)s:%(funcName)s:%(lineno)d - %(message)s",
        logging.CRITICAL: "%(asctime)s [%(levelname)s] %(name)s:%(funcName)s:%(lineno)d - %(message)s"
    }

    def format(self, record):
        fmt = self.FORMATS.get(record.levelno, self._fmt)
        formatter = logging.Formatter(fmt)
        return formatter.format(record)

def setup_logging(debug: bool) -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(LevelBasedFormatter())
    logger = logging.getLogger()
    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    logger.addHandler(handler)

def parse_args():
    parser = argparse.ArgumentParser(description=f"{APP_NAME} {APP_VERSION} - Post-Quantum envelope encryption demo")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--password", default="correct horse battery staple", help="Password for the symmetric and private-key demos")
    parser.add_argument("--file-size", type=int, default=200 * 1024, help="Payload size (bytes) for the chunked file demo")
    return parser.parse_args()


def run_demo(password: str, file_size: int) -> None:
    alice = generate_key_pair()
    bob   = generate_key_pair()
    logger.info("Alice fingerprint: %s", create_fingerprint(alice.public_key))
    logger.info("Bob fingerprint:   %s", create_fingerprint(bob.public_key))

    envelope = encrypt_message("Hello, Bob!", bob.public_key)
    logger.info("Message: %s", decrypt_message(envelope, bob.private_key))

    envelope = encrypt_symmetric("Notes to self", password)
    logger.info("Symmetric: %s", decrypt_symmetric(envelope, password))

    envelope = encrypt_for_group("Hello, group!", [alice.public_key, bob.public_key])
    for index, member in enumerate((alice, bob)):
        logger.info("Group recipient %d: %s", index, decrypt_from_group(envelope, member.private_key, index))

    protected_key = encrypt_private_key(bob.private_key, password)
    payload = bytes(i % 251 for i in range(file_size))
    encrypted = encrypt_file(payload, bob.public_key)
    decrypted = decrypt_file_with_password(encrypted, password, protected_key)
    logger.info("File: %d bytes in, %d bytes encrypted, round trip %s", len(payload), len(encrypted), "ok" if decrypted == payload else "MISMATCH")


if __name__ == "__main__":
    args = parse_args()
    setup_logging(args.debug)
    try:
        run_demo(args.password, args.file_size)
    except EnvelopeError as e:
        logger.error("Demo failed: %s", e)
        sys.exit(1)
