"""Classification of broker connect failures."""

from typing import Optional

UNKNOWN_ERROR = "Unknown error code"

# MQTT 3.1/3.1.1 CONNACK return codes and their MQTT 5 reason code equivalents
CONNECT_FAILURES = {
    1: "Unacceptable protocol version",
    2: "Identifier rejected",
    3: "Server unavailable",
    4: "Bad user name or password",
    5: "Not authorized",
    0x84: "Unacceptable protocol version",
    0x85: "Identifier rejected",
    0x86: "Bad user name or password",
    0x87: "Not authorized",
    0x88: "Server unavailable",
}


def classify_connect_failure(code: Optional[int]) -> str:
    """Map a connect reason code to a human readable classification.

    C clients report CONNACK codes as negative numbers, so ``-4`` and
    ``4`` both mean bad credentials.
    """
    if code is None:
        return UNKNOWN_ERROR
    code = int(code)
    if -5 <= code < 0:
        code = -code
    return CONNECT_FAILURES.get(code, UNKNOWN_ERROR)
