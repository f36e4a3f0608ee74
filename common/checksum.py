"""Rolling hash used to tell whether a resumed upload still has the same content.

This is a resumability heuristic only. It offers no tamper resistance and is
unrelated to any signature or integrity scheme applied to stored documents.
"""


def rolling_hash(text: str, seed: int = 0) -> int:
    """
    Compute a 32-bit polynomial rolling hash (base 31) over ``text``.

    Args:
        text: String to hash
        seed: Starting accumulator, lets several strings be hashed as one

    Returns:
        Unsigned 32-bit hash value
    """
    h = seed
    for ch in text:
        h = (h * 31 + ord(ch)) & 0xFFFFFFFF
    return h


def compute_data_hash(base64_payload: str) -> str:
    """
    Hash a full base64 payload together with its length.

    Every character is hashed, so an edit anywhere in the document changes
    the result even when the length stays the same.

    Args:
        base64_payload: Full base64 transcoding of the document

    Returns:
        Hex string of the form ``<length>-<hash>``
    """
    return f"{len(base64_payload):x}-{rolling_hash(base64_payload):08x}"


def verify_data_hash(base64_payload: str, expected: str) -> bool:
    """
    Check a payload against a previously recorded hash.

    Args:
        base64_payload: Full base64 transcoding of the document
        expected: Hash stored with the upload checkpoint

    Returns:
        True if the hash matches, False otherwise
    """
    return compute_data_hash(base64_payload) == expected
