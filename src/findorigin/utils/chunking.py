"""Splitting of long chat messages into transport-sized chunks."""

from typing import List

TELEGRAM_MESSAGE_LIMIT = 4000


def _split_long_line(line: str, max_length: int) -> List[str]:
    """Pack the words of one line into pieces of at most max_length."""
    pieces: List[str] = []
    current = ""
    for word in line.split(" "):
        if len(word) > max_length:
            if current:
                pieces.append(current)
            while len(word) > max_length:
                pieces.append(word[:max_length])
                word = word[max_length:]
            current = word
            continue
        candidate = f"{current} {word}" if current else word
        if len(candidate) <= max_length:
            current = candidate
        else:
            pieces.append(current)
            current = word
    if current:
        pieces.append(current)
    return pieces


def split_for_transport(message: str, max_length: int = TELEGRAM_MESSAGE_LIMIT) -> List[str]:
    """Split a message into chunks that fit the transport limit.

    Lines are packed greedily; a line that is too long on its own is split
    at spaces, and a word that is too long is cut. Chunks are stripped of
    surrounding whitespace and empty chunks are dropped.

    Args:
        message: Text to split.
        max_length: Maximum chunk length. Defaults to 4000 (Telegram allows 4096).

    Returns:
        Ordered chunks, each at most max_length characters.

    Raises:
        ValueError: If max_length is not positive.
    """
    if max_length <= 0:
        raise ValueError("max_length must be positive")
    if len(message) <= max_length:
        return [message]

    chunks: List[str] = []
    buffer = ""

    def flush(text: str) -> None:
        text = text.strip()
        if text:
            chunks.append(text)

    for line in message.split("\n"):
        candidate = f"{buffer}\n{line}" if buffer else line
        if len(candidate) <= max_length:
            buffer = candidate
            continue

        flush(buffer)
        if len(line) <= max_length:
            buffer = line
            continue

        pieces = _split_long_line(line, max_length)
        for piece in pieces[:-1]:
            flush(piece)
        buffer = pieces[-1] if pieces else ""

    flush(buffer)
    return chunks
