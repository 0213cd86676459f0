"""Split raw text into line sequences."""

DEFAULT_LINE_TERMINATOR = "\n"


def split_lines(text: str, terminator: str = DEFAULT_LINE_TERMINATOR) -> list[str]:
    """Split text on a line terminator.

    The terminator is not kept. Nothing else is normalised, so a trailing
    terminator produces a final empty line, and the patch of a
    terminator-ended file ends with an empty context line (" \n").

    Args:
        text: Raw text.
        terminator: Line terminator to split on.

    Returns:
        List of lines. Empty text gives an empty list.

    Raises:
        ValueError: If terminator is empty.
    """
    if not terminator:
        raise ValueError("Line terminator must not be empty")
    if not text:
        return []
    return text.split(terminator)


def decode_lines(
    data: bytes,
    encoding: str = "utf-8",
    terminator: str = DEFAULT_LINE_TERMINATOR,
) -> list[str]:
    """Decode bytes strictly and split them into lines."""
    return split_lines(data.decode(encoding), terminator)
