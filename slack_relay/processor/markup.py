"""
Convert model markdown into Slack mrkdwn.
"""
import re


# "." minus \r and the Unicode line and paragraph separators
LINE_CHAR = "[^\r\u2028\u2029]"

HEADING = re.compile(rf"^#{{1,6}} ({LINE_CHAR}+)")
BOLD = re.compile(rf"\*\*({LINE_CHAR}+?)\*\*")
# Two padded bold spans in a row leave an extra space on each side
BOLD_WITH_DOUBLE_SPACE = re.compile(rf" ( \*{LINE_CHAR}+?\* ) ")
STRIKE = re.compile(rf"~~({LINE_CHAR}+)~~")
LINK = re.compile(r"\[([^\]]+)\]\((https://[^)]+)\)")
LIST_ITEM = re.compile(rf"^( *)[*-] ({LINE_CHAR}+)$")
CODE_BLOCK_START = re.compile(rf"^```{LINE_CHAR}+$")


def _convert_line(line: str) -> str:
    title = HEADING.match(line)
    if title:
        line = f"*{title.group(1)}*"

    line = BOLD.sub(r" *\1* ", line)
    line = BOLD_WITH_DOUBLE_SPACE.sub(r"\1", line)
    line = STRIKE.sub(r"~\1~", line)
    line = LINK.sub(r"<\2|\1>", line)
    line = LIST_ITEM.sub("\\1\u2022  \\2", line)

    if CODE_BLOCK_START.match(line):
        line = "```"
    return line


def to_platform_markup(model_text: str) -> str:
    """
    Rewrite markdown produced by a model into Slack markup.

    Rules run per line in a fixed order: headings, bold, strikethrough,
    https links, bullets, code fence language tags. Anything else passes
    through unchanged and no line is ever dropped.

    Args:
        model_text: Reply text from the provider

    Returns:
        Text ready for chat.postMessage
    """
    return "\n".join(_convert_line(line) for line in model_text.split("\n"))
